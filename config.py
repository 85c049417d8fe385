"""
This are the default settings. (DONT CHANGE THIS FILE)
Adjust your settings in 'instance/application.py'
"""

import os
import logging

basedir = os.path.abspath(os.path.dirname(__file__))

class Config(object):
    DEBUG = False
    TESTING = False
    LOG_LEVEL = logging.WARNING

    SERVER_PORT = 8013
    SERVER_HOST = '0.0.0.0'

    # Inputs longer than this are rejected before anything is drawn
    MARKDOWN_MAX_LENGTH = 6000

    CANVAS_WIDTH = 800
    CANVAS_HEIGHT = 600
    CANVAS_BACKGROUND = '#2B2D31'
    CANVAS_FOREGROUND = '#FFFFFF'

    # Concrete families behind the generic 'sans-serif' and 'monospace' faces
    FONT_SANS_FAMILY = 'DejaVu Sans'
    FONT_MONO_FAMILY = 'DejaVu Sans Mono'

    # Extra folder scanned with fc-scan on startup (optional)
    FONT_FOLDER = ''

    # Emoji fallback face, registered once per process
    EMOJI_FONT_PATH = os.path.join(basedir, 'fonts', 'AppleColorEmoji@2x.ttf')
    EMOJI_FONT_FAMILY = 'Apple Emoji'

    BOOTSTRAP_SERVE_LOCAL = True
