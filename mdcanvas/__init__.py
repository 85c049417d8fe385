#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
This is a web service that renders short markdown snippets to PNG cards.
"""

from flask import Flask
from flask_bootstrap import Bootstrap

from . import fonts
from config import Config

bootstrap = Bootstrap()

FONTS = None


def create_app(config_class=Config, overrides=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    app.config.from_pyfile('application.py', silent=True)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config['LOG_LEVEL'])

    main(app)

    bootstrap.init_app(app)

    from mdcanvas.main import bp as main_bp
    app.register_blueprint(main_bp)

    from mdcanvas.api import bp as api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    from mdcanvas.errors import bp as errors_bp
    app.register_blueprint(errors_bp)

    return app


def main(app):
    global FONTS

    FONTS = fonts.init_fonts(app.config['FONT_FOLDER'],
                             app.config['EMOJI_FONT_PATH'],
                             app.config['EMOJI_FONT_FAMILY'])

    if not FONTS.fonts_available():
        app.logger.warning(
            'No fonts were found on your system, falling back to the built-in default font.')

    for key in ('FONT_SANS_FAMILY', 'FONT_MONO_FAMILY'):
        family = app.config[key]
        if family in FONTS.fonts:
            app.logger.debug('Using {} for {}'.format(family, key))
        else:
            app.logger.warning('Font family {} ({}) is not installed.'.format(family, key))

    if app.config['EMOJI_FONT_FAMILY'] not in FONTS.fonts:
        app.logger.warning('Emoji font %s is not available, emoji are drawn with the text font.',
                           app.config['EMOJI_FONT_FAMILY'])

    app.extensions['font_book'] = fonts.FontBook(FONTS,
                                                 app.config['FONT_SANS_FAMILY'],
                                                 app.config['FONT_MONO_FAMILY'])
