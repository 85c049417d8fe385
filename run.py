#!/usr/bin/env python
# -*- coding: utf-8 -*-

import argparse
import logging

from config import Config

logging.basicConfig(level=getattr(logging, 'INFO', logging.INFO))


def parse_args():
    parser = argparse.ArgumentParser(description='Render markdown snippets to PNG cards over HTTP.')
    parser.add_argument('--host', default=False,
                        help='Address to listen on (default: {})'.format(Config.SERVER_HOST))
    parser.add_argument('--port', default=False, type=int,
                        help='Port to listen on (default: {})'.format(Config.SERVER_PORT))
    parser.add_argument('--font-folder', default=False,
                        help='Additional folder to scan for fonts.')
    parser.add_argument('--emoji-font', default=False,
                        help='Font file used as emoji fallback face.')
    return parser.parse_args()


def overrides_from_args(args):
    overrides = {}
    if args.host:
        overrides['SERVER_HOST'] = args.host
    if args.port:
        overrides['SERVER_PORT'] = args.port
    if args.font_folder:
        overrides['FONT_FOLDER'] = args.font_folder
    if args.emoji_font:
        overrides['EMOJI_FONT_PATH'] = args.emoji_font
    return overrides


if __name__ == "__main__":
    from mdcanvas import create_app

    app = create_app(overrides=overrides_from_args(parse_args()))
    app.logger.setLevel(logging.INFO)
    app.run(host = app.config['SERVER_HOST'], port = app.config['SERVER_PORT'])
