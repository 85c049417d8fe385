from flask import current_app, jsonify

from . import bp
from mdcanvas.markdown_render import LengthExceeded, MarkdownValidationError


@bp.app_errorhandler(MarkdownValidationError)
def validation_error(error):
    status = 413 if isinstance(error, LengthExceeded) else 400
    current_app.logger.info('Rejected markdown input: %s', error)
    return jsonify({'error': str(error)}), status


@bp.app_errorhandler(404)
def not_found_error(error):
    return jsonify({'error': 'Not found'}), 404


@bp.app_errorhandler(405)
def method_not_allowed_error(error):
    return jsonify({'error': 'Method not allowed'}), 405


@bp.app_errorhandler(500)
def internal_error(error):
    current_app.logger.error('Unhandled error: %s', error)
    return jsonify({'error': 'Internal server error'}), 500
