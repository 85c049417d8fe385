"""Flask routes for the markdown rendering API."""

from flask import current_app, jsonify, make_response, request

from . import bp
from mdcanvas.fonts import get_fonts
from mdcanvas.markdown_render import (HEADING_BLOCK, LIST_BLOCK, PARAGRAPH, LengthExceeded,
                                      RenderSettings, classify_line, render_markdown,
                                      segment_inline, trim_line, validate_markdown)
from mdcanvas.utils import png_bytes_to_base64, request_markdown

# blocks whose content runs through the inline segmenter when drawn
INLINE_BLOCKS = (PARAGRAPH, LIST_BLOCK)


@bp.route('/markdown/render', methods=['POST'])
def render_markdown_api():
    """Render markdown to an 800x600 PNG (or base64 JSON with return_format=base64)."""
    markdown, params = request_markdown(request)
    return_format = params.get('return_format', 'png')

    settings = RenderSettings.from_config(current_app.config)
    try:
        png = render_markdown(markdown, current_app.extensions['font_book'], settings)
    except LengthExceeded as e:
        current_app.logger.info('Render rejected: %s', str(e))
        return jsonify({'error': str(e)}), 413
    except ValueError as e:
        current_app.logger.info('Render rejected: %s', str(e))
        return jsonify({'error': str(e)}), 400
    except Exception as e:
        current_app.logger.error('Rendering failed: %s', str(e), exc_info=True)
        return jsonify({'error': str(e)}), 500

    current_app.logger.info('Rendered markdown card (%d characters, %d bytes)', len(markdown), len(png))
    if return_format == 'base64':
        return jsonify({'image': png_bytes_to_base64(png)})

    response = make_response(png)
    response.headers.set('Content-type', 'image/png')
    return response


@bp.route('/markdown/blocks', methods=['POST'])
def markdown_blocks_api():
    """Show how each line is classified and segmented, without drawing."""
    markdown, _ = request_markdown(request)
    validated = validate_markdown(markdown, current_app.config['MARKDOWN_MAX_LENGTH'])

    lines = []
    for raw_line in validated.split('\n'):
        block = classify_line(trim_line(raw_line))
        entry = {'kind': block.kind, 'content': block.content}
        if block.kind == HEADING_BLOCK:
            entry['level'] = block.level
        if block.kind == LIST_BLOCK:
            entry['ordered'] = block.ordered
        if block.kind in INLINE_BLOCKS:
            entry['spans'] = [
                {'kind': span.kind, 'text': span.text, 'start': span.start, 'end': span.end}
                for span in segment_inline(block.content)
            ]
        lines.append(entry)
    return jsonify({'lines': lines})


@bp.route('/fonts', methods=['GET'])
def fonts_api():
    """List the discovered font families."""
    return jsonify({
        'families': get_fonts().fontlist(),
        'sans': current_app.config['FONT_SANS_FAMILY'],
        'monospace': current_app.config['FONT_MONO_FAMILY'],
        'emoji': current_app.config['EMOJI_FONT_FAMILY'],
    })
