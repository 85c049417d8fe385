# -*- coding: utf-8 -*-

import base64
from io import BytesIO


def image_to_png_bytes(im):
    image_buffer = BytesIO()
    im.save(image_buffer, format="PNG")
    image_buffer.seek(0)
    return image_buffer.read()


def png_bytes_to_base64(data):
    return base64.b64encode(data).decode('ascii')


def request_markdown(request):
    """Pull the markdown source from a JSON body or a form field."""
    payload = request.get_json(force=False, silent=True)
    if isinstance(payload, dict) and 'markdown' in payload:
        return payload['markdown'], payload
    return request.values.get('markdown', request.values.get('text', '')), request.values
