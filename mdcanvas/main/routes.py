from flask import current_app, render_template

from . import bp

SAMPLE_MARKDOWN = """# Hello 👋
**bold** and *italic*, __underline__ and ~~strike~~
- use `render_markdown()` from Python
1. or POST to /api/markdown/render
> quoted text
---
Plain paragraph 🎉 2024"""


@bp.route('/')
def index():
    """Editor page with a live preview."""
    return render_template('index.html',
                           sample=SAMPLE_MARKDOWN,
                           max_length=current_app.config['MARKDOWN_MAX_LENGTH'],
                           width=current_app.config['CANVAS_WIDTH'],
                           height=current_app.config['CANVAS_HEIGHT'])
