import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import emoji

from .canvas import Surface
from .fonts import GENERIC_MONO, GENERIC_SANS, FontBook, FontSpec, get_fonts

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 6000

LEFT_MARGIN = 20
LIST_INDENT = 20
BASE_FONT_SIZE = 16
LINE_HEIGHT = 24
RULE_HEIGHT = 30
UNDERLINE_OFFSET = 18
STRIKE_OFFSET = 8
CODE_PADDING = 10
CODE_HEIGHT = 20
BULLET = '•'
QUOTE_PREFIX = '| '

DIVIDER_COLOR = '#44475A'
QUOTE_COLOR = '#BBBBBB90'
CODE_BACKGROUND = '#353535'
CODE_FOREGROUND = '#D1B57B'

HEADING = re.compile(r"^#{1,6}\s")
HEADING_MARKER = re.compile(r"^#{1,6}")
BLOCKQUOTE = re.compile(r"^>")
BLOCKQUOTE_MARKER = re.compile(r"^>\s*")
# whitespace removed around each line, including the byte order mark
LINE_EDGES = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+$")
RULE = re.compile(r"^-{3,}")
LIST_ITEM = re.compile(r"^- |^[0-9]+\.")

INLINE = re.compile(
    r"\*\*__(?P<bold_underline>[^*]+)__\*\*"
    r"|__\*\*(?P<underline_bold>[^*]+)\*\*__"
    r"|__(?P<underline>[^_]+)__"
    r"|\*\*(?P<bold>[^*]+)\*\*"
    r"|\*(?P<italic>[^*]+)\*"
    r"|~~(?P<strikethrough>[^~]+)~~"
    r"|`(?P<code>[^`]+)`"
)

# Ordered marker normalization passes. Each currently maps matched syntax to
# itself; the table is where canonicalization rules go.
CORRECTIONS = (
    (re.compile(r"\*\*__([^*]+)__\*\*"), r"**__\1__**"),
    (re.compile(r"__\*\*([^*]+)\*\*__"), r"__**\1**__"),
    (re.compile(r"__([^_]+)__"), r"__\1__"),
    (re.compile(r"\*\*([^*]+)\*\*"), r"**\1**"),
    (re.compile(r"\*([^*]+)\*"), r"*\1*"),
    (re.compile(r"~~([^~]+)~~"), r"~~\1~~"),
    (re.compile(r"`([^`]+)`"), r"`\1`"),
)


class MarkdownValidationError(ValueError):
    pass


class TypeMismatch(MarkdownValidationError, TypeError):
    pass


class LengthExceeded(MarkdownValidationError):

    def __init__(self, length, limit):
        super().__init__('Input exceeds the maximum length of {} characters.'.format(limit))
        self.length = length
        self.limit = limit


def utf16_length(text: str) -> int:
    return len(text.encode('utf-16-le', 'surrogatepass')) // 2


def validate_markdown(value, max_length: int = MAX_INPUT_LENGTH) -> str:
    """Type and length checks, then the ordered correction passes.

    Length is counted in UTF-16 code units, so most emoji count twice.
    """
    if not isinstance(value, str):
        raise TypeMismatch('Input must be a string, got {}.'.format(type(value).__name__))
    length = utf16_length(value)
    if length > max_length:
        raise LengthExceeded(length, max_length)

    result = value
    for pattern, replacement in CORRECTIONS:
        result = pattern.sub(replacement, result)
    return result


# Block classification

PARAGRAPH = 'paragraph'
HEADING_BLOCK = 'heading'
BLOCKQUOTE_BLOCK = 'blockquote'
RULE_BLOCK = 'rule'
LIST_BLOCK = 'list_item'

BLOCK_KINDS = (HEADING_BLOCK, BLOCKQUOTE_BLOCK, RULE_BLOCK, LIST_BLOCK, PARAGRAPH)


@dataclass(frozen=True)
class Block:
    kind: str
    content: str
    level: int = 0
    ordered: bool = False
    marker: str = ''


def trim_line(line: str) -> str:
    return LINE_EDGES.sub('', line)


def classify_line(line: str) -> Block:
    """Classify a trimmed line; the first matching form wins."""
    if HEADING.match(line):
        level = len(HEADING_MARKER.match(line).group(0))
        return Block(HEADING_BLOCK, HEADING.sub('', line, count=1), level=level)
    if BLOCKQUOTE.match(line):
        return Block(BLOCKQUOTE_BLOCK, BLOCKQUOTE_MARKER.sub('', line, count=1))
    if RULE.match(line):
        return Block(RULE_BLOCK, '')
    match = LIST_ITEM.match(line)
    if match:
        marker = match.group(0)
        return Block(LIST_BLOCK, line[len(marker):], ordered=marker != '- ', marker=marker)
    return Block(PARAGRAPH, line)


# Inline segmentation

PLAIN = 'plain'
BOLD_UNDERLINE = 'bold_underline'
UNDERLINE = 'underline'
BOLD = 'bold'
ITALIC = 'italic'
STRIKETHROUGH = 'strikethrough'
CODE = 'code'

_GROUP_KINDS = {
    'bold_underline': BOLD_UNDERLINE,
    'underline_bold': BOLD_UNDERLINE,
    'underline': UNDERLINE,
    'bold': BOLD,
    'italic': ITALIC,
    'strikethrough': STRIKETHROUGH,
    'code': CODE,
}


@dataclass(frozen=True)
class Span:
    kind: str
    text: str
    start: int
    end: int
    raw: str


def segment_inline(line: str) -> Tuple[Span, ...]:
    """Split a line into styled spans and the plain text between them."""
    spans: List[Span] = []
    last_index = 0
    for match in INLINE.finditer(line):
        if match.start() > last_index:
            text = line[last_index:match.start()]
            spans.append(Span(PLAIN, text, last_index, match.start(), text))
        group = match.lastgroup
        spans.append(Span(_GROUP_KINDS[group], match.group(group), match.start(), match.end(), match.group(0)))
        last_index = match.end()

    if last_index < len(line):
        text = line[last_index:]
        spans.append(Span(PLAIN, text, last_index, len(line), text))
    return tuple(spans)


# Graphemes and fonts

def iter_graphemes(text: str) -> Iterator[str]:
    """
    Yield user-perceived characters.

    Emoji sequences (ZWJ families, flags, keycaps, skin tones) come out as one
    unit; combining marks stay attached to their base character.
    """
    pending = ''
    for token in emoji.analyze(text, non_emoji=True, join_emoji=True):
        if not isinstance(token.value, str):
            if pending:
                yield pending
            pending = token.chars
        elif pending and unicodedata.combining(token.chars):
            pending += token.chars
        else:
            if pending:
                yield pending
            pending = token.chars
    if pending:
        yield pending


# Emoji property characters that emoji.is_emoji only knows as parts of sequences
EMOJI_COMPONENTS = frozenset('#*')
REGIONAL_INDICATORS = range(0x1F1E6, 0x1F200)


def is_emoji(grapheme: str) -> bool:
    if grapheme.isdecimal():
        return False
    if grapheme in EMOJI_COMPONENTS:
        return True
    if len(grapheme) == 1 and ord(grapheme) in REGIONAL_INDICATORS:
        return True
    return emoji.is_emoji(grapheme)


def select_font(grapheme: str, base: FontSpec, emoji_family: str) -> FontSpec:
    if is_emoji(grapheme):
        return base.with_family(emoji_family)
    return base


def style_font(kind: str, size: int = BASE_FONT_SIZE) -> FontSpec:
    if kind in (BOLD, BOLD_UNDERLINE):
        return FontSpec(GENERIC_SANS, size, weight='bold')
    if kind == ITALIC:
        return FontSpec(GENERIC_SANS, size, slant='italic')
    if kind == CODE:
        return FontSpec(GENERIC_MONO, size)
    return FontSpec(GENERIC_SANS, size)


# Layout

@dataclass
class RenderSettings:
    width: int = 800
    height: int = 600
    background: str = '#2B2D31'
    foreground: str = '#FFFFFF'
    max_length: int = MAX_INPUT_LENGTH
    sans_family: str = 'DejaVu Sans'
    mono_family: str = 'DejaVu Sans Mono'
    emoji_family: str = 'Apple Emoji'

    @classmethod
    def from_config(cls, config) -> 'RenderSettings':
        return cls(width=config['CANVAS_WIDTH'],
                   height=config['CANVAS_HEIGHT'],
                   background=config['CANVAS_BACKGROUND'],
                   foreground=config['CANVAS_FOREGROUND'],
                   max_length=config['MARKDOWN_MAX_LENGTH'],
                   sans_family=config['FONT_SANS_FAMILY'],
                   mono_family=config['FONT_MONO_FAMILY'],
                   emoji_family=config['EMOJI_FONT_FAMILY'])


class MarkdownLayout(object):
    """
    Draws validated markdown onto a surface, one line at a time.

    The only state kept between lines is the vertical cursor; every line
    starts again at the left margin.
    """

    def __init__(self, surface, settings: Optional[RenderSettings] = None):
        self.surface = surface
        self.settings = settings or RenderSettings()

    def render(self, markdown: str) -> int:
        self.surface.fill_style = self.settings.background
        self.surface.fill_rect(0, 0, self.settings.width, self.settings.height)
        self.surface.fill_style = self.settings.foreground

        y = 0
        for raw_line in markdown.split('\n'):
            block = classify_line(trim_line(raw_line))
            y = self.render_block(block, LEFT_MARGIN, y)
        return y

    def render_block(self, block: Block, x, y) -> int:
        if block.kind == HEADING_BLOCK:
            return self._render_heading(block, x, y)
        if block.kind == BLOCKQUOTE_BLOCK:
            return self._render_blockquote(block, x, y)
        if block.kind == RULE_BLOCK:
            return self._render_rule(x, y)
        if block.kind == LIST_BLOCK:
            return self._render_list_item(block, x, y)
        self.render_inline(block.content, x, y)
        return y + LINE_HEIGHT

    def _render_heading(self, block, x, y):
        font_size = 32 - block.level * 4
        self.render_text(block.content, x, y, FontSpec(GENERIC_SANS, font_size, weight='bold'))

        line_y = y + font_size + 2
        self._horizontal_line(x, line_y, 1)
        return y + font_size + 15

    def _render_blockquote(self, block, x, y):
        self.surface.fill_style = QUOTE_COLOR
        self.surface.fill_text(QUOTE_PREFIX + block.content, x, y, FontSpec(GENERIC_SANS, BASE_FONT_SIZE))
        self.surface.fill_style = self.settings.foreground
        return y + LINE_HEIGHT

    def _render_rule(self, x, y):
        self._horizontal_line(x, y + 10, 3)
        return y + RULE_HEIGHT

    def _render_list_item(self, block, x, y):
        # ordered items get the same bullet, numbers are not drawn
        x += LIST_INDENT
        font = FontSpec(GENERIC_SANS, BASE_FONT_SIZE)
        self.surface.fill_text(BULLET, x, y, font)
        x += self.surface.measure_text(block.marker, font)
        self.render_inline(block.content, x, y)
        return y + LINE_HEIGHT

    def _horizontal_line(self, x, y, width):
        self.surface.stroke_style = DIVIDER_COLOR
        self.surface.line_width = width
        self.surface.stroke_line(x, y, self.settings.width - LEFT_MARGIN, y)

    def render_inline(self, text: str, x, y) -> float:
        for span in segment_inline(text):
            if span.kind == PLAIN:
                x = self.render_text(span.text, x, y, style_font(PLAIN))
            elif span.kind == CODE:
                x = self._render_code(span, x, y)
            else:
                x = self._render_styled(span, x, y)
        return x

    def render_text(self, text: str, x, y, base: FontSpec) -> float:
        """Draw grapheme by grapheme, switching to the emoji face where needed."""
        for grapheme in iter_graphemes(text):
            font = select_font(grapheme, base, self.settings.emoji_family)
            self.surface.fill_text(grapheme, x, y, font)
            x += self.surface.measure_text(grapheme, font)
        return x

    def _render_styled(self, span, x, y):
        # whole span in one font, emoji inside styled spans are not substituted
        font = style_font(span.kind)
        self.surface.fill_text(span.text, x, y, font)
        width = self.surface.measure_text(span.text, font)

        offset = None
        if span.kind in (UNDERLINE, BOLD_UNDERLINE):
            offset = UNDERLINE_OFFSET
        elif span.kind == STRIKETHROUGH:
            offset = STRIKE_OFFSET
        if offset is not None:
            self.surface.stroke_style = self.settings.foreground
            self.surface.line_width = 1
            self.surface.stroke_line(x, y + offset, x + width, y + offset)
        return x + width

    def _render_code(self, span, x, y):
        font = style_font(CODE)
        width = self.surface.measure_text(span.text, font)
        self.surface.fill_style = CODE_BACKGROUND
        self.surface.fill_rect(x, y, width + CODE_PADDING, CODE_HEIGHT)
        self.surface.fill_style = CODE_FOREGROUND
        self.surface.fill_text(span.text, x + CODE_PADDING / 2, y, font)
        self.surface.fill_style = self.settings.foreground
        return x + width + CODE_PADDING


def render_markdown(markdown, font_book: Optional[FontBook] = None,
                    settings: Optional[RenderSettings] = None) -> bytes:
    """Validate ``markdown`` and render it to PNG bytes."""
    settings = settings or RenderSettings()
    validated = validate_markdown(markdown, settings.max_length)

    if font_book is None:
        font_book = FontBook(get_fonts(), settings.sans_family, settings.mono_family)
    surface = Surface(settings.width, settings.height, font_book, background=settings.background)
    final_y = MarkdownLayout(surface, settings).render(validated)
    logger.debug('Rendered %d characters, cursor ended at y=%d', len(validated), final_y)
    return surface.to_png()
