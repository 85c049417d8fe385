# -*- coding: utf-8 -*-

"""Pillow backed drawing surface with a canvas-like API."""

from typing import Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .fonts import FontBook, FontSpec
from .utils import image_to_png_bytes


def parse_color(value: str) -> Tuple[int, int, int, int]:
    """Accepts ``#RGB``, ``#RRGGBB``, ``#RRGGBBAA`` and color names."""
    rgba = ImageColor.getrgb(value)
    if len(rgba) == 3:
        rgba = rgba + (255,)
    return rgba


class Surface(object):
    """
    A fixed size raster owned by a single render call.

    Drawing state mirrors a 2D canvas context: ``fill_style`` is used by
    `fill_rect` and `fill_text`, ``stroke_style`` and ``line_width`` by
    `stroke_line`. Text is drawn with its top edge at ``y``.
    """

    def __init__(self, width: int, height: int, font_book: FontBook, background: str = '#000000'):
        self.width = width
        self.height = height
        self.font_book = font_book
        # RGB backing so that RGBA drawing blends instead of overwriting alpha
        self.image = Image.new('RGB', (width, height), parse_color(background)[:3])
        self._draw = ImageDraw.Draw(self.image, 'RGBA')
        self.fill_style = '#FFFFFF'
        self.stroke_style = '#000000'
        self.line_width = 1

    def fill_rect(self, x, y, width, height):
        if width <= 0 or height <= 0:
            return
        self._draw.rectangle((x, y, x + width - 1, y + height - 1), fill=parse_color(self.fill_style))

    def stroke_line(self, x1, y1, x2, y2):
        self._draw.line((x1, y1, x2, y2), fill=parse_color(self.stroke_style), width=max(1, int(round(self.line_width))))

    def measure_text(self, text: str, font: FontSpec) -> float:
        if not text:
            return 0.0
        loaded = self.font_book.load(font)
        return loaded.font.getlength(text) * loaded.scale

    def fill_text(self, text: str, x, y, font: FontSpec):
        if not text:
            return
        loaded = self.font_book.load(font)
        color = parse_color(self.fill_style)
        if loaded.scale == 1.0:
            self._draw.text((x, y), text, font=loaded.font, fill=color,
                            embedded_color=isinstance(loaded.font, ImageFont.FreeTypeFont))
            return
        self._paste_scaled(text, x, y, loaded, color)

    def _paste_scaled(self, text, x, y, loaded, color):
        # bitmap faces are rasterized at their strike size, then resized to fit
        _, _, right, bottom = loaded.font.getbbox(text)
        native_w = int(max(1, loaded.font.getlength(text), right))
        native_h = int(max(1, bottom))
        tile = Image.new('RGBA', (native_w, native_h), (0, 0, 0, 0))
        ImageDraw.Draw(tile).text((0, 0), text, font=loaded.font, fill=color, embedded_color=True)
        size = (max(1, int(round(native_w * loaded.scale))), max(1, int(round(native_h * loaded.scale))))
        tile = tile.resize(size, resample=Image.Resampling.LANCZOS)
        self.image.paste(tile, (int(round(x)), int(round(y))), tile)

    def to_png(self) -> bytes:
        return image_to_png_bytes(self.image.convert('RGBA'))
