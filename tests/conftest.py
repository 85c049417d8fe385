import pytest

from config import Config
from mdcanvas import create_app


class TestConfig(Config):
    TESTING = True
    EMOJI_FONT_PATH = ''


class RecordingSurface(object):
    """Stands in for the Pillow surface; every glyph is ``char_width`` wide."""

    def __init__(self, char_width=8):
        self.char_width = char_width
        self.calls = []
        self.fill_style = '#000000'
        self.stroke_style = '#000000'
        self.line_width = 1

    def fill_rect(self, x, y, width, height):
        self.calls.append(('fill_rect', x, y, width, height, self.fill_style))

    def stroke_line(self, x1, y1, x2, y2):
        self.calls.append(('stroke_line', x1, y1, x2, y2, self.stroke_style, self.line_width))

    def fill_text(self, text, x, y, font):
        self.calls.append(('fill_text', text, x, y, font, self.fill_style))

    def measure_text(self, text, font):
        return len(text) * self.char_width

    def of(self, kind):
        return [call for call in self.calls if call[0] == kind]

    @property
    def texts(self):
        return self.of('fill_text')


@pytest.fixture
def app():
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def surface():
    return RecordingSurface()
