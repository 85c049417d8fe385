import pytest

from mdcanvas.markdown_render import (MAX_INPUT_LENGTH, LengthExceeded, MarkdownValidationError,
                                      TypeMismatch, validate_markdown)

SAMPLES = [
    '',
    'plain text',
    '# Heading\n> quote\n---\n- item\n1. first',
    '**__both__** __**both**__ __u__ **b** *i* ~~s~~ `c`',
    '**unterminated and `open',
    'emoji 🎉 and digits 123',
]


@pytest.mark.parametrize('value', [None, 42, 3.5, b'bytes', ['list'], {'markdown': 'x'}])
def test_non_text_input_is_a_type_mismatch(value):
    with pytest.raises(TypeMismatch):
        validate_markdown(value)


def test_type_mismatch_is_both_type_and_validation_error():
    with pytest.raises(TypeError):
        validate_markdown(1)
    with pytest.raises(MarkdownValidationError):
        validate_markdown(1)


def test_input_at_the_cap_is_accepted():
    text = 'a' * MAX_INPUT_LENGTH
    assert validate_markdown(text) == text


def test_input_over_the_cap_is_rejected():
    with pytest.raises(LengthExceeded) as excinfo:
        validate_markdown('a' * (MAX_INPUT_LENGTH + 1))
    assert excinfo.value.limit == 6000
    assert excinfo.value.length == 6001
    assert '6000' in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_custom_length_cap():
    with pytest.raises(LengthExceeded):
        validate_markdown('abcdef', max_length=5)
    assert validate_markdown('abcde', max_length=5) == 'abcde'


@pytest.mark.parametrize('text', SAMPLES)
def test_corrections_leave_markup_unchanged(text):
    assert validate_markdown(text) == text


@pytest.mark.parametrize('text', SAMPLES)
def test_validation_is_idempotent(text):
    once = validate_markdown(text)
    assert validate_markdown(once) == once


def test_length_counts_utf16_code_units():
    with pytest.raises(LengthExceeded) as excinfo:
        validate_markdown('😀' * 3001)
    assert excinfo.value.length == 6002
    assert validate_markdown('😀' * 3000) == '😀' * 3000
    assert validate_markdown('é' * MAX_INPUT_LENGTH) == 'é' * MAX_INPUT_LENGTH
