import pytest

from ai.errors import InvalidInput
from core.creative_input import CreativeInput, load_drawing, parse_console_dream


def test_plain_text_is_kept_as_typed():
    capture = parse_console_dream('  I want to build a "flying" car  ')
    assert capture.text == 'I want to build a "flying" car'
    assert capture.drawing_image is None


def test_mention_without_image_suffix_is_text():
    capture = parse_console_dream("@mom says I should be a vet")
    assert capture.text == "@mom says I should be a vet"
    assert not capture.has_drawing


def test_drawing_token_is_loaded_and_removed(tmp_path):
    drawing = tmp_path / "rocket.PNG"
    drawing.write_bytes(b"\x89PNG")

    capture = parse_console_dream(f'I want to fly @{drawing} to the "moon"')

    assert capture.drawing_image == b"\x89PNG"
    assert capture.text == 'I want to fly to the "moon"'


def test_quoted_path_may_contain_spaces(tmp_path):
    drawing = tmp_path / "my drawings" / "rocket.jpg"
    drawing.parent.mkdir()
    drawing.write_bytes(b"\xff\xd8")

    capture = parse_console_dream(f'@"{drawing}"')

    assert capture.drawing_image == b"\xff\xd8"
    assert capture.text == ""
    assert capture.validate() is capture


def test_only_the_first_drawing_is_used(tmp_path):
    first = tmp_path / "a.png"
    second = tmp_path / "b.webp"
    first.write_bytes(b"first")
    second.write_bytes(b"second")

    capture = parse_console_dream(f"look @{first} and @{second}")

    assert capture.drawing_image == b"first"
    assert capture.text == f"look and @{second}"


def test_email_like_words_are_not_drawings():
    capture = parse_console_dream("write to me@home.png please")
    assert capture.text == "write to me@home.png please"
    assert capture.drawing_image is None


def test_missing_drawing_file_is_invalid_input(tmp_path):
    with pytest.raises(InvalidInput) as exc:
        parse_console_dream(f"rockets @{tmp_path / 'nope.png'}")
    assert "couldn't find the drawing" in exc.value.user_message


def test_unsupported_drawing_type_is_invalid_input(tmp_path):
    with pytest.raises(InvalidInput) as exc:
        load_drawing(tmp_path / "notes.txt")
    assert exc.value.user_message.startswith("Drawings must be")


def test_empty_capture_fails_validation():
    with pytest.raises(InvalidInput) as exc:
        CreativeInput("   ").validate()
    assert exc.value.user_message == "Tell me about your dream or draw it first!"
