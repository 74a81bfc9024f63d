# tests/test_line_codec.py
import pytest

from app.core import line_codec
from app.core.exceptions import DecodeError


def test_decode_splits_on_commas_outside_quotes():
    line = 'WP1,Ana, 0917 ,"2x Classic, extra syrup",₱90.00'
    assert line_codec.decode(line) == ["WP1", "Ana", "0917", "2x Classic, extra syrup", "₱90.00"]


def test_decode_keeps_empty_fields():
    assert line_codec.decode('a,,"",b') == ["a", "", "", "b"]


def test_decode_ignores_line_ending():
    assert line_codec.decode("a,b\r\n") == ["a", "b"]


def test_unterminated_quote_is_tolerated_by_default():
    assert line_codec.decode('a,"b,c') == ["a", "b,c"]


def test_unterminated_quote_raises_in_strict_mode():
    with pytest.raises(DecodeError):
        line_codec.decode('a,"b,c', strict=True)


def test_encode_quotes_requested_columns_and_commas():
    line = line_codec.encode(["WP1", "Cruz, Ana", "2x Classic"], quoted=(2,))
    assert line == 'WP1,"Cruz, Ana","2x Classic"'
    assert line_codec.decode(line) == ["WP1", "Cruz, Ana", "2x Classic"]


def test_encode_drops_quote_characters_and_newlines():
    assert line_codec.encode(['say "hi"', "two\nlines"]) == "say hi,two lines"


@pytest.mark.parametrize(
    "line, expected",
    [
        ("", False),
        ("   ", False),
        ("# Format: Order ID, Name", False),
        ("  # indented comment", False),
        ("WP1,Ana", True),
    ],
)
def test_is_data_line(line, expected):
    assert line_codec.is_data_line(line) is expected
