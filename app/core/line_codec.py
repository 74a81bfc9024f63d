# app/core/line_codec.py
"""
Quoted, comma-delimited line format shared by orders.txt and sales.txt.

  - Fields are separated by commas.
  - A double quote toggles "inside quotes" mode; commas inside quotes are
    literal. Quotes are never escaped by doubling, so a field can't carry
    a literal quote character (encode() drops them).
  - Every field is whitespace-trimmed after unquoting.
"""

from typing import Iterable, Sequence

from app.core.exceptions import DecodeError

COMMENT_PREFIX = "#"


def decode(line: str, strict: bool = False) -> list[str]:
    """
    Split one ledger line into its fields.

    An unterminated quote is tolerated: the rest of the line is read as
    still being inside quotes and the last token is closed at end-of-line.
    Pass strict=True to raise DecodeError instead.
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False

    for ch in line.rstrip("\r\n"):
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            tokens.append("".join(current).strip())
            current = []
        else:
            current.append(ch)

    if in_quotes and strict:
        raise DecodeError("Unterminated quote", line=line)

    tokens.append("".join(current).strip())
    return tokens


def _clean(value: str | None) -> str:
    if value is None:
        return ""
    return str(value).replace('"', "").replace("\r", " ").replace("\n", " ").strip()


def encode(fields: Sequence[str], quoted: Iterable[int] = ()) -> str:
    """
    Join fields into one line.

    Positions listed in `quoted` are always wrapped in double quotes;
    any other field that happens to contain a comma is quoted as well so
    the line still decodes to the same fields.
    """
    quoted_positions = set(quoted)
    parts: list[str] = []
    for idx, raw in enumerate(fields):
        value = _clean(raw)
        if idx in quoted_positions or "," in value:
            parts.append(f'"{value}"')
        else:
            parts.append(value)
    return ",".join(parts)


def is_data_line(line: str) -> bool:
    """True for lines that carry a record (not blank, not a # comment)."""
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith(COMMENT_PREFIX)
