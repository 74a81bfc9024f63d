# app/core/parsing.py
"""
Text helpers for the values stored in the ledger files.

The files hold human-readable strings (dates like "Jan 26, 2025 3:45 PM",
amounts like "₱90.00", item lists like "2x Classic; 1x Tropiham"), so
every consumer parses them through these helpers.
"""

import math
import re
from datetime import date, datetime

from dateutil import parser

# Month names are fixed English so the files read the same under any LC_TIME
_MONTH_ABBR: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_MONTHS = {name.lower(): number for number, name in enumerate(_MONTH_ABBR, start=1)}

# Numeric formats, tried in order
_DATETIME_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y %H:%M:%S",   # 01/26/2025 14:30:00
    "%m/%d/%Y",            # 01/26/2025
)

# 01/26/2025 2:30 PM (digital payment timestamps)
_MDY_12H_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}) (\d{1,2}):(\d{2}) ([AP]M)$", re.IGNORECASE)
# Jan 26, 2025 3:45 PM | Jan 26, 2025 15:45 PM (legacy 24h with marker) | Jan 26, 2025
_TEXT_DATE_RE = re.compile(
    r"^([A-Za-z]{3}) (\d{1,2}), (\d{4})(?: (\d{1,2}):(\d{2})(?: ([AP]M))?)?$",
    re.IGNORECASE,
)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_QTY_FIRST_RE = re.compile(r"^(\d+)\s*x\s+(.+)$", re.IGNORECASE)
_QTY_LAST_RE = re.compile(r"^(.+?)\s+x\s*(\d+)$", re.IGNORECASE)
_PAYMENT_TIMESTAMP_RE = re.compile(r"^\d{2}/\d{2}/\d{4} \d{1,2}:\d{2} [AP]M$")


def _hour_24(hour: int, marker: str | None) -> int:
    if marker is None or hour > 12:
        return hour
    if marker.upper() == "AM":
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12


def _match_known_spelling(text: str) -> datetime | None:
    """
    The two spellings the ledger itself writes.

    Raises ValueError when the shape matches but a component is out of range.
    """
    match = _MDY_12H_RE.match(text)
    if match:
        month, day, year, hour, minute, marker = match.groups()
        if not 1 <= int(hour) <= 12:
            raise ValueError(f"hour {hour} is not a 12-hour clock value")
        return datetime(int(year), int(month), int(day), _hour_24(int(hour), marker), int(minute))

    match = _TEXT_DATE_RE.match(text)
    if match:
        name, day, year, hour, minute, marker = match.groups()
        month = _MONTHS.get(name.lower())
        if month is None:
            return None
        if hour is None:
            return datetime(int(year), month, int(day))
        return datetime(int(year), month, int(day), _hour_24(int(hour), marker), int(minute))
    return None


def parse_ledger_datetime(value: str | None) -> datetime | None:
    """
    Parse any of the historical date/time spellings.

    Known spellings are matched first; anything else goes through
    dateutil. Returns None when the value is blank or unparseable.
    Timezone info, if any, is dropped.
    """
    if not value or not value.strip():
        return None
    text = " ".join(value.split())

    try:
        parsed = _match_known_spelling(text)
    except ValueError:
        parsed = None
    if parsed is not None:
        return parsed

    if _ISO_DATE_RE.match(text):
        try:
            return datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            pass

    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    # Use dateutil as fallback
    try:
        return parser.parse(text).replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None


def parse_ledger_date(value: str | None) -> date | None:
    parsed = parse_ledger_datetime(value)
    return parsed.date() if parsed else None


def format_display_datetime(moment: datetime) -> str:
    """Render like 'Jan 6, 2025 2:45 PM' (no zero padding on day/hour)."""
    hour = moment.hour % 12 or 12
    marker = "AM" if moment.hour < 12 else "PM"
    return (
        f"{_MONTH_ABBR[moment.month - 1]} {moment.day}, {moment.year} "
        f"{hour}:{moment.minute:02d} {marker}"
    )


def is_payment_timestamp(value: str) -> bool:
    """Digital payment timestamps must look like 'MM/DD/YYYY H:MM AM/PM'."""
    text = value.strip()
    if not _PAYMENT_TIMESTAMP_RE.match(text):
        return False
    try:
        return _match_known_spelling(text) is not None
    except ValueError:
        return False


def parse_amount(value: str | None, currency_symbol: str = "₱") -> float:
    """'₱1,234.50' -> 1234.5; anything unparseable -> 0.0."""
    if value is None:
        return 0.0
    text = value.replace(currency_symbol, "").replace(",", "").strip()
    try:
        return float(text)
    except ValueError:
        return 0.0


def format_amount(value: float, currency_symbol: str = "₱") -> str:
    return f"{currency_symbol}{value:.2f}"


def normalize_cash_amount(value: str | None) -> str:
    """
    Cash received as a two-decimal string.

    Blank, negative or unparseable input becomes "0.00".
    """
    if value is None or not value.strip():
        return "0.00"
    try:
        amount = float(value.replace(",", "").strip())
    except ValueError:
        return "0.00"
    if amount < 0 or not math.isfinite(amount):
        return "0.00"
    return f"{amount:.2f}"


def parse_item_token(token: str) -> tuple[int, str]:
    """
    Split one item token into (quantity, name).

    Accepts "2x Classic", legacy "Classic x 2", or a bare name (quantity 1).
    """
    text = token.strip()
    match = _QTY_FIRST_RE.match(text)
    if match:
        return int(match.group(1)), match.group(2).strip()
    match = _QTY_LAST_RE.match(text)
    if match:
        return int(match.group(2)), match.group(1).strip()
    return 1, text


def parse_items(items: str | None) -> list[tuple[int, str]]:
    """Parse a ';'-joined item list, skipping empty tokens."""
    if not items:
        return []
    return [parse_item_token(tok) for tok in items.split(";") if tok.strip()]


def format_item_token(quantity: int, name: str) -> str:
    return f"{quantity}x {name.strip()}"
