"""Month resolution for report parameters."""

from __future__ import annotations

from roxiler_stats.errors import InvalidMonth

# English names regardless of process locale
MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

_MONTHS_BY_NAME = {
    **{name: i for i, name in enumerate(MONTH_NAMES, start=1)},
    **{name[:3]: i for i, name in enumerate(MONTH_NAMES, start=1)},
}


def resolve_month(value: str | int) -> int:
    """Return the month number (1-12) for a month name, abbreviation or number.

    Accepts "January", "jan", "1", "01" or the integer 1. Names are matched
    case-insensitively.

    Raises:
        InvalidMonth: when `value` does not name a month.
    """
    if isinstance(value, bool):
        raise InvalidMonth(f"Invalid month: {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip().lower()
        if text in _MONTHS_BY_NAME:
            return _MONTHS_BY_NAME[text]
        if not (text.isascii() and text.isdigit()):
            raise InvalidMonth(f"Invalid month: {value!r}")
        number = int(text)
    else:
        raise InvalidMonth(f"Invalid month: {value!r}")

    if not 1 <= number <= 12:
        raise InvalidMonth(f"Invalid month: {value!r}")
    return number
