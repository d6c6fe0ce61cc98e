"""Canonicalization of slugs, dates and times before an event is stored."""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timezone

from dateutil import parser as date_parser

from devevent.domain.errors import InvalidFormat, InvalidValue

_DISALLOWED_SLUG_CHARS = re.compile(r"[^a-z0-9\s_-]")
_SLUG_SEPARATORS = re.compile(r"[\s_-]+")
_TIME_PATTERN = re.compile(r"^([0-9]{1,2})(?::([0-9]{2}))?\s*(am|pm)?$")

# Two defaults that differ in every date field; text that leaves any of them
# unset parses differently against each.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def slugify(title: str) -> str:
    """Turn a title into a lowercase, hyphen-separated URL identifier.

    Diacritics are dropped ("Café" -> "cafe"); anything that is not a letter,
    digit or separator disappears. An empty or symbol-only title yields "".
    """
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _DISALLOWED_SLUG_CHARS.sub("", base.lower()).strip()
    return _SLUG_SEPARATORS.sub("-", cleaned).strip("-")


def normalize_date(raw: str) -> str:
    """Return the ``YYYY-MM-DD`` form of *raw*.

    ISO-8601 input is parsed strictly; anything else goes through
    ``dateutil``'s general parser (month-first for ambiguous numeric dates),
    which must find a year, month and day in the text itself ("14:30" or
    "December" are rejected). Aware date-times are converted to UTC before
    the time part is dropped.
    """
    text = raw.strip()
    try:
        parsed = date_parser.isoparse(text)
    except ValueError:
        parsed = _parse_full_date(text)

    if parsed.tzinfo is not None:
        try:
            parsed = parsed.astimezone(timezone.utc)
        except OverflowError as exc:
            raise InvalidValue("Invalid date value") from exc
    return parsed.date().isoformat()


def _parse_full_date(text: str) -> datetime:
    try:
        first, second = (
            date_parser.parse(text, default=default) for default in _FILL_DEFAULTS
        )
    except (ValueError, OverflowError) as exc:
        raise InvalidFormat("Invalid date format") from exc
    if first != second:
        raise InvalidFormat("Invalid date format")
    return first


def normalize_time(raw: str) -> str:
    """Return the 24-hour ``HH:MM`` form of *raw*.

    Accepts a bare hour ("9"), 24-hour ("14:30") and 12-hour text with a
    case-insensitive meridian ("2:30pm", "9:30 AM").
    """
    match = _TIME_PATTERN.match(raw.strip().lower())
    if match is None:
        raise InvalidFormat("Invalid time format")

    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    meridian = match.group(3)
    if meridian == "am":
        hours = hours % 12
    elif meridian == "pm":
        hours = hours % 12 + 12

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidValue("Invalid time value")
    return f"{hours:02d}:{minutes:02d}"
