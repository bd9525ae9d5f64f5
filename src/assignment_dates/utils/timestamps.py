"""UTC timestamp parsing helpers for date-window rules."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

import pandas as pd

from assignment_dates.errors import PolicyConfigurationError

RELATIVE_KEYWORDS = frozenset({"now", "today", "tomorrow", "yesterday"})
DATE_ONLY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _to_utc(ts: pd.Timestamp) -> pd.Timestamp:
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def is_blank(value: object) -> bool:
    """Return True for values that mean "no date" (None, NaT, empty text)."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def coerce_timestamp(value: object) -> tuple[Optional[pd.Timestamp], bool]:
    """Parse a date-like value leniently.

    Returns ``(timestamp, malformed)``. Blank values give ``(None, False)``;
    values that cannot be parsed give ``(None, True)``.
    """

    if is_blank(value):
        return None, False
    if isinstance(value, bool):
        return None, True
    # pandas resolves these against the wall clock
    if isinstance(value, str) and value.strip().lower() in RELATIVE_KEYWORDS:
        return None, True
    try:
        ts = pd.Timestamp(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        return None, True
    if pd.isna(ts):
        return None, True
    return _to_utc(ts), False


def is_date_only(value: object) -> bool:
    """Return True for calendar dates that carry no time of day."""

    if isinstance(value, date) and not isinstance(value, datetime):
        return True
    return isinstance(value, str) and DATE_ONLY_PATTERN.match(value.strip()) is not None


def parse_timestamp(
    value: object, *, key: str, end_of_day: bool = False
) -> pd.Timestamp:
    """Parse a required date-like value into a UTC timestamp or fail loud.

    With ``end_of_day`` a date-only value covers the whole day, so an end
    bound of ``2024-03-31`` resolves to the last instant of March 31.
    """

    ts, malformed = coerce_timestamp(value)
    if ts is None:
        raise PolicyConfigurationError(
            "invalid_timestamp",
            key=key,
            detail=(
                f"{key} could not be parsed: {value!r}"
                if malformed
                else f"{key} is required"
            ),
        )
    if end_of_day and is_date_only(value):
        return ts + pd.Timedelta(days=1) - pd.Timedelta(1, "ns")
    return ts


def parse_optional_timestamp(
    value: object, *, key: str, end_of_day: bool = False
) -> Optional[pd.Timestamp]:
    """Parse an optional date-like value; blank is None, malformed fails loud."""

    if is_blank(value):
        return None
    return parse_timestamp(value, key=key, end_of_day=end_of_day)
