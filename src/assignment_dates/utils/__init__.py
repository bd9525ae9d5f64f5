"""Shared timestamp helpers."""

from assignment_dates.utils.timestamps import (
    coerce_timestamp,
    is_blank,
    parse_optional_timestamp,
    parse_timestamp,
)

__all__ = [
    "coerce_timestamp",
    "is_blank",
    "parse_optional_timestamp",
    "parse_timestamp",
]
