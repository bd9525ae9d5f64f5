"""Policy context contracts and fail-fast builders."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import pandas as pd
import yaml

from assignment_dates.app_logger import get_logger
from assignment_dates.errors import PolicyConfigurationError
from assignment_dates.utils.timestamps import (
    is_blank,
    parse_optional_timestamp,
    parse_timestamp,
)

logger = get_logger("policy")

POLICY_KEYS = frozenset(
    {
        "valid_date_range",
        "has_grading_periods",
        "grading_periods",
        "user_is_admin",
        "post_to_sis_required",
    }
)
DATE_RANGE_KEYS = frozenset({"start", "end", "start_context", "end_context"})
GRADING_PERIOD_KEYS = frozenset({"id", "title", "start", "end", "is_closed"})
ADMIN_ROLE = "admin"


def _require_bool(value: object, *, key: str) -> bool:
    if not isinstance(value, bool):
        raise PolicyConfigurationError(
            "invalid_policy_field",
            key=key,
            detail=f"{key} must be a boolean",
        )
    return value


def _normalize_bound(
    instance: object, name: str, *, key: str, end_of_day: bool = False
) -> None:
    # frozen dataclass: store the UTC-normalized bound in place
    value = getattr(instance, name)
    if value is None:
        return
    object.__setattr__(
        instance, name, parse_timestamp(value, key=key, end_of_day=end_of_day)
    )


@dataclass(frozen=True)
class DateRange:
    """Institutional window that assignment dates must fall within."""

    start: Optional[pd.Timestamp] = None
    end: Optional[pd.Timestamp] = None
    start_context: str = "allowed"
    end_context: str = "allowed"

    def __post_init__(self) -> None:
        _normalize_bound(self, "start", key="valid_date_range.start")
        _normalize_bound(self, "end", key="valid_date_range.end", end_of_day=True)
        if self.start is not None and self.end is not None and self.start > self.end:
            raise PolicyConfigurationError(
                "invalid_date_range",
                key="valid_date_range",
                detail=(
                    f"start={self.start.isoformat()} is after "
                    f"end={self.end.isoformat()}"
                ),
            )

    @property
    def is_configured(self) -> bool:
        return self.start is not None or self.end is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            "start": None if self.start is None else self.start.isoformat(),
            "end": None if self.end is None else self.end.isoformat(),
            "start_context": self.start_context,
            "end_context": self.end_context,
        }


@dataclass(frozen=True)
class GradingPeriod:
    """Administrator-defined grading window with an open/closed flag."""

    id: str
    title: str
    start: pd.Timestamp
    end: pd.Timestamp
    is_closed: bool = False

    def __post_init__(self) -> None:
        key = f"grading_period:{self.id}"
        for name in ("start", "end"):
            if getattr(self, name) is None:
                raise PolicyConfigurationError(
                    "invalid_timestamp",
                    key=f"{key}.{name}",
                    detail=f"{name} is required",
                )
        _normalize_bound(self, "start", key=f"{key}.start")
        _normalize_bound(self, "end", key=f"{key}.end", end_of_day=True)
        _require_bool(self.is_closed, key=f"{key}.is_closed")
        if self.start > self.end:
            raise PolicyConfigurationError(
                "invalid_grading_period",
                key=f"grading_period:{self.id}",
                detail=(
                    f"start={self.start.isoformat()} is after "
                    f"end={self.end.isoformat()}"
                ),
            )

    def contains(self, value: pd.Timestamp) -> bool:
        return self.start <= value <= self.end

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "is_closed": self.is_closed,
        }


@dataclass(frozen=True)
class PolicyContext:
    """Read-only policy captured by a validator at construction time."""

    valid_date_range: Optional[DateRange] = None
    has_grading_periods: bool = False
    grading_periods: tuple[GradingPeriod, ...] = ()
    user_is_admin: bool = False
    post_to_sis_required: bool = False

    def __post_init__(self) -> None:
        for name in ("has_grading_periods", "user_is_admin", "post_to_sis_required"):
            _require_bool(getattr(self, name), key=name)
        if self.valid_date_range is not None and not isinstance(
            self.valid_date_range, DateRange
        ):
            raise PolicyConfigurationError(
                "invalid_date_range",
                key="valid_date_range",
                detail="valid_date_range must be a DateRange",
            )
        if not all(isinstance(period, GradingPeriod) for period in self.grading_periods):
            raise PolicyConfigurationError(
                "invalid_grading_period",
                key="grading_periods",
                detail="grading_periods must contain GradingPeriod entries",
            )
        object.__setattr__(self, "grading_periods", tuple(self.grading_periods))
        if self.has_grading_periods and not self.grading_periods:
            raise PolicyConfigurationError(
                "invalid_grading_period",
                key="grading_periods",
                detail="has_grading_periods is true but no grading periods are defined",
            )

    def grading_period_for(self, value: pd.Timestamp) -> Optional[GradingPeriod]:
        """Return the first grading period whose window contains ``value``."""

        for period in self.grading_periods:
            if period.contains(value):
                return period
        return None

    def as_dict(self) -> dict[str, Any]:
        return {
            "valid_date_range": (
                None
                if self.valid_date_range is None
                else self.valid_date_range.as_dict()
            ),
            "has_grading_periods": self.has_grading_periods,
            "grading_periods": [period.as_dict() for period in self.grading_periods],
            "user_is_admin": self.user_is_admin,
            "post_to_sis_required": self.post_to_sis_required,
        }


def _require_mapping(value: object, *, key: str, reason_code: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise PolicyConfigurationError(
            reason_code,
            key=key,
            detail=f"{key} must be a mapping",
        )
    return value


def _reject_unknown_keys(
    payload: Mapping[str, Any],
    allowed: frozenset[str],
    *,
    key: str,
    reason_code: str,
) -> None:
    unknown = sorted(str(name) for name in payload if name not in allowed)
    if unknown:
        raise PolicyConfigurationError(
            reason_code,
            key=key,
            detail="unknown keys: " + ", ".join(unknown),
        )


def _context_label(value: object, *, key: str) -> str:
    if value is None:
        return "allowed"
    if not isinstance(value, str) or not value.strip():
        raise PolicyConfigurationError(
            "invalid_date_range",
            key=key,
            detail=f"{key} must be a non-empty string",
        )
    return value.strip()


def build_date_range(payload: Mapping[str, Any] | None) -> Optional[DateRange]:
    """Validate an institutional date range; ``None`` or empty means unset."""

    if payload is None:
        return None
    payload = _require_mapping(
        payload, key="valid_date_range", reason_code="invalid_date_range"
    )
    _reject_unknown_keys(
        payload,
        DATE_RANGE_KEYS,
        key="valid_date_range",
        reason_code="invalid_date_range",
    )

    date_range = DateRange(
        start=parse_optional_timestamp(
            payload.get("start"), key="valid_date_range.start"
        ),
        end=parse_optional_timestamp(
            payload.get("end"), key="valid_date_range.end", end_of_day=True
        ),
        start_context=_context_label(
            payload.get("start_context"), key="valid_date_range.start_context"
        ),
        end_context=_context_label(
            payload.get("end_context"), key="valid_date_range.end_context"
        ),
    )
    if not date_range.is_configured:
        return None
    return date_range


def build_grading_period(payload: object, *, index: int) -> GradingPeriod:
    """Validate one grading period entry."""

    key = f"grading_periods[{index}]"
    period = _require_mapping(payload, key=key, reason_code="invalid_grading_period")
    _reject_unknown_keys(
        period, GRADING_PERIOD_KEYS, key=key, reason_code="invalid_grading_period"
    )

    raw_id = period.get("id", index)
    if is_blank(raw_id):
        raise PolicyConfigurationError(
            "invalid_grading_period",
            key=f"{key}.id",
            detail="id cannot be blank",
        )
    start = parse_timestamp(period.get("start"), key=f"{key}.start")
    end = parse_timestamp(period.get("end"), key=f"{key}.end", end_of_day=True)
    title = period.get("title")
    return GradingPeriod(
        id=str(raw_id),
        title=str(raw_id) if is_blank(title) else str(title),
        start=start,
        end=end,
        is_closed=_require_bool(period.get("is_closed", False), key=f"{key}.is_closed"),
    )


def build_grading_periods(payload: object) -> tuple[GradingPeriod, ...]:
    """Validate grading periods in their configured order."""

    if payload is None:
        return ()
    if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
        raise PolicyConfigurationError(
            "invalid_grading_period",
            key="grading_periods",
            detail="grading_periods must be a list",
        )
    return tuple(
        build_grading_period(entry, index=index) for index, entry in enumerate(payload)
    )


def build_policy_context(payload: Mapping[str, Any] | None = None) -> PolicyContext:
    """Validate a policy mapping and return an immutable context.

    Every grading period is validated even when ``has_grading_periods`` is
    false, so a malformed window never hides behind the flag.
    """

    merged: Mapping[str, Any] = _require_mapping(
        payload or {}, key="<root>", reason_code="invalid_policy_field"
    )
    _reject_unknown_keys(
        merged, POLICY_KEYS, key="<root>", reason_code="invalid_policy_field"
    )

    context = PolicyContext(
        valid_date_range=build_date_range(merged.get("valid_date_range")),
        has_grading_periods=_require_bool(
            merged.get("has_grading_periods", False), key="has_grading_periods"
        ),
        grading_periods=build_grading_periods(merged.get("grading_periods")),
        user_is_admin=_require_bool(
            merged.get("user_is_admin", False), key="user_is_admin"
        ),
        post_to_sis_required=_require_bool(
            merged.get("post_to_sis_required", False), key="post_to_sis_required"
        ),
    )
    logger.info(
        "policy loaded: range=%s grading_periods=%d admin=%s sis_required=%s",
        "set" if context.valid_date_range is not None else "unset",
        len(context.grading_periods),
        context.user_is_admin,
        context.post_to_sis_required,
    )
    return context


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML document as a dictionary."""

    with Path(path).open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise PolicyConfigurationError(
            "invalid_yaml_root",
            key=str(path),
            detail="top-level YAML payload must be a mapping",
        )
    return dict(payload)


def load_policy_context(path: str | Path) -> PolicyContext:
    """Load a policy document from YAML and validate it."""

    return build_policy_context(load_yaml(path))


def _env_range_bound(payload: Mapping[str, Any], name: str) -> tuple[object, object]:
    bound = payload.get(name)
    if bound is None:
        return None, None
    if isinstance(bound, Mapping):
        return bound.get("date"), bound.get("date_context")
    return bound, None


def policy_from_page_env(env: Mapping[str, Any]) -> PolicyContext:
    """Build a policy from server-rendered page environment keys.

    Reads ``VALID_DATE_RANGE`` (``start_at``/``end_at`` bounds, each either a
    date or ``{"date", "date_context"}``), ``HAS_GRADING_PERIODS``,
    ``active_grading_periods``, ``current_user_roles``, ``POST_TO_SIS`` and
    ``DUE_DATE_REQUIRED_FOR_ACCOUNT``.
    """

    raw_range = env.get("VALID_DATE_RANGE") or {}
    raw_range = _require_mapping(
        raw_range, key="VALID_DATE_RANGE", reason_code="invalid_date_range"
    )
    start, start_context = _env_range_bound(raw_range, "start_at")
    end, end_context = _env_range_bound(raw_range, "end_at")

    periods = []
    for entry in env.get("active_grading_periods") or []:
        if not isinstance(entry, Mapping):
            periods.append(entry)
            continue
        periods.append(
            {
                "id": entry.get("id", len(periods)),
                "title": entry.get("title"),
                "start": entry.get("start_date"),
                "end": entry.get("end_date"),
                "is_closed": bool(entry.get("is_closed", False)),
            }
        )

    roles = env.get("current_user_roles") or []
    payload: dict[str, Any] = {
        "valid_date_range": {
            "start": start,
            "end": end,
            "start_context": start_context,
            "end_context": end_context,
        },
        "has_grading_periods": bool(env.get("HAS_GRADING_PERIODS", False)),
        "grading_periods": periods,
        "user_is_admin": ADMIN_ROLE in roles,
        "post_to_sis_required": bool(env.get("POST_TO_SIS"))
        and bool(env.get("DUE_DATE_REQUIRED_FOR_ACCOUNT")),
    }
    return build_policy_context(payload)
