"""Date-window validation for assignment due and availability dates."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import pandas as pd

from assignment_dates.app_logger import get_logger
from assignment_dates.policy import PolicyContext
from assignment_dates.utils.timestamps import coerce_timestamp, is_blank

logger = get_logger("validator")

DUE_AT = "due_at"
UNLOCK_AT = "unlock_at"
LOCK_AT = "lock_at"
DATE_FIELDS = (DUE_AT, UNLOCK_AT, LOCK_AT)

FIELD_LABELS = {
    DUE_AT: "Due",
    UNLOCK_AT: "Availability start",
    LOCK_AT: "Availability end",
}

MSG_DUE_AFTER_LOCK = "Due date cannot be after the availability end date."
MSG_DUE_BEFORE_UNLOCK = "Due date cannot be before the availability start date."
MSG_UNLOCK_AFTER_LOCK = "Availability start date cannot be after end date."
MSG_NO_GRADING_PERIOD = "Due date does not fall within any grading period."
MSG_SIS_DUE_REQUIRED = (
    "Due date is required when this assignment posts grades to the student "
    "information system."
)


class SetType(str, Enum):
    """Assignee grouping kind of an override card."""

    COURSE_SECTION = "CourseSection"
    ADHOC = "ADHOC"
    GROUP = "Group"
    NOOP = "Noop"


@dataclass(frozen=True)
class DateWindowInput:
    """One candidate set of dates for an assignment or override card."""

    due_at: Any = None
    unlock_at: Any = None
    lock_at: Any = None
    set_type: Optional[SetType] = None
    course_section_id: Optional[str] = None
    student_ids: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "DateWindowInput":
        if not isinstance(payload, Mapping):
            raise TypeError("date window payload must be a mapping")
        raw_set_type = payload.get("set_type")
        section = payload.get("course_section_id")
        return cls(
            due_at=payload.get(DUE_AT),
            unlock_at=payload.get(UNLOCK_AT),
            lock_at=payload.get(LOCK_AT),
            set_type=None if is_blank(raw_set_type) else SetType(raw_set_type),
            course_section_id=None if is_blank(section) else str(section),
            student_ids=tuple(str(sid) for sid in payload.get("student_ids") or ()),
        )


def format_message(field: str) -> str:
    return f"{FIELD_LABELS[field]} date is not a valid date."


def range_message(field: str, *, before: bool, context: str) -> str:
    edge = "start" if before else "end"
    direction = "before" if before else "after"
    return f"{FIELD_LABELS[field]} date cannot be {direction} the {context} {edge} date."


def closed_period_message(title: str) -> str:
    return f'Due date cannot fall within the closed grading period "{title}".'


class DateWindowValidator:
    """Validate due/unlock/lock dates against a fixed policy.

    Every rule runs on every call. When more than one rule fails for the same
    field the message with the highest priority is kept: format, ordering,
    institutional range, grading period, then SIS.
    """

    def __init__(self, policy: PolicyContext) -> None:
        if not isinstance(policy, PolicyContext):
            raise TypeError("policy must be a PolicyContext")
        self._policy = policy

    @property
    def policy(self) -> PolicyContext:
        return self._policy

    def validate(self, data: DateWindowInput | Mapping[str, Any]) -> dict[str, str]:
        """Return ``{field: message}`` for every violated constraint."""

        if not isinstance(data, DateWindowInput):
            data = DateWindowInput.from_mapping(data)

        parsed: dict[str, Optional[pd.Timestamp]] = {}
        errors: dict[str, str] = {}
        for field in DATE_FIELDS:
            ts, malformed = coerce_timestamp(getattr(data, field))
            parsed[field] = ts
            if malformed:
                errors[field] = format_message(field)

        for field, message in self._ordering_violations(parsed):
            errors.setdefault(field, message)
        for field, message in self._range_violations(parsed):
            errors.setdefault(field, message)
        grading_message = self._grading_period_violation(parsed[DUE_AT])
        if grading_message is not None:
            errors.setdefault(DUE_AT, grading_message)
        if self._policy.post_to_sis_required and parsed[DUE_AT] is None:
            errors.setdefault(DUE_AT, MSG_SIS_DUE_REQUIRED)

        result = {field: errors[field] for field in DATE_FIELDS if field in errors}
        if result:
            logger.debug("date window invalid: fields=%s", ",".join(result))
        return result

    def is_valid(self, data: DateWindowInput | Mapping[str, Any]) -> bool:
        return not self.validate(data)

    def _ordering_violations(
        self, parsed: Mapping[str, Optional[pd.Timestamp]]
    ) -> list[tuple[str, str]]:
        due, unlock, lock = parsed[DUE_AT], parsed[UNLOCK_AT], parsed[LOCK_AT]
        found: list[tuple[str, str]] = []
        if due is not None and lock is not None and due > lock:
            found.append((DUE_AT, MSG_DUE_AFTER_LOCK))
        if due is not None and unlock is not None and due < unlock:
            found.append((DUE_AT, MSG_DUE_BEFORE_UNLOCK))
        if unlock is not None and lock is not None and unlock > lock:
            found.append((UNLOCK_AT, MSG_UNLOCK_AFTER_LOCK))
        return found

    def _range_violations(
        self, parsed: Mapping[str, Optional[pd.Timestamp]]
    ) -> list[tuple[str, str]]:
        date_range = self._policy.valid_date_range
        if date_range is None or self._policy.user_is_admin:
            return []

        found: list[tuple[str, str]] = []
        for field in DATE_FIELDS:
            value = parsed[field]
            if value is None:
                continue
            if date_range.start is not None and value < date_range.start:
                found.append(
                    (
                        field,
                        range_message(
                            field, before=True, context=date_range.start_context
                        ),
                    )
                )
            elif date_range.end is not None and value > date_range.end:
                found.append(
                    (
                        field,
                        range_message(
                            field, before=False, context=date_range.end_context
                        ),
                    )
                )
        return found

    def _grading_period_violation(self, due: Optional[pd.Timestamp]) -> Optional[str]:
        if not self._policy.has_grading_periods or due is None:
            return None
        period = self._policy.grading_period_for(due)
        if period is None:
            return MSG_NO_GRADING_PERIOD
        if period.is_closed and not self._policy.user_is_admin:
            return closed_period_message(period.title)
        return None
