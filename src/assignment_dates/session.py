"""Host-side edit session for one assign-to card."""

from __future__ import annotations

from typing import Any, Callable, Optional

from assignment_dates.app_logger import get_logger
from assignment_dates.validator import (
    DATE_FIELDS,
    DateWindowInput,
    DateWindowValidator,
)

logger = get_logger("session")

ValidityCallback = Callable[[str, bool], None]
DeleteCallback = Callable[[str], None]


def _normalize(value: Any) -> Any:
    if isinstance(value, str) and not value:
        return None
    return value


class AssignToCardSession:
    """Track one card's dates and report validity changes to the host.

    The card revalidates after every edit. The host is only notified when the
    list of failing fields changes; a new message on an already failing field
    is not stored.
    """

    def __init__(
        self,
        card_id: str,
        validator: DateWindowValidator,
        *,
        due_at: Any = None,
        unlock_at: Any = None,
        lock_at: Any = None,
        on_validity_change: Optional[ValidityCallback] = None,
        on_delete: Optional[DeleteCallback] = None,
    ) -> None:
        self.card_id = card_id
        self._validator = validator
        self._values: dict[str, Any] = {
            "due_at": _normalize(due_at),
            "unlock_at": _normalize(unlock_at),
            "lock_at": _normalize(lock_at),
        }
        self._on_validity_change = on_validity_change
        self._on_delete = on_delete
        self._errors: dict[str, str] = {}
        self._revalidate()

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    @property
    def is_valid(self) -> bool:
        return not self._errors

    def value(self, field: str) -> Any:
        return self._values[field]

    def current_input(self) -> DateWindowInput:
        return DateWindowInput(**self._values)

    def set_date(self, field: str, value: Any) -> dict[str, str]:
        if field not in DATE_FIELDS:
            raise KeyError(f"unknown date field: {field}")
        self._values[field] = _normalize(value)
        return self._revalidate()

    def set_due_at(self, value: Any) -> dict[str, str]:
        return self.set_date("due_at", value)

    def set_unlock_at(self, value: Any) -> dict[str, str]:
        return self.set_date("unlock_at", value)

    def set_lock_at(self, value: Any) -> dict[str, str]:
        return self.set_date("lock_at", value)

    def clear(self, field: str) -> dict[str, str]:
        return self.set_date(field, None)

    def messages_for(self, field: str) -> list[dict[str, str]]:
        message = self._errors.get(field)
        return [{"type": "error", "text": message}] if message else []

    def delete(self) -> None:
        if self._on_delete is not None:
            self._on_delete(self.card_id)

    def _revalidate(self) -> dict[str, str]:
        new_errors = self._validator.validate(self.current_input())
        if list(new_errors) != list(self._errors):
            logger.debug(
                "card %s validity changed: failing=%s",
                self.card_id,
                ",".join(new_errors) or "<none>",
            )
            self._errors = new_errors
            if self._on_validity_change is not None:
                self._on_validity_change(self.card_id, not new_errors)
        return self.errors
