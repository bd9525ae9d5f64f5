from __future__ import annotations

import pytest

from assignment_dates.policy import build_policy_context
from assignment_dates.session import AssignToCardSession
from assignment_dates.validator import (
    MSG_DUE_AFTER_LOCK,
    MSG_SIS_DUE_REQUIRED,
    DateWindowValidator,
)


class _ValidityRecorder:
    def __init__(self) -> None:
        self.calls: list[tuple[str, bool]] = []

    def __call__(self, card_id: str, is_valid: bool) -> None:
        self.calls.append((card_id, is_valid))


def test_valid_card_does_not_notify_on_open() -> None:
    recorder = _ValidityRecorder()
    session = AssignToCardSession(
        "card-1",
        DateWindowValidator(build_policy_context()),
        due_at="2024-03-03T00:00:00Z",
        lock_at="2024-03-05T00:00:00Z",
        on_validity_change=recorder,
    )

    assert recorder.calls == []
    assert session.is_valid is True
    assert session.messages_for("due_at") == []


def test_invalid_card_notifies_on_open() -> None:
    recorder = _ValidityRecorder()
    session = AssignToCardSession(
        "card-2",
        DateWindowValidator(build_policy_context({"post_to_sis_required": True})),
        on_validity_change=recorder,
    )

    assert recorder.calls == [("card-2", False)]
    assert session.errors == {"due_at": MSG_SIS_DUE_REQUIRED}


def test_notifies_only_when_failing_fields_change() -> None:
    recorder = _ValidityRecorder()
    session = AssignToCardSession(
        "card-3",
        DateWindowValidator(build_policy_context()),
        unlock_at="2024-03-01T00:00:00Z",
        lock_at="2024-03-05T00:00:00Z",
        on_validity_change=recorder,
    )

    session.set_due_at("2024-03-10T00:00:00Z")
    assert recorder.calls == [("card-3", False)]
    assert session.messages_for("due_at") == [
        {"type": "error", "text": MSG_DUE_AFTER_LOCK}
    ]

    # same failing field, different rule: no notification and no new message
    session.set_due_at("2024-02-01T00:00:00Z")
    assert recorder.calls == [("card-3", False)]
    assert session.errors == {"due_at": MSG_DUE_AFTER_LOCK}

    session.clear("due_at")
    assert recorder.calls == [("card-3", False), ("card-3", True)]
    assert session.is_valid is True


def test_empty_string_edit_clears_the_field() -> None:
    session = AssignToCardSession(
        "card-4",
        DateWindowValidator(build_policy_context()),
        due_at="2024-03-10T00:00:00Z",
    )

    session.set_due_at("")
    assert session.value("due_at") is None
    assert session.current_input().due_at is None


def test_unknown_field_edit_raises_key_error() -> None:
    session = AssignToCardSession("card-5", DateWindowValidator(build_policy_context()))

    with pytest.raises(KeyError, match="published_at"):
        session.set_date("published_at", "2024-03-01")


def test_delete_notifies_host_with_card_id() -> None:
    deleted: list[str] = []
    session = AssignToCardSession(
        "card-6",
        DateWindowValidator(build_policy_context()),
        on_delete=deleted.append,
    )

    session.delete()
    assert deleted == ["card-6"]


def test_delete_without_callback_is_a_no_op() -> None:
    session = AssignToCardSession("card-7", DateWindowValidator(build_policy_context()))

    session.delete()
    assert session.is_valid is True
