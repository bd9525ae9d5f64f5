from __future__ import annotations

import json
from pathlib import Path

import pytest

from assignment_dates.check import run_date_window_check
from scripts.check_date_window import main

POLICY_YAML = "\n".join(
    [
        "valid_date_range:",
        "  start: 2024-01-08T00:00:00Z",
        "  end: 2024-05-31T23:59:59Z",
        "  start_context: term",
        "  end_context: term",
        "post_to_sis_required: true",
    ]
)


def _write_policy(tmp_path: Path, text: str = POLICY_YAML) -> Path:
    path = tmp_path / "policy.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_run_date_window_check_reports_validity(tmp_path: Path) -> None:
    policy = _write_policy(tmp_path)

    result = run_date_window_check(policy, {"due_at": "2024-03-03T00:00:00Z"})
    assert result.as_dict() == {"valid": True, "errors": {}}

    result = run_date_window_check(policy, {})
    assert result.valid is False
    assert list(result.errors) == ["due_at"]


def test_main_exits_zero_for_valid_input(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    policy = _write_policy(tmp_path)
    payload = tmp_path / "input.json"
    payload.write_text(
        json.dumps(
            {
                "due_at": "2024-03-03T00:00:00Z",
                "unlock_at": "2024-03-01T00:00:00Z",
                "lock_at": "2024-03-05T00:00:00Z",
                "student_ids": ["1", "2"],
            }
        ),
        encoding="utf-8",
    )

    code = main(["--policy", str(policy), "--input", str(payload)])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {"valid": True, "errors": {}}


def test_main_flag_overrides_input_file_and_exits_one(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    policy = _write_policy(tmp_path)
    payload = tmp_path / "input.json"
    payload.write_text(json.dumps({"due_at": "2024-03-03T00:00:00Z"}), encoding="utf-8")

    code = main(
        [
            "--policy",
            str(policy),
            "--input",
            str(payload),
            "--due-at",
            "2024-07-01T00:00:00Z",
        ]
    )

    assert code == 1
    assert json.loads(capsys.readouterr().out) == {
        "valid": False,
        "errors": {"due_at": "Due date cannot be after the term end date."},
    }


def test_main_exits_two_on_configuration_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    policy = _write_policy(tmp_path, "has_grading_periods: true\n")

    code = main(["--policy", str(policy), "--due-at", "2024-03-03"])

    assert code == 2
    assert "reason_code=invalid_grading_period" in capsys.readouterr().out
