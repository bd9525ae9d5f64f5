"""File-driven date-window check used by the command line script."""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Mapping

from assignment_dates.policy import load_policy_context
from assignment_dates.validator import DateWindowInput, DateWindowValidator


@dataclass(frozen=True)
class DateWindowCheckResult:
    """Result payload for one date-window check."""

    valid: bool
    errors: dict[str, str]

    def as_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": dict(self.errors)}


def load_input_json(path: str | Path) -> dict[str, Any]:
    """Load a date-window input document; the root must be an object."""

    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise TypeError(f"{path}: date window input must be a JSON object")
    return payload


def run_date_window_check(
    policy_path: str | Path,
    payload: Mapping[str, Any],
) -> DateWindowCheckResult:
    """Validate one input mapping against the policy stored at ``policy_path``."""

    validator = DateWindowValidator(load_policy_context(policy_path))
    errors = validator.validate(DateWindowInput.from_mapping(payload))
    return DateWindowCheckResult(valid=not errors, errors=errors)
