#!/usr/bin/env python3
"""Validate assignment due/availability dates against a YAML policy."""

# ruff: noqa: E402

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any, Sequence

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from assignment_dates.app_logger import setup_logging
from assignment_dates.check import load_input_json, run_date_window_check
from assignment_dates.errors import PolicyConfigurationError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--policy",
        default="configs/date_policy.yaml",
        help="Path to the policy YAML document.",
    )
    parser.add_argument(
        "--input",
        default=None,
        help="Path to a JSON object with due_at/unlock_at/lock_at keys.",
    )
    parser.add_argument("--due-at", default=None, help="Due date override.")
    parser.add_argument("--unlock-at", default=None, help="Available-from override.")
    parser.add_argument("--lock-at", default=None, help="Available-until override.")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level for the assignment_dates logger.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level, console=True)

    payload: dict[str, Any] = {}
    if args.input is not None:
        payload.update(load_input_json(args.input))
    for key in ("due_at", "unlock_at", "lock_at"):
        value = getattr(args, key)
        if value is not None:
            payload[key] = value

    try:
        result = run_date_window_check(args.policy, payload)
    except PolicyConfigurationError as exc:
        print(f"FAIL: {exc}")
        return 2

    print(json.dumps(result.as_dict(), sort_keys=True, indent=2))
    return 0 if result.valid else 1


if __name__ == "__main__":
    raise SystemExit(main())
