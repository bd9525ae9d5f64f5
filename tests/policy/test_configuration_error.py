from __future__ import annotations

from assignment_dates.errors import PolicyConfigurationError


def test_error_message_contract_uses_reason_key_detail() -> None:
    error = PolicyConfigurationError(
        "invalid_date_range",
        key="valid_date_range",
        detail="start is after end",
    )

    assert str(error) == (
        "reason_code=invalid_date_range; key=valid_date_range; detail=start is after end"
    )
    assert error.reason_code == "invalid_date_range"
    assert error.context.key == "valid_date_range"
    assert isinstance(error, ValueError)


def test_error_defaults_to_placeholder_key() -> None:
    error = PolicyConfigurationError("invalid_yaml_root")

    assert str(error) == "reason_code=invalid_yaml_root; key=<none>; detail="
