"""Shared error types for policy configuration failures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorContext:
    """Structured context carried by configuration errors."""

    reason_code: str
    key: str
    detail: str


class PolicyConfigurationError(ValueError):
    """Raised when a policy context is malformed or internally inconsistent."""

    def __init__(
        self,
        reason_code: str,
        *,
        key: str = "<none>",
        detail: str = "",
    ) -> None:
        self.context = ErrorContext(reason_code=reason_code, key=key, detail=detail)
        super().__init__(f"reason_code={reason_code}; key={key}; detail={detail}")

    @property
    def reason_code(self) -> str:
        return self.context.reason_code
