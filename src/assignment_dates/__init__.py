"""Date-window validation for assignment due and availability dates."""

from assignment_dates.errors import PolicyConfigurationError
from assignment_dates.field_errors import FieldError, FieldErrorMapper, validation_error
from assignment_dates.policy import (
    DateRange,
    GradingPeriod,
    PolicyContext,
    build_policy_context,
    load_policy_context,
    policy_from_page_env,
)
from assignment_dates.session import AssignToCardSession
from assignment_dates.validator import DateWindowInput, DateWindowValidator, SetType

__all__ = [
    "AssignToCardSession",
    "DateRange",
    "DateWindowInput",
    "DateWindowValidator",
    "FieldError",
    "FieldErrorMapper",
    "GradingPeriod",
    "PolicyConfigurationError",
    "PolicyContext",
    "SetType",
    "build_policy_context",
    "load_policy_context",
    "policy_from_page_env",
    "validation_error",
]
