"""Map internal validation attributes onto external input field names."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

ErrorSource = Union[Mapping[str, str], Iterable[tuple[str, str]]]


@dataclass(frozen=True)
class FieldError:
    """One validation error in the consistent ``{attribute, message}`` shape."""

    attribute: Optional[str]
    message: str

    def as_dict(self) -> dict[str, Any]:
        return {"attribute": self.attribute, "message": self.message}


def validation_error(message: str, attribute: str = "message") -> dict[str, Any]:
    """Wrap a single ad-hoc error message keyed by ``attribute``."""

    return {"errors": {attribute: message}}


class FieldErrorMapper:
    """Rename error attributes at the boundary using an explicit mapping.

    Attributes that have no external name come back with ``attribute=None``
    so the message is still surfaced without pointing at a wrong field.
    """

    def __init__(self, field_names: Mapping[str, str]) -> None:
        self._field_names = dict(field_names)

    @classmethod
    def identity(cls, names: Iterable[str]) -> "FieldErrorMapper":
        return cls({name: name for name in names})

    def external_name(self, attribute: str) -> Optional[str]:
        return self._field_names.get(attribute)

    def errors_for(self, errors: ErrorSource) -> list[FieldError]:
        entries = errors.items() if isinstance(errors, Mapping) else errors
        return [
            FieldError(attribute=self.external_name(attribute), message=message)
            for attribute, message in entries
        ]

    def as_payload(self, errors: ErrorSource) -> dict[str, Any]:
        return {"errors": [entry.as_dict() for entry in self.errors_for(errors)]}
