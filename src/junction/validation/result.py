"""Validation result: immutable container for validated data or errors."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating input data against a set of rules.

    ``is_valid`` is True when there are no errors.
    The result is falsy when invalid, so you can write::

        result = validate(request.all(), rules)
        if not result:
            return result.to_dict(), 422

    ``data`` contains the values of every field that passed its rules.

    ``errors`` maps field names to lists of error messages. A field absent
    from ``errors`` validated successfully::

        {"name": ["This field is required"],
         "email": ["Must be a valid email address"]}
    """

    data: dict[str, Any]
    errors: dict[str, list[str]]

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    def __bool__(self) -> bool:
        """Falsy when invalid, enabling the ``if not result:`` pattern."""
        return self.is_valid

    def first_error(self, field: str) -> str | None:
        messages = self.errors.get(field)
        return messages[0] if messages else None

    def all_errors(self) -> list[str]:
        """Every message, flattened in field order."""
        return [message for messages in self.errors.values() for message in messages]

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.is_valid, "errors": {k: list(v) for k, v in self.errors.items()}}
