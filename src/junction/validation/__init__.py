"""Input validation: rule-strings, composable rules, clean results.

Usage::

    from junction.validation import validate

    def register(request: Request):
        result = validate(request.all(), {
            "name": "required|alpha|max:50",
            "age": "required|integer|min:18|max:120",
            "email": "required|email|onError('Please give a real address')",
        })
        if not result:
            return result.to_dict(), 422
        # result.data has the values that passed
"""

from collections.abc import Mapping
from typing import Any

from junction.validation.parser import RuleDescriptor, RuleKind, RuleParser
from junction.validation.result import ValidationResult
from junction.validation.rules import (
    Alpha,
    AlphaNumeric,
    Boolean,
    Date,
    Email,
    In,
    Integer,
    MaxLength,
    MaxValue,
    MinLength,
    MinValue,
    Numeric,
    Regex,
    Required,
    Rule,
    Url,
    Uuid,
)
from junction.validation.validator import Rules, Validator

__all__ = [
    "Alpha",
    "AlphaNumeric",
    "Boolean",
    "Date",
    "Email",
    "In",
    "Integer",
    "MaxLength",
    "MaxValue",
    "MinLength",
    "MinValue",
    "Numeric",
    "Regex",
    "Required",
    "Rule",
    "RuleDescriptor",
    "RuleKind",
    "RuleParser",
    "Rules",
    "Url",
    "Uuid",
    "ValidationResult",
    "Validator",
    "validate",
]

_default_validator = Validator()


def validate(data: Mapping[str, Any], rules: Rules) -> ValidationResult:
    """Validate *data* against *rules* with the shared default validator.

    Args:
        data: Any mapping of field names to values, such as
            ``request.all()`` or a plain ``dict``.
        rules: Field names mapped to a rule-string (``"required|email"``)
            or to a sequence of ``Rule`` objects.

    Returns:
        A ``ValidationResult`` with ``.data`` (values that passed) and
        ``.errors`` (field -> list of error messages).
    """
    return _default_validator.validate(data, rules)
