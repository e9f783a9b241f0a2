"""Field-by-field validation.

Each field's rules run in order and stop at the first failure, so a field
reports at most one message. Every field is checked regardless of how its
siblings fared.
"""

from collections.abc import Mapping, Sequence
from typing import Any, TypeAlias

from junction.validation.parser import RuleParser
from junction.validation.result import ValidationResult
from junction.validation.rules import Rule

# field -> rule-string ("required|email") or prebuilt rules ([Required(), Email()])
Rules: TypeAlias = Mapping[str, str | Sequence[Rule]]


class Validator:
    """Applies rules to a mapping of input values.

    Usage::

        validator = Validator()
        result = validator.validate(
            {"name": "", "email": "bad"},
            {"name": "required", "email": "required|email"},
        )
        result.errors
        # {"name": ["This field is required"],
        #  "email": ["Must be a valid email address"]}
    """

    __slots__ = ("_parser",)

    def __init__(self, parser: RuleParser | None = None) -> None:
        self._parser = parser or RuleParser()

    @property
    def parser(self) -> RuleParser:
        return self._parser

    def rules_for(self, field_rules: str | Sequence[Rule]) -> tuple[Rule, ...]:
        if isinstance(field_rules, str):
            return self._parser.parse(field_rules)
        return tuple(field_rules)

    def validate(self, data: Mapping[str, Any], rules: Rules) -> ValidationResult:
        """Validate *data* against *rules*.

        A field missing from *data* is validated as ``None``; each rule
        decides whether ``None`` passes.

        Raises:
            UnknownRule: A rule-string names a rule that does not exist.
            InvalidRuleParameter: A rule-string has an unusable parameter.
        """
        errors: dict[str, list[str]] = {}
        cleaned: dict[str, Any] = {}

        for field, field_rules in rules.items():
            value = data.get(field)
            for rule in self.rules_for(field_rules):
                if not rule.evaluate(value):
                    errors.setdefault(field, []).append(rule.message)
                    break
            else:
                if field in data:
                    cleaned[field] = value

        return ValidationResult(data=cleaned, errors=errors)
