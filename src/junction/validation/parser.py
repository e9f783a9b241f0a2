"""Rule-string parser.

Turns a pipe-separated rule-string into rule objects::

    "required|integer|min:18|max:120|onError('Age must be 18 to 120')"

Grammar per field::

    rule[:param] ("|" rule[:param])* ["|" onError("message")]

``min`` and ``max`` depend on the whole field: when any rule on the field
is ``numeric``, ``integer``, or ``int`` they compare numeric values,
otherwise they compare string length (or collection size). The decision
is made before any rule is built, so ``"min:3|integer"`` and
``"integer|min:3"`` are the same field.

An ``onError`` message applies to the last rule only.

Parameters are split on the first ``:``; ``in`` values are split on
``,`` with no escaping. A ``regex`` pattern cannot contain ``|`` because
the field is split on it first.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from junction.errors import InvalidRuleParameter, UnknownRule
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


class RuleKind(StrEnum):
    """Every rule kind a rule-string can produce."""

    REQUIRED = "required"
    EMAIL = "email"
    URL = "url"
    NUMERIC = "numeric"
    INTEGER = "integer"
    ALPHA = "alpha"
    ALPHANUMERIC = "alphanumeric"
    BOOLEAN = "boolean"
    UUID = "uuid"
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    MIN_VALUE = "min_value"
    MAX_VALUE = "max_value"
    IN = "in"
    REGEX = "regex"
    DATE = "date"


# Names usable without a parameter
SIMPLE_RULES: dict[str, tuple[RuleKind, tuple[str, ...]]] = {
    "required": (RuleKind.REQUIRED, ()),
    "email": (RuleKind.EMAIL, ()),
    "url": (RuleKind.URL, ()),
    "numeric": (RuleKind.NUMERIC, ()),
    "integer": (RuleKind.INTEGER, ()),
    "int": (RuleKind.INTEGER, ()),
    "alpha": (RuleKind.ALPHA, ()),
    "alphanumeric": (RuleKind.ALPHANUMERIC, ()),
    "boolean": (RuleKind.BOOLEAN, ()),
    "bool": (RuleKind.BOOLEAN, ()),
    "uuid": (RuleKind.UUID, ("v4",)),
    "uuidv4": (RuleKind.UUID, ("v4",)),
    "uuidv1": (RuleKind.UUID, ("v1",)),
}

# Names that take a parameter
PARAMETERIZED_RULES = frozenset({"min", "max", "in", "regex", "date", "uuid"})

# Any of these on a field switches min/max to value comparison
NUMERIC_MARKERS = frozenset({"numeric", "integer", "int"})

_ON_ERROR_RE = re.compile(r"""\|?\s*onError\((['"])(.+?)\1\)\s*$""")


@dataclass(frozen=True, slots=True)
class RuleDescriptor:
    """The parsed, not yet built, form of one rule in a rule-string."""

    kind: RuleKind
    parameters: tuple[str, ...] = ()
    numeric_context: bool = False
    custom_message: str | None = None

    def build(self) -> Rule:
        """Construct the rule this descriptor names."""
        rule = _build(self.kind, self.parameters)
        if self.custom_message is not None:
            rule = rule.with_message(self.custom_message)
        return rule


def _number(raw: str, rule_name: str) -> float:
    try:
        return float(raw)
    except ValueError:
        msg = f"The {rule_name!r} rule needs a numeric parameter, got {raw!r}"
        raise InvalidRuleParameter(msg) from None


def _length(raw: str, rule_name: str) -> int:
    bound = _number(raw, rule_name)
    if not bound.is_integer() or bound < 0:
        msg = f"The {rule_name!r} rule needs a whole, non-negative length, got {raw!r}"
        raise InvalidRuleParameter(msg)
    return int(bound)


def _build(kind: RuleKind, params: tuple[str, ...]) -> Rule:
    match kind:
        case RuleKind.REQUIRED:
            return Required()
        case RuleKind.EMAIL:
            return Email()
        case RuleKind.URL:
            return Url()
        case RuleKind.NUMERIC:
            return Numeric()
        case RuleKind.INTEGER:
            return Integer()
        case RuleKind.ALPHA:
            return Alpha()
        case RuleKind.ALPHANUMERIC:
            return AlphaNumeric()
        case RuleKind.BOOLEAN:
            return Boolean()
        case RuleKind.UUID:
            return Uuid(params[0] if params else "v4")
        case RuleKind.MIN_LENGTH:
            return MinLength(_length(params[0], "min"))
        case RuleKind.MAX_LENGTH:
            return MaxLength(_length(params[0], "max"))
        case RuleKind.MIN_VALUE:
            return MinValue(_number(params[0], "min"))
        case RuleKind.MAX_VALUE:
            return MaxValue(_number(params[0], "max"))
        case RuleKind.IN:
            return In(params)
        case RuleKind.REGEX:
            return Regex(params[0])
        case RuleKind.DATE:
            return Date(params[0])


def _split_on_error(rule_string: str) -> tuple[str, str | None]:
    match = _ON_ERROR_RE.search(rule_string)
    if match is None:
        return rule_string, None
    return rule_string[: match.start()], match.group(2)


def _describe_token(name: str, param: str | None, numeric: bool) -> RuleDescriptor:
    if param is None:
        if name in SIMPLE_RULES:
            kind, params = SIMPLE_RULES[name]
            return RuleDescriptor(kind, params, numeric)
        raise UnknownRule(name)

    match name:
        case "min":
            kind = RuleKind.MIN_VALUE if numeric else RuleKind.MIN_LENGTH
            return RuleDescriptor(kind, (param.strip(),), numeric)
        case "max":
            kind = RuleKind.MAX_VALUE if numeric else RuleKind.MAX_LENGTH
            return RuleDescriptor(kind, (param.strip(),), numeric)
        case "in":
            values = tuple(v.strip() for v in param.split(",") if v.strip())
            return RuleDescriptor(RuleKind.IN, values, numeric)
        case "regex":
            return RuleDescriptor(RuleKind.REGEX, (param,), numeric)
        case "date":
            return RuleDescriptor(RuleKind.DATE, (param.strip(),), numeric)
        case "uuid":
            return RuleDescriptor(RuleKind.UUID, (param.strip(),), numeric)
        case _:
            raise UnknownRule(name, parameterized=True)


def describe(rule_string: str) -> tuple[RuleDescriptor, ...]:
    """Parse *rule_string* into descriptors without building the rules."""
    body, custom_message = _split_on_error(rule_string)

    tokens: list[tuple[str, str | None]] = []
    for raw in body.split("|"):
        token = raw.strip()
        if not token:
            continue
        name, sep, param = token.partition(":")
        tokens.append((name.strip(), param if sep else None))

    numeric = any(name in NUMERIC_MARKERS for name, _ in tokens)
    descriptors = [_describe_token(name, param, numeric) for name, param in tokens]

    if custom_message is not None and descriptors:
        last = descriptors[-1]
        descriptors[-1] = RuleDescriptor(
            last.kind, last.parameters, last.numeric_context, custom_message
        )
    return tuple(descriptors)


_describe_cached = lru_cache(maxsize=512)(describe)


class RuleParser:
    """Builds rule objects from rule-strings.

    Descriptors are immutable, so parsing is memoized per rule-string
    when *memoize* is true (the default). Rule construction still
    validates parameters, so a bad parameter raises every time.
    """

    __slots__ = ("_describe",)

    def __init__(self, *, memoize: bool = True) -> None:
        self._describe = _describe_cached if memoize else describe

    def describe(self, rule_string: str) -> tuple[RuleDescriptor, ...]:
        return self._describe(rule_string)

    def parse(self, rule_string: str) -> tuple[Rule, ...]:
        """Parse *rule_string* into rules, in the order they appear.

        Raises:
            UnknownRule: A rule name does not exist.
            InvalidRuleParameter: A known rule got a parameter it cannot use.
        """
        return tuple(descriptor.build() for descriptor in self.describe(rule_string))
