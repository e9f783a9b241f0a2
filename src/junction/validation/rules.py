"""Built-in validation rules.

Every rule is an immutable value with the same interface::

    rule.evaluate(value) -> bool   # True when the value passes
    rule.message                   # custom message, or the rule's default
    rule.with_message("...")       # copy carrying a custom message

Rules never raise for bad *input*: a missing or wrongly-typed value simply
fails. Bad rule *parameters* (an unparseable regex, an unknown UUID version)
raise ``InvalidRuleParameter`` when the rule is constructed.

Custom rules subclass ``Rule``, declare their parameters as dataclass
fields, and implement ``evaluate`` and ``default_message``.
"""

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Sized
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Self
from urllib.parse import urlsplit

from junction.errors import InvalidRuleParameter


@dataclass(frozen=True, slots=True)
class Rule(ABC):
    """Base for all validation rules."""

    custom_message: str | None = field(default=None, kw_only=True)

    @abstractmethod
    def evaluate(self, value: Any) -> bool:
        """Return True when *value* satisfies the rule."""

    @abstractmethod
    def default_message(self) -> str:
        """The message reported when no custom message is set."""

    @property
    def message(self) -> str:
        if self.custom_message is not None:
            return self.custom_message
        return self.default_message()

    def with_message(self, message: str) -> Self:
        """Return a copy of this rule that reports *message* on failure."""
        return replace(self, custom_message=message)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_NUMERIC_RE = re.compile(r"\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*", re.ASCII)
_INTEGER_RE = re.compile(r"[+-]?(0|[1-9]\d*)", re.ASCII)


def is_numeric(value: Any) -> bool:
    """True for ints, floats, and numeric strings. Booleans are not numbers."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int | float):
        return True
    return isinstance(value, str) and _NUMERIC_RE.fullmatch(value) is not None


def _number(value: int | float | str) -> int | float:
    # ints compare exactly against float bounds, however large
    if isinstance(value, int | float):
        return value
    return float(value)


def format_bound(bound: float) -> str:
    """Render a numeric bound without a trailing ``.0``."""
    if math.isfinite(bound) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def _length(value: Any) -> int | None:
    if isinstance(value, str | list | tuple | dict | set | frozenset):
        return len(value)
    return None


# ---------------------------------------------------------------------------
# Presence and type checks
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Required(Rule):
    """Value must be present: not None, not blank, not an empty collection."""

    def evaluate(self, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip() != ""
        if isinstance(value, Sized) and not isinstance(value, bytes):
            return len(value) > 0
        return True

    def default_message(self) -> str:
        return "This field is required"


# Basic email pattern: checks structure, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


@dataclass(frozen=True, slots=True)
class Email(Rule):
    def evaluate(self, value: Any) -> bool:
        return isinstance(value, str) and _EMAIL_RE.match(value) is not None

    def default_message(self) -> str:
        return "Must be a valid email address"


@dataclass(frozen=True, slots=True)
class Url(Rule):
    """Absolute URL with a scheme and a host."""

    def evaluate(self, value: Any) -> bool:
        if not isinstance(value, str) or not value or any(c.isspace() for c in value):
            return False
        try:
            parts = urlsplit(value)
        except ValueError:
            return False
        return bool(parts.scheme and parts.netloc)

    def default_message(self) -> str:
        return "Must be a valid URL"


@dataclass(frozen=True, slots=True)
class Numeric(Rule):
    def evaluate(self, value: Any) -> bool:
        return is_numeric(value)

    def default_message(self) -> str:
        return "Must be a number"


@dataclass(frozen=True, slots=True)
class Integer(Rule):
    """Whole number: an int, an integral float, or a string like ``"-42"``."""

    def evaluate(self, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        if isinstance(value, float):
            return math.isfinite(value) and value.is_integer()
        return isinstance(value, str) and _INTEGER_RE.fullmatch(value.strip()) is not None

    def default_message(self) -> str:
        return "Must be an integer"


_ALPHA_RE = re.compile(r"[a-zA-ZÀ-ÿ\s]+")
_ALPHANUMERIC_RE = re.compile(r"[a-zA-Z0-9]+")


@dataclass(frozen=True, slots=True)
class Alpha(Rule):
    """Letters (including Latin-1 accented letters) and whitespace."""

    def evaluate(self, value: Any) -> bool:
        return isinstance(value, str) and _ALPHA_RE.fullmatch(value) is not None

    def default_message(self) -> str:
        return "Must contain only letters"


@dataclass(frozen=True, slots=True)
class AlphaNumeric(Rule):
    def evaluate(self, value: Any) -> bool:
        return isinstance(value, str) and _ALPHANUMERIC_RE.fullmatch(value) is not None

    def default_message(self) -> str:
        return "Must contain only letters and numbers"


_BOOLEAN_STRINGS = frozenset({"0", "1", "true", "false"})


@dataclass(frozen=True, slots=True)
class Boolean(Rule):
    """``True``/``False``, ``0``/``1``, or one of ``"0" "1" "true" "false"``."""

    def evaluate(self, value: Any) -> bool:
        if isinstance(value, bool):
            return True
        if isinstance(value, int):
            return value in (0, 1)
        return isinstance(value, str) and value in _BOOLEAN_STRINGS

    def default_message(self) -> str:
        return "Must be a boolean value"


_UUID_PATTERNS: dict[str, re.Pattern[str]] = {
    "v4": re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}", re.I),
    "v1": re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-1[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}", re.I),
    "any": re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.I),
}


@dataclass(frozen=True, slots=True)
class Uuid(Rule):
    """Canonical 8-4-4-4-12 UUID.

    ``version`` is ``"v4"`` (default), ``"v1"``, or ``"any"``. A bare
    digit (``"4"``) is accepted as shorthand for ``"v4"``.
    """

    version: str = "v4"

    def __post_init__(self) -> None:
        version = self.version.lower()
        if version.isdigit():
            version = f"v{version}"
        if version not in _UUID_PATTERNS:
            msg = f"Unsupported UUID version: {self.version!r}"
            raise InvalidRuleParameter(msg)
        object.__setattr__(self, "version", version)

    def evaluate(self, value: Any) -> bool:
        return isinstance(value, str) and _UUID_PATTERNS[self.version].fullmatch(value) is not None

    def default_message(self) -> str:
        if self.version == "any":
            return "Must be a valid UUID"
        return f"Must be a valid UUID {self.version}"


# ---------------------------------------------------------------------------
# Length and value bounds
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MinLength(Rule):
    """String length or collection size must be at least *length*."""

    length: int

    def evaluate(self, value: Any) -> bool:
        size = _length(value)
        return size is not None and size >= self.length

    def default_message(self) -> str:
        return f"Must be at least {self.length} characters"


@dataclass(frozen=True, slots=True)
class MaxLength(Rule):
    """String length or collection size must be at most *length*."""

    length: int

    def evaluate(self, value: Any) -> bool:
        size = _length(value)
        return size is not None and size <= self.length

    def default_message(self) -> str:
        return f"Must be at most {self.length} characters"


@dataclass(frozen=True, slots=True)
class MinValue(Rule):
    """Numeric value must be at least *bound*."""

    bound: float

    def evaluate(self, value: Any) -> bool:
        return is_numeric(value) and _number(value) >= self.bound

    def default_message(self) -> str:
        return f"Must be at least {format_bound(self.bound)}"


@dataclass(frozen=True, slots=True)
class MaxValue(Rule):
    """Numeric value must be at most *bound*."""

    bound: float

    def evaluate(self, value: Any) -> bool:
        return is_numeric(value) and _number(value) <= self.bound

    def default_message(self) -> str:
        return f"Must be at most {format_bound(self.bound)}"


# ---------------------------------------------------------------------------
# Membership and format
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class In(Rule):
    """Value must be one of the allowed strings (exact, case-sensitive)."""

    allowed: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.allowed:
            msg = "The 'in' rule needs at least one allowed value"
            raise InvalidRuleParameter(msg)

    def evaluate(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.allowed

    def default_message(self) -> str:
        return f"Must be one of: {', '.join(self.allowed)}"


_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE, "u": 0}
_DELIMITED_RE = re.compile(r"/(?P<body>.*)/(?P<flags>[imsxu]*)", re.DOTALL)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a raw pattern or a ``/pattern/flags`` delimited one."""
    flags = 0
    delimited = _DELIMITED_RE.fullmatch(pattern)
    if delimited is not None:
        pattern = delimited["body"]
        for flag in delimited["flags"]:
            flags |= _REGEX_FLAGS[flag]
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        msg = f"Invalid regex pattern {pattern!r}: {exc}"
        raise InvalidRuleParameter(msg) from exc


@dataclass(frozen=True, slots=True)
class Regex(Rule):
    """String in which *pattern* is found (``re.search`` semantics).

    Anchor with ``^...$`` for a whole-value match.
    """

    pattern: str
    _compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", compile_pattern(self.pattern))

    def evaluate(self, value: Any) -> bool:
        return isinstance(value, str) and self._compiled.search(value) is not None

    def default_message(self) -> str:
        return "Invalid format"


# Date format tokens -> (strptime directive, renderer)
_DATE_TOKENS: dict[str, tuple[str, Any]] = {
    "Y": ("%Y", lambda d: f"{d.year:04d}"),
    "y": ("%y", lambda d: f"{d.year % 100:02d}"),
    "m": ("%m", lambda d: f"{d.month:02d}"),
    "n": ("%m", lambda d: str(d.month)),
    "d": ("%d", lambda d: f"{d.day:02d}"),
    "j": ("%d", lambda d: str(d.day)),
    "H": ("%H", lambda d: f"{d.hour:02d}"),
    "G": ("%H", lambda d: str(d.hour)),
    "i": ("%M", lambda d: f"{d.minute:02d}"),
    "s": ("%S", lambda d: f"{d.second:02d}"),
    "D": ("%a", lambda d: d.strftime("%a")),
    "l": ("%A", lambda d: d.strftime("%A")),
    "M": ("%b", lambda d: d.strftime("%b")),
    "F": ("%B", lambda d: d.strftime("%B")),
    "A": ("%p", lambda d: "AM" if d.hour < 12 else "PM"),
    "a": ("%p", lambda d: "am" if d.hour < 12 else "pm"),
}


def _compile_date_format(fmt: str) -> tuple[str, tuple[Any, ...]]:
    """Translate a token format (``Y-m-d``) into a strptime format and renderers.

    A backslash escapes the next character as a literal. Letters that are
    not tokens are rejected.
    """
    directives: list[str] = []
    renderers: list[Any] = []
    chars = iter(fmt)
    for char in chars:
        if char == "\\":
            literal = next(chars, "\\")
            directives.append(literal.replace("%", "%%"))
            renderers.append(literal)
        elif char in _DATE_TOKENS:
            directive, render = _DATE_TOKENS[char]
            directives.append(directive)
            renderers.append(render)
        elif char.isascii() and char.isalpha():
            msg = f"Unsupported date format token {char!r} in {fmt!r}"
            raise InvalidRuleParameter(msg)
        else:
            directives.append(char.replace("%", "%%"))
            renderers.append(char)
    return "".join(directives), tuple(renderers)


@dataclass(frozen=True, slots=True)
class Date(Rule):
    """String that parses in *format* and formats back to the same text.

    *format* uses letter tokens (``Y-m-d``, ``d/m/Y H:i``). A format
    containing ``%`` is a ``strftime`` format and is used as-is.
    """

    format: str = "Y-m-d"
    _strptime: str = field(init=False, repr=False, compare=False)
    _renderers: tuple[Any, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.format:
            msg = "The 'date' rule needs a format"
            raise InvalidRuleParameter(msg)
        if "%" in self.format:
            strptime_format, renderers = self.format, ()
        else:
            strptime_format, renderers = _compile_date_format(self.format)
        object.__setattr__(self, "_strptime", strptime_format)
        object.__setattr__(self, "_renderers", renderers)

    def _render(self, parsed: datetime) -> str:
        if not self._renderers:
            return parsed.strftime(self._strptime)
        return "".join(r if isinstance(r, str) else r(parsed) for r in self._renderers)

    def evaluate(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        try:
            parsed = datetime.strptime(value, self._strptime)  # noqa: DTZ007
        except ValueError:
            return False
        return self._render(parsed) == value

    def default_message(self) -> str:
        return f"Must be a valid date in format {self.format}"
