"""Junction exception hierarchy.

Shared across the router, middleware, handlers, and validation so every
module raises and catches the same types.

Two families:

- ``ConfigurationError`` and its subclasses signal programming mistakes
  found at registration time. The router never catches them.
- ``HTTPError`` and its subclasses map directly to a response status and
  are translated into JSON error responses by the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from junction.validation.result import ValidationResult


class JunctionError(Exception):
    """Base for all junction-specific errors."""


class ConfigurationError(JunctionError):
    """Raised when routes, rules, or middleware are configured incorrectly.

    Expected to abort startup rather than surface during a request.
    """


class InvalidPatternType(ConfigurationError):  # noqa: N818 - named after the failure it reports
    """A route placeholder declares a type with no registered converter."""

    def __init__(self, param_type: str, template: str = "") -> None:
        self.param_type = param_type
        self.template = template
        where = f" in {template!r}" if template else ""
        super().__init__(f"Invalid parameter type {param_type!r}{where}")


class UnknownRule(ConfigurationError):  # noqa: N818 - named after the failure it reports
    """A rule-string names a validation rule that does not exist."""

    def __init__(self, rule_name: str, *, parameterized: bool = False) -> None:
        self.rule_name = rule_name
        kind = "parameterized validation rule" if parameterized else "validation rule"
        super().__init__(f"Unknown {kind}: {rule_name}")


class InvalidRuleParameter(ConfigurationError):  # noqa: N818 - named after the failure it reports
    """A known validation rule received a parameter it cannot use."""


class InvalidMethod(ConfigurationError, ValueError):  # noqa: N818 - named after the failure it reports
    """A string is not one of the supported HTTP methods."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Invalid HTTP method: {method}")


@dataclass(frozen=True, slots=True)
class HTTPError(JunctionError):
    """An error that maps directly to an HTTP status code.

    Raised by the route table, controller resolution, middleware, or
    handlers. The dispatcher catches these and renders them as JSON.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class RouteNotFound(HTTPError):  # noqa: N818 - conventional name in web frameworks
    """404: no route matches the path for any method."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


NotFound = RouteNotFound


class MethodNotAllowed(HTTPError):  # noqa: N818 - conventional name in web frameworks
    """405: the path exists but not for this HTTP method.

    Carries an ``Allow`` header listing the methods that do match.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
        object.__setattr__(self, "allowed", allowed)


class ControllerNotFound(HTTPError):  # noqa: N818 - conventional name in web frameworks
    """500: a controller reference could not be resolved."""

    def __init__(self, controller: str) -> None:
        super().__init__(status=500, detail=f"Controller not found: {controller}")


class ControllerMethodNotFound(HTTPError):  # noqa: N818 - conventional name in web frameworks
    """501: the controller exists but does not expose the method."""

    def __init__(self, controller: str, method: str) -> None:
        super().__init__(
            status=501,
            detail=f"Controller method not found: {controller}.{method}",
        )


class ValidationFailed(HTTPError):  # noqa: N818 - named after the failure it reports
    """422: one or more fields failed validation.

    Holds the full ``ValidationResult`` so the error response can expose
    every field's messages.
    """

    def __init__(self, result: ValidationResult, detail: str = "Validation failed") -> None:
        super().__init__(status=422, detail=detail)
        object.__setattr__(self, "result", result)

    @property
    def errors(self) -> dict[str, list[str]]:
        return self.result.errors
