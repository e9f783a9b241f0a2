"""URI pattern compilation and matching.

A route template such as ``/users/{id:int}/posts/{slug}`` is split into
literal and placeholder segments and compiled into one regex anchored on
the whole path. Matching is whole-path only: no prefixes, no partial
segment matches.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from junction.errors import ConfigurationError, InvalidPatternType
from junction.routing.params import CONVERTERS, DEFAULT_TYPE

_PARAM_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def normalize_path(path: str) -> str:
    """Normalize a request path or route template for comparison.

    Strips the query string, ensures a leading ``/``, and strips
    trailing slashes everywhere except the root path.

        normalize_path("users/42/?tab=1") -> "/users/42"
        normalize_path("")                -> "/"
    """
    path = path.partition("?")[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route template.

    Literal:  ``/users``      (is_param=False)
    Param:    ``/{id}``       (is_param=True, param_name="id", param_type="any")
    Typed:    ``/{id:int}``   (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = DEFAULT_TYPE


def parse_template(template: str) -> list[PathSegment]:
    """Parse a route template into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("users"), PathSegment("{id:int}", ..., param_type="int")]
        "/"               -> []

    Raises ``InvalidPatternType`` for an unknown placeholder type and
    ``ConfigurationError`` for malformed or duplicate placeholders.
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()
    normalized = normalize_path(template)

    for part in normalized.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route {template!r} uses <param> syntax; "
                "junction expects {param} or {param:type}."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            name, _, param_type = inner.partition(":")
            name = name.strip()
            param_type = param_type.strip() or DEFAULT_TYPE
            if not _PARAM_NAME_RE.match(name):
                msg = f"Invalid placeholder name {name!r} in route {template!r}"
                raise ConfigurationError(msg)
            if param_type not in CONVERTERS:
                raise InvalidPatternType(param_type, template)
            if name in seen:
                msg = f"Duplicate placeholder {name!r} in route {template!r}"
                raise ConfigurationError(msg)
            seen.add(name)
            segments.append(
                PathSegment(value=part, is_param=True, param_name=name, param_type=param_type)
            )
        elif "{" in part or "}" in part:
            msg = (
                f"Segment {part!r} in route {template!r} mixes literal text and "
                "placeholders; a placeholder must span the whole segment."
            )
            raise ConfigurationError(msg)
        else:
            segments.append(PathSegment(value=part))
    return segments


@dataclass(frozen=True, slots=True)
class UriPattern:
    """A compiled route template.

    Usage::

        pattern = UriPattern.compile("/users/{id:int}")
        pattern.match("/users/42/")              # ("42",)
        pattern.extract_parameters("/users/42")  # {"id": "42"}
        pattern.match("/users/abc")              # None
    """

    template: str
    segments: tuple[PathSegment, ...]
    regex: re.Pattern[str]

    @classmethod
    def compile(cls, template: str) -> UriPattern:
        segments = tuple(parse_template(template))
        parts: list[str] = []
        for seg in segments:
            if seg.is_param:
                parts.append(f"({CONVERTERS[seg.param_type]})")
            else:
                parts.append(re.escape(seg.value))
        source = "^/" + "/".join(parts) + "$"
        literal = "/" + "/".join(seg.value for seg in segments)
        return cls(template=literal, segments=segments, regex=re.compile(source))

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(seg.param_name for seg in self.segments if seg.param_name is not None)

    @property
    def param_types(self) -> dict[str, str]:
        return {
            seg.param_name: seg.param_type
            for seg in self.segments
            if seg.param_name is not None
        }

    @property
    def has_parameters(self) -> bool:
        return any(seg.is_param for seg in self.segments)

    def match(self, path: str) -> tuple[str, ...] | None:
        """Return captured values in placeholder order, or None."""
        found = self.regex.fullmatch(normalize_path(path))
        if found is None:
            return None
        return found.groups()

    def extract_parameters(self, path: str) -> dict[str, str] | None:
        """Map placeholder names to their raw captured strings, or None."""
        values = self.match(path)
        if values is None:
            return None
        return dict(zip(self.param_names, values, strict=True))

    def build(self, **params: object) -> str:
        """Fill placeholders to produce a concrete path.

        Raises ``ValueError`` if a placeholder is missing or a value does
        not satisfy its declared type.
        """
        parts: list[str] = []
        for seg in self.segments:
            if not seg.is_param:
                parts.append(seg.value)
                continue
            if seg.param_name not in params:
                msg = f"Missing value for {seg.param_name!r} in route {self.template!r}"
                raise ValueError(msg)
            value = str(params[seg.param_name])
            if not re.fullmatch(CONVERTERS[seg.param_type], value):
                msg = f"Value {value!r} does not satisfy {seg.param_name}:{seg.param_type}"
                raise ValueError(msg)
            parts.append(value)
        return "/" + "/".join(parts)

    def __str__(self) -> str:
        return self.template
