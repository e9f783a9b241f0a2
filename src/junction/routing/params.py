"""Route placeholder types.

Each ``{name:type}`` placeholder matches one path segment against the
character class registered here. Captured values stay strings; the type
tag is kept on the pattern so callers can coerce if they want to.
"""

# placeholder type -> regex for a single path segment
CONVERTERS: dict[str, str] = {
    "any": r"[^/]+",
    "int": r"[0-9]+",
    "number": r"[0-9]+",
    "alpha": r"[a-zA-Z]+",
    "letter": r"[a-zA-Z]+",
    "alphanumeric": r"[a-zA-Z0-9]+",
    "uuid": r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    "slug": r"[a-z0-9-]+",
}

DEFAULT_TYPE = "any"


def convert_param(value: str, param_type: str) -> str | int:
    """Coerce a captured value according to its placeholder type.

    ``int`` and ``number`` become ``int``; every other type stays ``str``.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    if param_type not in CONVERTERS:
        raise KeyError(param_type)
    if param_type in ("int", "number"):
        return int(value)
    return value
