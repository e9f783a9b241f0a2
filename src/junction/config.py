"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(debug=True, max_content_length=1024 * 1024)
    """

    # Expose exception text in 500 responses instead of a generic message
    debug: bool = False

    # JSON responses
    json_ensure_ascii: bool = False

    # Content type for plain string handler results
    default_content_type: str = "text/html; charset=utf-8"

    # Request bodies larger than this are rejected at capture time
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Cache parsed rule-strings across requests
    memoize_rules: bool = True
