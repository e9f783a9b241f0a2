"""Content negotiation: maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import dataclasses
from typing import Any

from junction.config import RouterConfig
from junction.http.response import Response

_DEFAULT_CONFIG = RouterConfig()


def negotiate(value: Any, *, config: RouterConfig | None = None) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``(value, int)``        -> negotiate value, override status
    3. ``(value, int, dict)``  -> negotiate value, override status + headers
    4. ``None``                -> 204 No Content
    5. ``str``                 -> 200, default content type
    6. ``bytes``               -> 200, application/octet-stream
    7. ``dict`` / ``list`` / ``tuple`` -> 200, application/json
    8. dataclass instance      -> 200, application/json of its fields
    9. anything else           -> 200, ``str(value)``
    """
    cfg = config or _DEFAULT_CONFIG
    match value:
        case Response():
            return value
        case tuple([body, int() as status]) if not isinstance(status, bool):
            return negotiate(body, config=cfg).with_status(status)
        case tuple([body, int() as status, dict() as headers]) if not isinstance(status, bool):
            return negotiate(body, config=cfg).with_status(status).with_headers(headers)
        case None:
            return Response.no_content()
        case str():
            return Response.content(value, content_type=cfg.default_content_type)
        case bytes():
            return Response.content(value, content_type="application/octet-stream")
        case dict() | list() | tuple():
            return Response.json(value, ensure_ascii=cfg.json_ensure_ascii)
        case _ if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return Response.json(dataclasses.asdict(value), ensure_ascii=cfg.json_ensure_ascii)
        case _:
            return Response.content(str(value), content_type=cfg.default_content_type)
