"""Shared type aliases used across junction modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: receives the request, returns anything negotiable
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
