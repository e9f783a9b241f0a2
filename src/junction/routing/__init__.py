"""Routing: URI patterns, the route table, and the router."""

from junction.routing.controllers import ControllerResolver
from junction.routing.pattern import UriPattern, normalize_path
from junction.routing.route import ControllerRef, FunctionHandler, Route, RouteMatch
from junction.routing.router import RouteBuilder, Router
from junction.routing.table import RouteTable

__all__ = [
    "ControllerRef",
    "ControllerResolver",
    "FunctionHandler",
    "Route",
    "RouteBuilder",
    "RouteMatch",
    "RouteTable",
    "Router",
    "UriPattern",
    "normalize_path",
]
