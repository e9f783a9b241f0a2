"""HTTP value types: methods, headers, query parameters, requests, responses."""

from junction.http.headers import Headers
from junction.http.method import HttpMethod
from junction.http.query import QueryParams
from junction.http.request import Request
from junction.http.response import Response

__all__ = [
    "Headers",
    "HttpMethod",
    "QueryParams",
    "Request",
    "Response",
]
