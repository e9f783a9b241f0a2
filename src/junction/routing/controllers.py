"""Controller resolution: ``ControllerRef`` -> bound callable.

A controller may be given as a class, an instance, a name registered on
the resolver, or an import string. Classes are instantiated with no
arguments on every request; instances are shared as-is.
"""

from __future__ import annotations

import importlib
from collections.abc import Callable
from typing import Any

from junction.errors import ControllerMethodNotFound, ControllerNotFound
from junction.routing.route import ControllerRef


class ControllerResolver:
    """Resolves controller references for the dispatcher.

    Usage::

        resolver = ControllerResolver()
        resolver.register("users", UserController)
        handler = resolver.resolve(ControllerRef("users", "show"))
        handler(request)

    Import strings accept ``"module:Class"`` or ``"module.Class"``.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: dict[str, Callable[[], Any]] | None = None) -> None:
        self._registry: dict[str, Callable[[], Any]] = dict(registry or {})

    def register(self, name: str, factory: Callable[[], Any]) -> None:
        """Register a zero-argument factory (usually a class) under *name*."""
        self._registry[name] = factory

    def resolve(self, ref: ControllerRef) -> Callable[..., Any]:
        """Return the bound controller method for *ref*.

        Raises ``ControllerNotFound`` when the controller cannot be located
        or constructed, and ``ControllerMethodNotFound`` when it has no
        callable attribute named ``ref.method``.
        """
        instance = self._instantiate(ref)
        method = getattr(instance, ref.method, None)
        if method is None or not callable(method):
            raise ControllerMethodNotFound(ref.label, ref.method)
        return method

    def _instantiate(self, ref: ControllerRef) -> Any:
        target = ref.controller
        if isinstance(target, str):
            factory = self._registry.get(target)
            if factory is not None:
                return _construct(factory, ref.label)
            target = _import_object(target)
        if isinstance(target, type):
            return _construct(target, ref.label)
        return target


def _construct(factory: Callable[[], Any], label: str) -> Any:
    try:
        return factory()
    except Exception as exc:
        raise ControllerNotFound(label) from exc


def _import_object(import_string: str) -> Any:
    """Import ``"module:attr"`` or ``"module.attr"``.

    Raises ``ControllerNotFound`` if the module or attribute is missing.
    """
    if ":" in import_string:
        module_path, _, attr_name = import_string.partition(":")
    else:
        module_path, _, attr_name = import_string.rpartition(".")
    if not module_path or not attr_name:
        raise ControllerNotFound(import_string)
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ControllerNotFound(import_string) from exc
    try:
        return getattr(module, attr_name)
    except AttributeError as exc:
        raise ControllerNotFound(import_string) from exc
