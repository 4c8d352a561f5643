from __future__ import annotations

import importlib
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable


class ServiceLocatorError(RuntimeError):
    pass


class ServiceAlreadyRegisteredError(ServiceLocatorError):
    pass


class ServiceNotFoundError(ServiceLocatorError):
    pass


def import_object(path: str) -> Any:
    """Resolve "package.module:attr" (or "package.module.attr")."""
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ValueError(f"invalid import path: {path!r}")
    module = importlib.import_module(module_name)
    obj: Any = module
    for part in attr.split("."):
        obj = getattr(obj, part)
    return obj


@dataclass
class ServiceLocator:
    """
    Service reference -> live instance.

    Instances can be registered directly, or as zero-arg factories that are
    called on first `get()` and cached afterwards.
    """

    _instances: dict[str, Any] = field(default_factory=dict)
    _factories: dict[str, Callable[[], Any]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def from_import_paths(cls, services: Mapping[str, str]) -> "ServiceLocator":
        """Classes are instantiated lazily with no arguments; other objects are used as-is."""
        loc = cls()
        for ref, path in services.items():
            obj = import_object(path)
            if isinstance(obj, type):
                loc.register_factory(ref, obj)
            else:
                loc.register(ref, obj)
        return loc

    def _check_ref(self, ref: str) -> None:
        if not isinstance(ref, str) or not ref:
            raise ValueError("service reference must be a non-empty string")
        if ref in self._instances or ref in self._factories:
            raise ServiceAlreadyRegisteredError(f"{ref} already registered")

    def register(self, ref: str, instance: Any) -> None:
        self._check_ref(ref)
        self._instances[ref] = instance

    def register_factory(self, ref: str, factory: Callable[[], Any]) -> None:
        if not callable(factory):
            raise TypeError("factory must be callable")
        self._check_ref(ref)
        self._factories[ref] = factory

    def has(self, ref: str) -> bool:
        return ref in self._instances or ref in self._factories

    def get(self, ref: str) -> Any:
        try:
            return self._instances[ref]
        except KeyError:
            pass
        with self._lock:
            if ref in self._instances:
                return self._instances[ref]
            try:
                factory = self._factories[ref]
            except KeyError as exc:
                raise ServiceNotFoundError(f"service {ref} not found") from exc
            instance = factory()
            self._instances[ref] = instance
            return instance
