from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from .params import ParameterSpec


class MethodRegistryError(RuntimeError):
    pass


class MethodAlreadyRegisteredError(MethodRegistryError):
    pass


@dataclass(frozen=True)
class MethodDescriptor:
    """
    Where an RPC method lives.

    `service` is either a service reference (str, resolved through a
    ServiceLocator at dispatch time) or the handler object itself. `member` is
    the attribute to call on it; None means the service is the callable.
    """

    service: Any
    member: str | None = None
    params: ParameterSpec | None = None

    @property
    def is_reference(self) -> bool:
        return isinstance(self.service, str)


@dataclass
class MethodRegistry:
    """Static mapping from public RPC method name to MethodDescriptor."""

    _methods: dict[str, MethodDescriptor] = field(default_factory=dict)
    _frozen: bool = False

    @classmethod
    def from_mapping(cls, entries: Mapping[str, MethodDescriptor]) -> "MethodRegistry":
        reg = cls()
        for name, descriptor in entries.items():
            reg.add(name, descriptor)
        return reg.freeze()

    @classmethod
    def from_config(cls, functions: Mapping[str, Mapping[str, Any]]) -> "MethodRegistry":
        return cls().load_config(functions).freeze()

    def load_config(self, functions: Mapping[str, Mapping[str, Any]]) -> "MethodRegistry":
        """
        Add entries from the `functions` configuration block:

            {"add": {"service": "calculator", "method": "add"}}
        """
        for name, entry in functions.items():
            if not isinstance(entry, Mapping):
                raise TypeError(f"function {name!r} must be a mapping, got {type(entry).__name__}")
            service = entry.get("service")
            member = entry.get("method")
            if not isinstance(service, str) or not service:
                raise ValueError(f"function {name!r}: 'service' must be a non-empty string")
            if not isinstance(member, str) or not member:
                raise ValueError(f"function {name!r}: 'method' must be a non-empty string")
            self.add(name, MethodDescriptor(service=service, member=member))
        return self

    def add(self, name: str, descriptor: MethodDescriptor) -> None:
        if self._frozen:
            raise MethodRegistryError("registry is frozen")
        if not isinstance(name, str) or not name:
            raise ValueError("method name must be a non-empty string")
        if name in self._methods:
            raise MethodAlreadyRegisteredError(f"{name} already registered")
        self._methods[name] = descriptor

    def register(
        self,
        name: str,
        handler: Any,
        member: str | None = None,
        *,
        params: ParameterSpec | None = None,
    ) -> MethodDescriptor:
        """
        Register a handler. For a direct callable with no explicit `params`,
        the parameter spec is reflected once here instead of on every call.
        """
        if member is None and not isinstance(handler, str):
            if not callable(handler):
                raise TypeError("handler must be callable")
            if params is None:
                params = ParameterSpec.from_callable(handler)
        descriptor = MethodDescriptor(service=handler, member=member, params=params)
        self.add(name, descriptor)
        return descriptor

    def method(self, name: str | None = None, *, params: ParameterSpec | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of `register`."""

        def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name or fn.__name__, fn, params=params)
            return fn

        return deco

    def freeze(self) -> "MethodRegistry":
        self._frozen = True
        return self

    def resolve(self, name: Any) -> MethodDescriptor | None:
        if not isinstance(name, str):
            return None
        return self._methods.get(name)

    def names(self) -> list[str]:
        return sorted(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)
