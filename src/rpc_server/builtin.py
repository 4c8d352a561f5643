from __future__ import annotations

from typing import Any

from .jsonrpc.registry import MethodDescriptor, MethodRegistry


SYSTEM_SERVICE = "system"


class SystemService:
    """Built-in introspection/health methods."""

    def __init__(self, registry: MethodRegistry) -> None:
        self._registry = registry

    def ping(self, message: str | None = None) -> dict[str, Any]:
        return {"ok": True, "message": message if isinstance(message, str) else "pong"}

    def list_methods(self) -> list[str]:
        return self._registry.names()


def register_system_methods(registry: MethodRegistry) -> None:
    registry.add("system.ping", MethodDescriptor(service=SYSTEM_SERVICE, member="ping"))
    registry.add("system.list_methods", MethodDescriptor(service=SYSTEM_SERVICE, member="list_methods"))
