from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping


TRANSPORTS = ("stdio", "http")


def _as_path(v: Any, default: Path | None) -> Path | None:
    if v is None:
        return default
    if isinstance(v, Path):
        return v
    if isinstance(v, str):
        return Path(v)
    raise TypeError(f"expected path-like value, got {type(v).__name__}")


def _as_int(v: Any, default: int) -> int:
    if v is None:
        return default
    if isinstance(v, bool):
        raise TypeError("expected int, got bool")
    if isinstance(v, int):
        return v
    if isinstance(v, str) and v.strip().isdigit():
        return int(v.strip())
    raise TypeError(f"expected int-like value, got {type(v).__name__}")


def _as_str(v: Any, default: str, name: str) -> str:
    if v is None:
        return default
    if not isinstance(v, str):
        raise TypeError(f"{name} must be str, got {type(v).__name__}")
    return v


def _as_mapping(v: Any, name: str) -> Mapping[str, Any]:
    if v is None:
        return {}
    if not isinstance(v, Mapping):
        raise TypeError(f"{name} must be mapping, got {type(v).__name__}")
    return v


@dataclass
class PathsSettings:
    logs_dir: Path | None = None  # None: tracing disabled

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> "PathsSettings":
        d = d or {}
        return cls(logs_dir=_as_path(d.get("logs_dir"), None))


@dataclass
class ServerSettings:
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 8080
    path: str = "/jsonrpc"

    @classmethod
    def from_dict(cls, d: Mapping[str, Any] | None) -> "ServerSettings":
        d = d or {}
        transport = _as_str(d.get("transport"), cls.transport, "transport")
        if transport not in TRANSPORTS:
            raise ValueError(f"transport must be one of {TRANSPORTS}, got {transport!r}")
        path = _as_str(d.get("path"), cls.path, "path")
        if not path.startswith("/"):
            raise ValueError(f"path must start with '/', got {path!r}")
        return cls(
            transport=transport,
            host=_as_str(d.get("host"), cls.host, "host"),
            port=_as_int(d.get("port"), cls.port),
            path=path,
        )


@dataclass
class Settings:
    # RPC method name -> {"service": <service ref>, "method": <member name>}
    functions: dict[str, dict[str, str]] = field(default_factory=dict)
    # service ref -> "package.module:attr"
    services: dict[str, str] = field(default_factory=dict)
    server: ServerSettings = field(default_factory=ServerSettings)
    paths: PathsSettings = field(default_factory=PathsSettings)
    translations: Path | None = None

    # Keep the raw mapping for debugging; must be JSON-serializable.
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "Settings":
        raw = dict(raw or {})

        functions: dict[str, dict[str, str]] = {}
        for name, entry in _as_mapping(raw.get("functions"), "functions").items():
            entry = _as_mapping(entry, f"functions.{name}")
            service = entry.get("service")
            method = entry.get("method")
            if not isinstance(service, str) or not service:
                raise ValueError(f"functions.{name}.service must be a non-empty string")
            if not isinstance(method, str) or not method:
                raise ValueError(f"functions.{name}.method must be a non-empty string")
            functions[str(name)] = {"service": service, "method": method}

        services: dict[str, str] = {}
        for ref, path in _as_mapping(raw.get("services"), "services").items():
            if not isinstance(path, str) or not path:
                raise TypeError(f"services.{ref} must be an import path string")
            services[str(ref)] = path

        return cls(
            functions=functions,
            services=services,
            server=ServerSettings.from_dict(_as_mapping(raw.get("server"), "server")),
            paths=PathsSettings.from_dict(_as_mapping(raw.get("paths"), "paths")),
            translations=_as_path(raw.get("translations"), None),
            raw=raw,
        )
