from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..config import Settings, load_settings
from ..observability.obs import api as obs
from ..observability.sinks.jsonl import JsonlSink
from .builtin import SYSTEM_SERVICE, SystemService, register_system_methods
from .errors import map_exception_to_jsonrpc
from .jsonrpc import Dispatcher, MethodRegistry, StdioTransport
from .services import ServiceLocator
from .translation import CatalogTranslator


@dataclass
class Runtime:
    settings: Settings
    registry: MethodRegistry
    services: ServiceLocator
    dispatcher: Dispatcher


def build_runtime(settings: Settings) -> Runtime:
    """Wire registry, services, translator and dispatcher from settings."""
    registry = MethodRegistry()
    registry.load_config(settings.functions)
    register_system_methods(registry)
    registry.freeze()

    services = ServiceLocator.from_import_paths(settings.services)
    services.register(SYSTEM_SERVICE, SystemService(registry))

    for name in registry:
        descriptor = registry.resolve(name)
        if descriptor is not None and descriptor.is_reference and not services.has(descriptor.service):
            raise ValueError(f"function {name!r} refers to unknown service {descriptor.service!r}")

    translator = CatalogTranslator.from_file(settings.translations) if settings.translations else None

    dispatcher = Dispatcher(
        registry=registry,
        services=services,
        translator=translator,
        error_mapper=map_exception_to_jsonrpc,
    )
    return Runtime(settings=settings, registry=registry, services=services, dispatcher=dispatcher)


def build_observability(settings: Settings) -> JsonlSink | None:
    if settings.paths.logs_dir is None:
        return None
    sink = JsonlSink(settings.paths.logs_dir)
    obs.set_sink(sink)
    return sink


def serve_stdio(runtime: Runtime) -> None:
    StdioTransport().serve(runtime.dispatcher)


def serve_http(runtime: Runtime) -> None:
    import uvicorn

    from .jsonrpc.http_transport import create_app

    server = runtime.settings.server
    app = create_app(runtime.dispatcher, path=server.path)
    uvicorn.run(app, host=server.host, port=server.port, access_log=False)


def main() -> None:
    settings_path = os.environ.get("JSONRPC_SETTINGS_PATH", "config/settings.yaml")
    settings = load_settings(Path(settings_path))
    _ = build_observability(settings)
    runtime = build_runtime(settings)
    if settings.server.transport == "http":
        serve_http(runtime)
    else:
        serve_stdio(runtime)


if __name__ == "__main__":  # pragma: no cover
    main()
