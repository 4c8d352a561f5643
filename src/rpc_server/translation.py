from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable

import yaml


TextTransform = Callable[[str], str]


def identity(text: str) -> str:
    return text


def _flatten(prefix: str, node: Mapping[str, Any], out: dict[str, str]) -> None:
    for k, v in node.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, Mapping):
            _flatten(key, v, out)
        elif v is not None:
            out[key] = str(v)


class CatalogTranslator:
    """
    Message-catalog lookup: unknown strings come back unchanged.

    Nested catalog mappings are addressed with dotted keys
    (`errors: {stock: "..."}` -> "errors.stock").
    """

    def __init__(self, catalog: Mapping[str, Any] | None = None) -> None:
        self.catalog: dict[str, str] = {}
        _flatten("", catalog or {}, self.catalog)

    @classmethod
    def from_file(cls, path: str | Path) -> "CatalogTranslator":
        p = Path(path)
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, Mapping):
            raise TypeError(f"translation catalog root must be a mapping: {p}")
        return cls(raw)

    def __call__(self, text: str) -> str:
        return self.catalog.get(text, text)


def translate_data(data: Any, transform: TextTransform | None) -> Any:
    """Apply `transform` to each string entry of fault data (list items or mapping values)."""
    if transform is None or data is None:
        return data
    if isinstance(data, str):
        return transform(data)
    if isinstance(data, Mapping):
        return {k: transform(v) if isinstance(v, str) else v for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [transform(v) if isinstance(v, str) else v for v in data]
    return data
