from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .models import Settings


def _resolve_path(root: Path, p: Path | None) -> Path | None:
    if p is None:
        return None
    return p if p.is_absolute() else (root / p).resolve()


def _load_yaml_mapping(p: Path) -> dict[str, Any]:
    with p.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise TypeError("settings root must be a mapping")
    return raw


def load_settings(path: str | Path) -> Settings:
    """
    Load `config/settings.yaml`.

    Relative paths inside the file resolve against the repo root, i.e. the
    parent of the directory holding the settings file.
    """
    p = Path(path).expanduser().resolve()
    root = p.parent.parent  # .../config/settings.yaml -> repo root

    s = Settings.from_dict(_load_yaml_mapping(p))
    s.paths.logs_dir = _resolve_path(root, s.paths.logs_dir)
    s.translations = _resolve_path(root, s.translations)
    return s
