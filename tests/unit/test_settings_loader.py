from __future__ import annotations

from pathlib import Path

import pytest

from src.config import Settings, load_settings


def _write_settings(repo: Path, body: str) -> Path:
    (repo / "config").mkdir(parents=True, exist_ok=True)
    p = repo / "config" / "settings.yaml"
    p.write_text(body.strip() + "\n", encoding="utf-8")
    return p


def test_load_settings_resolves_paths(tmp_path: Path) -> None:
    p = _write_settings(
        tmp_path,
        """
functions:
  add:
    service: calculator
    method: add
services:
  calculator: src.rpc_server.demo:Calculator
server:
  transport: http
  port: "9000"
translations: config/messages.yaml
paths:
  logs_dir: logs
""",
    )

    s = load_settings(p)
    assert s.functions == {"add": {"service": "calculator", "method": "add"}}
    assert s.services == {"calculator": "src.rpc_server.demo:Calculator"}
    assert s.server.transport == "http"
    assert s.server.port == 9000
    assert s.server.path == "/jsonrpc"
    assert s.paths.logs_dir is not None and s.paths.logs_dir.is_absolute()
    assert str(s.paths.logs_dir).endswith("/logs")
    assert s.translations == (tmp_path / "config" / "messages.yaml").resolve()


def test_defaults_for_empty_file(tmp_path: Path) -> None:
    s = load_settings(_write_settings(tmp_path, "# nothing"))
    assert s.functions == {}
    assert s.server.transport == "stdio"
    assert s.paths.logs_dir is None
    assert s.translations is None


@pytest.mark.parametrize(
    "raw, exc",
    [
        ({"functions": {"add": {"service": "calc"}}}, ValueError),
        ({"functions": ["add"]}, TypeError),
        ({"services": {"calc": 3}}, TypeError),
        ({"server": {"transport": "udp"}}, ValueError),
        ({"server": {"port": True}}, TypeError),
        ({"server": {"path": "jsonrpc"}}, ValueError),
    ],
)
def test_settings_validation_errors(raw, exc) -> None:
    with pytest.raises(exc):
        Settings.from_dict(raw)


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    with pytest.raises(TypeError):
        load_settings(_write_settings(tmp_path, "- a"))


def test_shipped_settings_load() -> None:
    root = Path(__file__).resolve().parents[2]
    s = load_settings(root / "config" / "settings.yaml")
    assert "add" in s.functions
    assert s.translations is not None and s.translations.exists()
