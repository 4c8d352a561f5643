from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from src.observability.obs import api as obs


@pytest.fixture
def tmp_workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Provide an isolated working directory for tests that write to disk using
    relative paths.
    """
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mock_clock(monkeypatch: pytest.MonkeyPatch) -> float:
    """Freeze time.time() to a deterministic value."""
    import time

    fixed = 1_700_000_000.0
    monkeypatch.setattr(time, "time", lambda: fixed)
    return fixed


@pytest.fixture(autouse=True)
def _reset_obs_sink() -> Iterator[None]:
    """The sink is process-global; never leak one between tests."""
    yield
    obs.set_sink(None)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """
    Default behavior: only run unit tests.

    If the user explicitly provides `-m ...`, we respect it and do not apply
    any extra deselection logic.
    """
    if config.option.markexpr:
        return

    deselect: list[pytest.Item] = []
    keep: list[pytest.Item] = []

    for item in items:
        if item.get_closest_marker("integration"):
            deselect.append(item)
        else:
            keep.append(item)

    if deselect:
        config.hook.pytest_deselected(items=deselect)
        items[:] = keep
