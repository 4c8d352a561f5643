from __future__ import annotations

from pathlib import Path

import pytest

from src.rpc_server.translation import CatalogTranslator, identity, translate_data


def test_translate_data_shapes() -> None:
    up = str.upper
    assert translate_data(["a", 1, None], up) == ["A", 1, None]
    assert translate_data(("a",), up) == ["A"]
    assert translate_data({"k": "v", "n": 2}, up) == {"k": "V", "n": 2}
    assert translate_data("x", up) == "X"
    assert translate_data(5, up) == 5
    assert translate_data(None, up) is None


def test_translate_data_without_transform_is_passthrough() -> None:
    data = ["a"]
    assert translate_data(data, None) is data
    assert identity("a") == "a"


def test_catalog_translator_flattens_and_falls_back() -> None:
    t = CatalogTranslator({"errors": {"stock": "Out of stock"}, "plain": "Plain"})
    assert t("errors.stock") == "Out of stock"
    assert t("plain") == "Plain"
    assert t("unknown.key") == "unknown.key"


def test_catalog_translator_from_file(tmp_path: Path) -> None:
    p = tmp_path / "messages.yaml"
    p.write_text("errors:\n  stock: \"Out of stock\"\n", encoding="utf-8")
    assert CatalogTranslator.from_file(p)("errors.stock") == "Out of stock"

    bad = tmp_path / "bad.yaml"
    bad.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(TypeError):
        CatalogTranslator.from_file(bad)
