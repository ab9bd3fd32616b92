import pytest

from pycampreservation.catalog import loader as loader_module


def test_load_catalog_kinds_uses_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    loader_module.clear_catalog_cache()
    calls = {"count": 0}
    original = loader_module.load_catalog_manifest

    def wrapped():
        calls["count"] += 1
        return original()

    monkeypatch.setattr(loader_module, "load_catalog_manifest", wrapped)

    first = loader_module.load_catalog_kinds()
    second = loader_module.load_catalog_kinds()

    assert calls["count"] == 1
    assert first == second


def test_clear_catalog_cache_forces_reload(monkeypatch: pytest.MonkeyPatch) -> None:
    loader_module.clear_catalog_cache()
    calls = {"count": 0}
    original = loader_module.load_catalog_manifest

    def wrapped():
        calls["count"] += 1
        return original()

    monkeypatch.setattr(loader_module, "load_catalog_manifest", wrapped)

    loader_module.load_catalog_kinds()
    loader_module.clear_catalog_cache()
    loader_module.load_catalog_kinds()

    assert calls["count"] == 2
    loader_module.clear_catalog_cache()
