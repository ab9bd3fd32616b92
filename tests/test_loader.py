import pytest

from pycampreservation.catalog.loader import (
    _build_catalog_kind,
    get_catalog_kind,
    load_catalog_kinds,
)
from pycampreservation.exceptions import ConfigError, ValidationError


def _entry(**overrides):
    data = {
        "kind": "addon",
        "item_type": "addon",
        "selection": "multiple",
        "turnus_path": "/api/camps/{camp_id}/properties/{property_id}/addons",
        "general_paths": ["/api/addons/public"],
        "load_error": "Nie udało się załadować dodatków",
        "drafts": [{"step": "step2", "field": "selectedAddons", "format": "str_list"}],
    }
    data.update(overrides)
    return data


def test_packaged_catalog_kinds() -> None:
    kinds = {kind.kind: kind for kind in load_catalog_kinds()}
    assert set(kinds) == {"protection", "diet", "addon", "promotion"}
    assert kinds["protection"].is_multiple
    assert not kinds["diet"].is_multiple
    assert kinds["promotion"].general_paths == ()
    assert kinds["promotion"].turnus_params == {"check_usage": "false"}
    assert kinds["promotion"].id_keys == ("id", "relation_id")
    assert kinds["diet"].id_keys == ("general_diet_id", "id")


def test_turnus_url_path() -> None:
    kind = get_catalog_kind("diet")
    assert kind.turnus_url_path(4, 9) == "/api/camps/4/properties/9/diets"


def test_get_catalog_kind_unknown() -> None:
    with pytest.raises(ValidationError):
        get_catalog_kind("insurance")


def test_build_catalog_kind_rejects_missing_keys() -> None:
    data = _entry()
    del data["drafts"]
    with pytest.raises(ConfigError):
        _build_catalog_kind(data)


def test_build_catalog_kind_rejects_base_item_type() -> None:
    with pytest.raises(ConfigError):
        _build_catalog_kind(_entry(item_type="base"))


def test_build_catalog_kind_rejects_path_without_ids() -> None:
    with pytest.raises(ConfigError):
        _build_catalog_kind(_entry(turnus_path="/api/addons"))


def test_build_catalog_kind_rejects_unknown_draft_step() -> None:
    with pytest.raises(ConfigError):
        _build_catalog_kind(_entry(drafts=[{"step": "step9", "field": "x", "format": "int"}]))


def test_build_catalog_kind_lowercases_sort_order() -> None:
    kind = _build_catalog_kind(_entry(sort_order=["First Minute"]))
    assert kind.sort_order == ("first minute",)
