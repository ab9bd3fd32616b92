"""Catalog manifest loading."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from importlib.resources.abc import Traversable
from typing import Literal

from ..exceptions import ConfigError, ValidationError
from ..models import ITEM_TYPES, ItemType
from ..storage import STEP_KEYS

MANIFEST_FILENAME = "catalogs.json"
SCHEMA_FILENAME = "catalogs.schema.json"
DRAFT_FORMATS = ("int", "str", "int_list", "str_list", "item_id_list")
_CATALOG_CACHE: tuple[CatalogKind, ...] | None = None

SelectionMode = Literal["single", "multiple"]
DraftFormat = Literal["int", "str", "int_list", "str_list", "item_id_list"]


@dataclass(frozen=True, slots=True)
class DraftTarget:
    step: str
    field: str
    format: DraftFormat


@dataclass(frozen=True, slots=True)
class CatalogKind:
    kind: str
    item_type: ItemType
    selection: SelectionMode
    turnus_path: str
    general_paths: tuple[str, ...]
    load_error: str
    drafts: tuple[DraftTarget, ...]
    turnus_params: dict[str, str] = field(default_factory=dict, compare=False)
    sort_order: tuple[str, ...] = ()
    id_keys: tuple[str, ...] = ("id",)

    @property
    def is_multiple(self) -> bool:
        return self.selection == "multiple"

    def turnus_url_path(self, camp_id: int, property_id: int) -> str:
        return self.turnus_path.format(camp_id=camp_id, property_id=property_id)


def _catalog_root() -> Traversable:
    return resources.files("pycampreservation.catalog")


def load_catalog_schema() -> dict:
    schema_path = _catalog_root() / SCHEMA_FILENAME
    return json.loads(schema_path.read_text(encoding="utf-8"))


def load_catalog_manifest() -> dict:
    manifest_path = _catalog_root() / MANIFEST_FILENAME
    try:
        return json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError("Catalog manifest is not valid JSON.") from exc


def _build_draft_target(data: dict) -> DraftTarget:
    if not isinstance(data, dict):
        raise ConfigError("Catalog draft target must be a JSON object.")
    step = data.get("step")
    field_name = data.get("field")
    draft_format = data.get("format")
    if step not in STEP_KEYS:
        raise ConfigError("Catalog draft target step is unknown.")
    if not isinstance(field_name, str) or not field_name:
        raise ConfigError("Catalog draft target field must be a non-empty string.")
    if draft_format not in DRAFT_FORMATS:
        raise ConfigError("Catalog draft target format is unknown.")
    return DraftTarget(step=step, field=field_name, format=draft_format)


def _build_catalog_kind(data: dict) -> CatalogKind:
    if not isinstance(data, dict):
        raise ConfigError("Catalog entry must be a JSON object.")
    required = ("kind", "item_type", "selection", "turnus_path", "general_paths", "load_error", "drafts")
    missing = [key for key in required if key not in data]
    if missing:
        raise ConfigError(f"Catalog manifest missing keys: {', '.join(missing)}.")
    kind = data["kind"]
    if not isinstance(kind, str) or not kind:
        raise ConfigError("Catalog kind must be a non-empty string.")
    if data["item_type"] not in ITEM_TYPES or data["item_type"] == "base":
        raise ConfigError(f"Catalog {kind} has an invalid item_type.")
    if data["selection"] not in ("single", "multiple"):
        raise ConfigError(f"Catalog {kind} selection must be single or multiple.")
    turnus_path = data["turnus_path"]
    if not isinstance(turnus_path, str) or "{camp_id}" not in turnus_path or "{property_id}" not in turnus_path:
        raise ConfigError(f"Catalog {kind} turnus_path must contain camp_id and property_id.")
    general_paths = data["general_paths"]
    if not isinstance(general_paths, list) or not all(isinstance(path, str) for path in general_paths):
        raise ConfigError(f"Catalog {kind} general_paths must be a list of strings.")
    drafts = data["drafts"]
    if not isinstance(drafts, list) or not drafts:
        raise ConfigError(f"Catalog {kind} needs at least one draft target.")
    params = data.get("turnus_params") or {}
    if not isinstance(params, dict):
        raise ConfigError(f"Catalog {kind} turnus_params must be an object.")
    return CatalogKind(
        kind=kind,
        item_type=data["item_type"],
        selection=data["selection"],
        turnus_path=turnus_path,
        general_paths=tuple(general_paths),
        load_error=str(data["load_error"]),
        drafts=tuple(_build_draft_target(item) for item in drafts),
        turnus_params={str(key): str(value) for key, value in params.items()},
        sort_order=tuple(str(name).lower() for name in data.get("sort_order") or ()),
        id_keys=tuple(str(key) for key in data.get("id_keys") or (f"general_{kind}_id", "id")),
    )


def load_catalog_kinds() -> list[CatalogKind]:
    global _CATALOG_CACHE
    if _CATALOG_CACHE is not None:
        return list(_CATALOG_CACHE)
    try:
        manifest = load_catalog_manifest()
    except ModuleNotFoundError as exc:
        raise ConfigError("Catalog package was not found.") from exc
    entries = manifest.get("catalogs") if isinstance(manifest, dict) else None
    if not isinstance(entries, list):
        raise ConfigError("Catalog manifest must contain a catalogs list.")
    kinds = [_build_catalog_kind(entry) for entry in entries]
    _CATALOG_CACHE = tuple(kinds)
    return list(_CATALOG_CACHE)


def clear_catalog_cache() -> None:
    """Clear cached catalog kinds (used in tests)."""
    global _CATALOG_CACHE
    _CATALOG_CACHE = None


def get_catalog_kind(kind: str | CatalogKind) -> CatalogKind:
    if isinstance(kind, CatalogKind):
        return kind
    for catalog_kind in load_catalog_kinds():
        if catalog_kind.kind == kind:
            return catalog_kind
    raise ValidationError(f"Unknown catalog kind: {kind}.")
