"""Mapping of raw catalog payloads into ``CatalogEntry`` records."""

from __future__ import annotations

from typing import Any

from ..models import CatalogEntry
from ..util import coerce_int, coerce_price
from .loader import CatalogKind

UNKNOWN_ORDER = 999


def is_placeholder(raw: Any) -> bool:
    """Turnus endpoints return placeholder rows when nothing is assigned."""
    return isinstance(raw, dict) and raw.get("has_no_relations") is True


def only_placeholders(data: list[Any]) -> bool:
    return bool(data) and all(is_placeholder(item) for item in data)


def _entry_id(raw: dict[str, Any], kind: CatalogKind) -> int | None:
    for key in kind.id_keys:
        value = coerce_int(raw.get(key))
        if value:
            return value
    return None


def parse_entry(raw: Any, kind: CatalogKind) -> CatalogEntry | None:
    if not isinstance(raw, dict) or is_placeholder(raw):
        return None
    entity_id = _entry_id(raw, kind)
    if entity_id is None:
        return None
    description = raw.get("description")
    return CatalogEntry(
        id=entity_id,
        name=str(raw.get("name") or raw.get("display_name") or ""),
        price=coerce_price(raw.get("price")),
        description=str(description) if description else None,
        is_active=raw.get("is_active") is not False,
        relation_id=coerce_int(raw.get("relation_id")) or coerce_int(raw.get("id")),
        does_not_reduce_price=raw.get("does_not_reduce_price") is True,
    )


def parse_entries(data: list[Any], kind: CatalogKind) -> tuple[CatalogEntry, ...]:
    entries: list[CatalogEntry] = []
    seen: set[int] = set()
    for raw in data:
        entry = parse_entry(raw, kind)
        if entry is None or entry.id in seen:
            continue
        seen.add(entry.id)
        entries.append(entry)
    return sort_entries(entries, kind)


def sort_order_for(name: str, order: tuple[str, ...]) -> int:
    lowered = name.lower().strip()
    for index, key in enumerate(order, start=1):
        if key in lowered:
            return index
    return UNKNOWN_ORDER


def sort_entries(entries: list[CatalogEntry], kind: CatalogKind) -> tuple[CatalogEntry, ...]:
    if not kind.sort_order:
        return tuple(entries)
    # sorted() is stable, unknown names keep their relative order.
    return tuple(sorted(entries, key=lambda entry: sort_order_for(entry.name, kind.sort_order)))
