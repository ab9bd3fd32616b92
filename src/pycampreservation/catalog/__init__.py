"""Catalog manifests, entry mapping and selection reconciliation."""

from .entries import parse_entries, sort_entries
from .loader import (
    CatalogKind,
    DraftTarget,
    clear_catalog_cache,
    get_catalog_kind,
    load_catalog_kinds,
    load_catalog_schema,
)
from .reconciler import SelectionReconciler, item_for_entry, item_id_for
from .transport import TRANSPORT_ITEM_ID, TransportReconciler, cities_differ, transport_item_for

__all__ = [
    "CatalogKind",
    "DraftTarget",
    "SelectionReconciler",
    "TRANSPORT_ITEM_ID",
    "TransportReconciler",
    "cities_differ",
    "clear_catalog_cache",
    "get_catalog_kind",
    "item_for_entry",
    "item_id_for",
    "load_catalog_kinds",
    "load_catalog_schema",
    "parse_entries",
    "sort_entries",
    "transport_item_for",
]
