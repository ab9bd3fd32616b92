"""Keep reservation items of one catalog kind in sync with the user's selection."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..exceptions import ValidationError
from ..models import CatalogEntry, CatalogResult, ItemMetadata, ReservationItem
from ..state import AddItem, RemoveItemsByType, ReservationStore
from ..steps import STEP_TYPES
from ..storage import STEP_KEYS, DraftStore
from ..util import coerce_int
from .loader import CatalogKind, DraftTarget, get_catalog_kind

_LOGGER = logging.getLogger(__name__)


def item_id_for(kind: CatalogKind, entity_id: int) -> str:
    return f"{kind.item_type}-{entity_id}"


def item_for_entry(kind: CatalogKind, entry: CatalogEntry) -> AddItem:
    """Build the ``AddItem`` action for a selected catalog entry.

    Promotions are discounts and enter the total as a negative amount. A
    promotion flagged ``does_not_reduce_price`` is listed at zero and keeps
    its nominal price in the metadata.
    """
    price = entry.price
    metadata = None
    if kind.item_type == "promotion":
        metadata = ItemMetadata(
            original_price=entry.price,
            does_not_reduce_price=entry.does_not_reduce_price,
        )
        price = 0.0 if entry.does_not_reduce_price else -abs(entry.price)
    return AddItem(
        name=entry.name,
        price=price,
        type=kind.item_type,
        custom_id=item_id_for(kind, entry.id),
        metadata=metadata,
    )


class SelectionReconciler:
    """Selection state for one catalog kind.

    The reconciler stays inert until both the catalog and the stored selection
    are known, so an early reconcile cannot wipe restored items. Every
    reconcile removes all items of the kind's type and re-adds one item per
    selected entry, which makes repeated calls idempotent.
    """

    def __init__(
        self,
        store: ReservationStore,
        kind: str | CatalogKind,
        *,
        drafts: DraftStore | None = None,
    ) -> None:
        self._store = store
        self._kind = get_catalog_kind(kind)
        self._drafts = drafts
        self._catalog: CatalogResult | None = None
        self._selected: list[int] = []
        self._selection_restored = False

    @property
    def kind(self) -> CatalogKind:
        return self._kind

    @property
    def catalog(self) -> CatalogResult | None:
        return self._catalog

    @property
    def selected(self) -> list[int]:
        return list(self._selected)

    @property
    def is_initialized(self) -> bool:
        return self._catalog is not None and self._selection_restored

    def load_catalog(self, result: CatalogResult) -> list[ReservationItem]:
        if result.kind != self._kind.kind:
            raise ValidationError(
                f"Catalog result for {result.kind} cannot feed the {self._kind.kind} reconciler."
            )
        self._catalog = result
        if result.error:
            _LOGGER.warning("Catalog %s unavailable: %s", self._kind.kind, result.error)
        return self._after_change()

    def restore_selection(self, ids: Iterable[int] | None = None) -> list[ReservationItem]:
        """Restore the selection from ``ids`` or, when omitted, from the stored draft."""
        if ids is None:
            ids = self._read_draft_selection()
        self._selected = _unique(ids)
        if not self._kind.is_multiple:
            self._selected = self._selected[:1]
        self._selection_restored = True
        return self._after_change()

    def toggle(self, entity_id: int) -> list[ReservationItem]:
        if not self._kind.is_multiple:
            raise ValidationError(f"Catalog {self._kind.kind} allows a single selection; use select().")
        if entity_id in self._selected:
            self._selected.remove(entity_id)
        else:
            self._selected.append(entity_id)
        return self._after_change()

    def select(self, entity_id: int | None) -> list[ReservationItem]:
        if self._kind.is_multiple:
            raise ValidationError(f"Catalog {self._kind.kind} allows multiple selections; use toggle().")
        self._selected = [] if entity_id is None else [entity_id]
        return self._after_change()

    def reset(self) -> None:
        """Forget the selection, e.g. after the reservation was abandoned.

        The loaded catalog is kept and the empty selection counts as restored.
        Neither the store nor the drafts are touched.
        """
        self._selected = []
        self._selection_restored = self._catalog is not None

    def reconcile(self) -> list[ReservationItem]:
        catalog = self._catalog
        if catalog is None or not self._selection_restored:
            return []
        item_type = self._kind.item_type
        self._store.dispatch(RemoveItemsByType(item_type))
        for entity_id in self._selected:
            entry = catalog.find(entity_id)
            if entry is None:
                continue
            self._store.dispatch(item_for_entry(self._kind, entry))
        return self._store.state.items_of_type(item_type)

    def _after_change(self) -> list[ReservationItem]:
        if not self.is_initialized:
            return []
        self._drop_unknown_ids()
        items = self.reconcile()
        self._write_drafts()
        return items

    def _drop_unknown_ids(self) -> None:
        catalog = self._catalog
        # A failed load keeps the selection so a later successful load can restore it.
        if catalog is None or catalog.error:
            return
        known = [entity_id for entity_id in self._selected if catalog.find(entity_id)]
        if len(known) != len(self._selected):
            _LOGGER.debug(
                "Dropped %d %s selections missing from the catalog",
                len(self._selected) - len(known),
                self._kind.kind,
            )
        self._selected = known

    def _read_draft_selection(self) -> list[int]:
        if self._drafts is None:
            return []
        target = self._kind.drafts[0]
        data = self._drafts.load_raw(target.step)
        if data is None:
            return []
        return _decode(data.get(target.field), target, self._kind)

    def _write_drafts(self) -> None:
        if self._drafts is None or (self._catalog is not None and self._catalog.error):
            return
        pending: dict[str, dict[str, Any]] = {}
        for target in self._kind.drafts:
            if target.step not in pending:
                data = self._drafts.load_raw(target.step)
                if data is None:
                    data = STEP_TYPES[STEP_KEYS[target.step]]().to_dict()
                pending[target.step] = data
            pending[target.step][target.field] = _encode(self._selected, target, self._kind)
        for step_key, data in pending.items():
            self._drafts.save_raw(step_key, data)


def _unique(ids: Iterable[Any]) -> list[int]:
    result: list[int] = []
    for value in ids:
        coerced = coerce_int(value)
        if coerced is not None and coerced not in result:
            result.append(coerced)
    return result


def _encode(selected: list[int], target: DraftTarget, kind: CatalogKind) -> Any:
    if target.format == "int":
        return selected[0] if selected else None
    if target.format == "str":
        return str(selected[0]) if selected else ""
    if target.format == "int_list":
        return list(selected)
    if target.format == "str_list":
        return [str(entity_id) for entity_id in selected]
    return [item_id_for(kind, entity_id) for entity_id in selected]


def _decode(value: Any, target: DraftTarget, kind: CatalogKind) -> list[int]:
    if value is None or value == "":
        return []
    if target.format in ("int", "str"):
        coerced = coerce_int(value)
        return [] if coerced is None else [coerced]
    if not isinstance(value, list):
        return []
    if target.format == "item_id_list":
        prefix = f"{kind.item_type}-"
        value = [item[len(prefix) :] if isinstance(item, str) and item.startswith(prefix) else item for item in value]
    return _unique(value)
