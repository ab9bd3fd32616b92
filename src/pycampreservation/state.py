"""Reservation line items kept in an explicit store with a pure reducer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from .models import ItemMetadata, ItemType, ReservationCamp, ReservationItem
from .storage import RESERVATION_STATE_KEY, DraftStore

_LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_PRICE = 2200.0
BASE_ITEM_ID = "base"
BASE_ITEM_NAME = "Cena podstawowa"
MULTI_ITEM_TYPES = frozenset({"addon", "protection"})


@dataclass(frozen=True, slots=True)
class ReservationState:
    base_price: float
    items: tuple[ReservationItem, ...]
    total_price: float
    current_step: int = 1
    reservation_number: str | None = None
    camp: ReservationCamp | None = None

    def items_of_type(self, item_type: ItemType) -> list[ReservationItem]:
        return [item for item in self.items if item.type == item_type]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "basePrice": self.base_price,
            "items": [item.to_dict() for item in self.items],
            "totalPrice": self.total_price,
            "currentStep": self.current_step,
            "reservationNumber": self.reservation_number,
        }
        if self.camp is not None:
            data["camp"] = {
                "id": self.camp.id,
                "name": self.camp.name,
                "properties": {
                    "period": self.camp.period,
                    "city": self.camp.city,
                    "start_date": self.camp.start_date,
                    "end_date": self.camp.end_date,
                },
            }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReservationState:
        items = tuple(
            ReservationItem.from_dict(item) for item in data.get("items") or [] if isinstance(item, dict)
        )
        if not any(item.id == BASE_ITEM_ID for item in items):
            items = (_base_item(float(data.get("basePrice", DEFAULT_BASE_PRICE))), *items)
        camp = None
        raw_camp = data.get("camp")
        if isinstance(raw_camp, dict):
            props = raw_camp.get("properties") or {}
            camp = ReservationCamp(
                id=int(raw_camp.get("id", 0)),
                name=str(raw_camp.get("name", "")),
                period=str(props.get("period", "")),
                city=str(props.get("city", "")),
                start_date=str(props.get("start_date", "")),
                end_date=str(props.get("end_date", "")),
            )
        return cls(
            base_price=float(data.get("basePrice", DEFAULT_BASE_PRICE)),
            items=items,
            total_price=_total(items),
            current_step=int(data.get("currentStep", 1) or 1),
            reservation_number=data.get("reservationNumber"),
            camp=camp,
        )


def _base_item(price: float) -> ReservationItem:
    return ReservationItem(id=BASE_ITEM_ID, name=BASE_ITEM_NAME, price=price, type="base")


def _total(items: tuple[ReservationItem, ...]) -> float:
    return float(sum(item.price for item in items))


def initial_state(base_price: float = DEFAULT_BASE_PRICE) -> ReservationState:
    items = (_base_item(base_price),)
    return ReservationState(base_price=base_price, items=items, total_price=_total(items))


# Actions


@dataclass(frozen=True, slots=True)
class AddItem:
    name: str
    price: float
    type: ItemType
    custom_id: str | None = None
    metadata: ItemMetadata | None = None


@dataclass(frozen=True, slots=True)
class RemoveItem:
    id: str


@dataclass(frozen=True, slots=True)
class RemoveItemsByType:
    type: ItemType


@dataclass(frozen=True, slots=True)
class UpdateItem:
    id: str
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SetBasePrice:
    price: float


@dataclass(frozen=True, slots=True)
class SetCurrentStep:
    step: int


@dataclass(frozen=True, slots=True)
class SetReservationNumber:
    reservation_number: str | None


@dataclass(frozen=True, slots=True)
class SetCamp:
    camp: ReservationCamp


@dataclass(frozen=True, slots=True)
class Reset:
    base_price: float = DEFAULT_BASE_PRICE


Action = (
    AddItem
    | RemoveItem
    | RemoveItemsByType
    | UpdateItem
    | SetBasePrice
    | SetCurrentStep
    | SetReservationNumber
    | SetCamp
    | Reset
)

def _next_item_id(items: tuple[ReservationItem, ...], item_type: str) -> str:
    prefix = f"{item_type}-"
    highest = 0
    for item in items:
        suffix = item.id[len(prefix) :] if item.id.startswith(prefix) else ""
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1}"


def _with_items(state: ReservationState, items: tuple[ReservationItem, ...]) -> ReservationState:
    return replace(state, items=items, total_price=_total(items))


def _add_item(state: ReservationState, action: AddItem) -> ReservationState:
    if action.type == "base":
        return state
    if action.custom_id is not None and any(item.id == action.custom_id for item in state.items):
        return state
    if action.type in MULTI_ITEM_TYPES:
        if action.custom_id is None and any(
            item.type == action.type and item.name == action.name for item in state.items
        ):
            return state
    else:
        for index, existing in enumerate(state.items):
            if existing.type == action.type:
                replaced = ReservationItem(
                    id=existing.id,
                    name=action.name,
                    price=action.price,
                    type=action.type,
                    metadata=action.metadata,
                )
                items = state.items[:index] + (replaced,) + state.items[index + 1 :]
                return _with_items(state, items)
    item_id = action.custom_id or _next_item_id(state.items, action.type)
    new_item = ReservationItem(
        id=item_id,
        name=action.name,
        price=action.price,
        type=action.type,
        metadata=action.metadata,
    )
    return _with_items(state, (*state.items, new_item))


def _update_item(state: ReservationState, action: UpdateItem) -> ReservationState:
    allowed = {"name", "price", "type", "metadata"}
    changes = {key: value for key, value in action.changes.items() if key in allowed}
    items = tuple(
        replace(item, **changes) if item.id == action.id else item for item in state.items
    )
    return _with_items(state, items)


def reduce(state: ReservationState, action: Action) -> ReservationState:
    """Return the state that results from applying ``action``."""
    if isinstance(action, AddItem):
        return _add_item(state, action)
    if isinstance(action, RemoveItem):
        if action.id == BASE_ITEM_ID:
            return state
        return _with_items(state, tuple(item for item in state.items if item.id != action.id))
    if isinstance(action, RemoveItemsByType):
        if action.type == "base":
            return state
        return _with_items(state, tuple(item for item in state.items if item.type != action.type))
    if isinstance(action, UpdateItem):
        return _update_item(state, action)
    if isinstance(action, SetBasePrice):
        items = tuple(
            replace(item, price=action.price) if item.id == BASE_ITEM_ID else item
            for item in state.items
        )
        return replace(_with_items(state, items), base_price=action.price)
    if isinstance(action, SetCurrentStep):
        return replace(state, current_step=action.step)
    if isinstance(action, SetReservationNumber):
        return replace(state, reservation_number=action.reservation_number)
    if isinstance(action, SetCamp):
        return replace(state, camp=action.camp)
    if isinstance(action, Reset):
        return initial_state(action.base_price)
    raise TypeError(f"Unsupported action: {type(action).__name__}")


Listener = Callable[[ReservationState], None]


class ReservationStore:
    """Holds the reservation state and notifies listeners on every change."""

    def __init__(
        self,
        initial: ReservationState | None = None,
        *,
        drafts: DraftStore | None = None,
    ) -> None:
        self._drafts = drafts
        self._listeners: list[Listener] = []
        state = initial
        if state is None and drafts is not None:
            state = self._hydrate(drafts)
        self._state = state or initial_state()

    @property
    def state(self) -> ReservationState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> ReservationState:
        new_state = reduce(self._state, action)
        if new_state == self._state:
            return self._state
        self._state = new_state
        if self._drafts is not None:
            self._drafts.save_raw(RESERVATION_STATE_KEY, new_state.to_dict())
        for listener in list(self._listeners):
            listener(new_state)
        return new_state

    def _hydrate(self, drafts: DraftStore) -> ReservationState | None:
        data = drafts.load_raw(RESERVATION_STATE_KEY)
        if data is None:
            return None
        try:
            return ReservationState.from_dict(data)
        except (TypeError, ValueError, KeyError):
            _LOGGER.warning("Stored reservation state is invalid; starting fresh")
            return None
