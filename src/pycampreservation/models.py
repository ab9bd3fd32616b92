"""Public data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ItemType = Literal[
    "base",
    "diet",
    "accommodation",
    "addon",
    "protection",
    "promotion",
    "transport",
    "source",
    "other",
]

ITEM_TYPES: tuple[str, ...] = (
    "base",
    "diet",
    "accommodation",
    "addon",
    "protection",
    "promotion",
    "transport",
    "source",
    "other",
)


@dataclass(frozen=True, slots=True)
class ItemMetadata:
    original_price: float | None = None
    does_not_reduce_price: bool = False


@dataclass(frozen=True, slots=True)
class ReservationItem:
    id: str
    name: str
    price: float
    type: ItemType
    metadata: ItemMetadata | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "type": self.type,
        }
        if self.metadata is not None:
            data["metadata"] = {
                "originalPrice": self.metadata.original_price,
                "doesNotReducePrice": self.metadata.does_not_reduce_price,
            }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReservationItem:
        raw_meta = data.get("metadata")
        metadata = None
        if isinstance(raw_meta, dict):
            metadata = ItemMetadata(
                original_price=raw_meta.get("originalPrice"),
                does_not_reduce_price=raw_meta.get("doesNotReducePrice") is True,
            )
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            price=float(data.get("price", 0)),
            type=data.get("type", "other"),
            metadata=metadata,
        )


@dataclass(frozen=True, slots=True)
class ReservationCamp:
    id: int
    name: str
    period: str = ""
    city: str = ""
    start_date: str = ""
    end_date: str = ""


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    id: int
    name: str
    price: float
    description: str | None = None
    is_active: bool = True
    relation_id: int | None = None
    does_not_reduce_price: bool = False


@dataclass(frozen=True, slots=True)
class CatalogResult:
    kind: str
    entries: tuple[CatalogEntry, ...] = ()
    source: Literal["turnus", "general", "none"] = "none"
    error: str | None = None

    @property
    def active_entries(self) -> list[CatalogEntry]:
        return [entry for entry in self.entries if entry.is_active]

    def find(self, entity_id: int) -> CatalogEntry | None:
        for entry in self.entries:
            if entry.id == entity_id:
                return entry
        return None


@dataclass(frozen=True, slots=True)
class TransportCity:
    id: int
    city: str
    departure_price: float | None = None
    return_price: float | None = None


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True, slots=True)
class User:
    id: int
    login: str
    groups: tuple[str, ...] = ()
    accessible_sections: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Reservation:
    id: int
    reservation_number: str | None
    status: str
    camp_id: int | None
    property_id: int | None
    total_price: float
    deposit_amount: float | None
    participant_first_name: str | None = None
    participant_last_name: str | None = None
    created_at: str | None = None
    snapshot: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class Invoice:
    id: int
    invoice_number: str
    reservation_id: int | None
    total_amount: float
    is_paid: bool
    is_canceled: bool
    issued_at: str | None = None


@dataclass(frozen=True, slots=True)
class ManualPayment:
    id: int
    reservation_id: int
    amount: float
    payment_date: str | None
    payment_method: str | None
    description: str | None = None
    attachment_filename: str | None = None


@dataclass(frozen=True, slots=True)
class DownloadedFile:
    filename: str
    content_type: str | None
    content: bytes = field(repr=False)
