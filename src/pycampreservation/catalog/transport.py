"""Keep the transport item in sync with the chosen departure and return cities."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models import ReservationItem, TransportCity
from ..state import AddItem, RemoveItemsByType, ReservationStore
from ..steps import TRANSPORT_COLLECTIVE, TransportData

_LOGGER = logging.getLogger(__name__)

TRANSPORT_ITEM_ID = "transport"


def cities_differ(transport: TransportData) -> bool:
    return (
        transport.departureType == TRANSPORT_COLLECTIVE
        and transport.returnType == TRANSPORT_COLLECTIVE
        and bool(transport.departureCity)
        and bool(transport.returnCity)
        and transport.departureCity != transport.returnCity
    )


def _find_city(cities: Iterable[TransportCity], name: str) -> TransportCity | None:
    for city in cities:
        if city.city == name:
            return city
    return None


def transport_item_for(transport: TransportData, cities: list[TransportCity]) -> AddItem | None:
    """Build the transport item, priced at the dearer of the two legs.

    Only collective legs with a known city carry a price. Returns ``None``
    when neither leg costs anything.
    """
    prices: list[float] = []
    if transport.departureType == TRANSPORT_COLLECTIVE and transport.departureCity:
        city = _find_city(cities, transport.departureCity)
        if city is not None and city.departure_price:
            prices.append(city.departure_price)
    if transport.returnType == TRANSPORT_COLLECTIVE and transport.returnCity:
        city = _find_city(cities, transport.returnCity)
        if city is not None and city.return_price:
            prices.append(city.return_price)
    price = max(prices) if prices else 0.0
    if price <= 0:
        return None

    if cities_differ(transport):
        name = f"Transport zbiorowy: {transport.departureCity} (wyjazd), {transport.returnCity} (powrót)"
    elif transport.departureType == TRANSPORT_COLLECTIVE and transport.departureCity:
        name = f"Transport zbiorowy: {transport.departureCity}"
    elif transport.returnType == TRANSPORT_COLLECTIVE and transport.returnCity:
        name = f"Transport zbiorowy: {transport.returnCity}"
    else:
        name = "Transport"
    return AddItem(name=name, price=price, type="transport", custom_id=TRANSPORT_ITEM_ID)


class TransportReconciler:
    """Rebuild the single transport item whenever the transport choice changes.

    Until the turnus transport is loaded the reconciler leaves the store
    alone. A turnus without transport never gets a transport item.
    """

    def __init__(self, store: ReservationStore) -> None:
        self._store = store
        self._cities: list[TransportCity] = []
        self._has_transport = False
        self._loaded = False

    @property
    def cities(self) -> list[TransportCity]:
        return list(self._cities)

    @property
    def has_transport(self) -> bool:
        return self._has_transport

    @property
    def is_initialized(self) -> bool:
        return self._loaded

    def load_cities(self, cities: Iterable[TransportCity] | None) -> None:
        """Load the turnus cities; ``None`` means the turnus has no transport."""
        self._has_transport = cities is not None
        self._cities = list(cities or ())
        self._loaded = True
        _LOGGER.debug("Transport loaded (%d cities)", len(self._cities))

    def reconcile(self, transport: TransportData) -> ReservationItem | None:
        if not self._loaded:
            return None
        self._store.dispatch(RemoveItemsByType("transport"))
        if not self._has_transport:
            return None
        action = transport_item_for(transport, self._cities)
        if action is None:
            return None
        self._store.dispatch(action)
        items = self._store.state.items_of_type("transport")
        return items[0] if items else None
