import aiohttp
import pytest

from pycampreservation.api.catalog import CatalogApi
from pycampreservation.api.documents import DocumentsApi
from pycampreservation.api.reservations import ReservationsApi
from pycampreservation.api.tokens import TokenStore, user_from_dict, user_to_dict
from pycampreservation.exceptions import ApiError
from pycampreservation.models import Invoice, TransportCity, User
from pycampreservation.storage import MemoryStore

RESERVATION_SAMPLE = {
    "id": "12",
    "reservation_number": "REZ-12",
    "status": "confirmed",
    "camp_id": 3,
    "property_id": 8,
    "total_price": "2450,00",
    "deposit_amount": None,
    "participant_first_name": "Ola",
    "participant_last_name": "Nowak",
    "created_at": "2025-02-01T09:30:00",
}

INVOICE_SAMPLE = {
    "id": 5,
    "invoice_number": "FV/5/2025",
    "reservation_id": 12,
    "total_amount": 2450,
    "is_paid": "yes",
    "is_canceled": False,
}


@pytest.mark.asyncio
async def test_map_reservation_flat_fields() -> None:
    async with aiohttp.ClientSession() as session:
        api = ReservationsApi(session, base_url="https://example")
        reservation = api._map_reservation(RESERVATION_SAMPLE)

    assert reservation.id == 12
    assert reservation.total_price == 2450.0
    assert reservation.deposit_amount is None
    assert reservation.participant_first_name == "Ola"
    assert reservation.participant_last_name == "Nowak"
    assert reservation.snapshot == RESERVATION_SAMPLE


@pytest.mark.asyncio
async def test_map_reservation_list_rejects_objects() -> None:
    async with aiohttp.ClientSession() as session:
        api = ReservationsApi(session, base_url="https://example")
        assert api._map_reservation_list(None) == []
        with pytest.raises(ApiError):
            api._map_reservation_list({"items": []})


@pytest.mark.asyncio
async def test_map_invoice_only_trusts_boolean_flags() -> None:
    async with aiohttp.ClientSession() as session:
        api = DocumentsApi(session, base_url="https://example")
        invoice = api._map_invoice(INVOICE_SAMPLE)

    assert invoice == Invoice(
        id=5,
        invoice_number="FV/5/2025",
        reservation_id=12,
        total_amount=2450.0,
        is_paid=False,
        is_canceled=False,
    )


@pytest.mark.asyncio
async def test_map_payment_requires_ids() -> None:
    async with aiohttp.ClientSession() as session:
        api = DocumentsApi(session, base_url="https://example")
        with pytest.raises(ApiError):
            api._map_payment({"id": 1, "amount": 100})


@pytest.mark.asyncio
async def test_map_transport_cities_skips_invalid_rows() -> None:
    async with aiohttp.ClientSession() as session:
        api = CatalogApi(session, base_url="https://example")
        cities = api._map_transport_cities(
            [
                {"id": "2", "city": "Warszawa", "departure_price": "150", "return_price": 150},
                {"id": None, "city": "Kraków"},
                "Poznań",
            ]
        )

    assert cities == [TransportCity(id=2, city="Warszawa", departure_price=150.0, return_price=150.0)]


def test_user_round_trip_through_token_store() -> None:
    user = user_from_dict({"id": "4", "login": "ola", "groups": ["client"], "accessible_sections": ["panel"]})
    assert user == User(id=4, login="ola", groups=("client",), accessible_sections=("panel",))
    assert user_to_dict(user)["accessible_sections"] == ["panel"]
    assert user_from_dict({"login": "ola"}) is None

    store = MemoryStore()
    tokens = TokenStore(store)
    tokens.save("jwt", user)
    assert TokenStore(store).user == user


def test_corrupt_stored_user_is_ignored() -> None:
    store = MemoryStore({"radsasfun_auth_token": "jwt", "radsasfun_auth_user": "{oops"})
    tokens = TokenStore(store)
    assert tokens.is_authenticated
    assert tokens.user is None
