import aiohttp
import pytest

from pycampreservation import Client, ClientConfig, ReservationWizard
from pycampreservation.storage import JsonFileStore, MemoryStore


@pytest.mark.asyncio
async def test_client_does_not_close_injected_session() -> None:
    session = aiohttp.ClientSession()
    client = Client(session=session)
    await client.aclose()

    assert session.closed is False
    await session.close()


@pytest.mark.asyncio
async def test_client_closes_owned_session() -> None:
    async with Client(base_url="https://example") as client:
        session = client._ensure_session()
        assert client.auth is client.auth
    assert session.closed is True


@pytest.mark.asyncio
async def test_apis_share_session_and_tokens() -> None:
    async with aiohttp.ClientSession() as session:
        client = Client(session=session, base_url="https://example", api_uri="/v1/")
        assert client.auth.tokens is client.reservations.tokens
        assert client.documents.tokens is client.tokens
        assert client.catalogs._build_url("/api/addons/public") == "https://example/v1/api/addons/public"


def test_store_follows_config(tmp_path) -> None:
    assert isinstance(Client().drafts.store, MemoryStore)
    config = ClientConfig(draft_path=str(tmp_path / "drafts.json"), draft_namespace="camp")
    client = Client(config=config)
    assert isinstance(client.drafts.store, JsonFileStore)
    assert client.drafts.storage_key("step1") == "camp_step1_form_data"


@pytest.mark.asyncio
async def test_create_wizard_uses_client_drafts() -> None:
    async with aiohttp.ClientSession() as session:
        config = ClientConfig(base_url="https://example", required_consents=("consent1",))
        client = Client(session=session, config=config)
        wizard = client.create_wizard(1, 2, camp_start_date="2025-07-01")

        assert isinstance(wizard, ReservationWizard)
        wizard.form(1).update("participantData.firstName", "Jaś")
        assert client.drafts.load("step1").participantData.firstName == "Jaś"
        assert wizard.form(4).validate() == {"consent1": "Pole obowiązkowe"}
