"""Client facade wiring the backend APIs, drafts and wizards together."""

from __future__ import annotations

from datetime import date
from typing import TypeVar

import aiohttp

from .api.auth import AuthApi
from .api.base import BaseApi
from .api.catalog import CatalogApi
from .api.documents import DocumentsApi
from .api.reservations import ReservationsApi
from .api.tokens import TokenStore
from .config import ClientConfig
from .state import ReservationStore
from .storage import DraftStore, JsonFileStore, KeyValueStore, MemoryStore
from .wizard import ReservationWizard

_ApiT = TypeVar("_ApiT", bound=BaseApi)


class Client:
    """Facade for the reservation backend."""

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        *,
        base_url: str | None = None,
        api_uri: str | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int | None = None,
        config: ClientConfig | None = None,
        store: KeyValueStore | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._session = session
        self._owns_session = session is None
        self._base_url = base_url if base_url is not None else self._config.base_url
        self._api_uri = api_uri if api_uri is not None else self._config.api_uri
        self._timeout = timeout or self._config.client_timeout
        self._retry_count = max(0, retry_count if retry_count is not None else self._config.retry_count)
        if store is None:
            store = JsonFileStore(self._config.draft_path) if self._config.draft_path else MemoryStore()
        self._store = store
        self._tokens = TokenStore(store)
        self._drafts = DraftStore(store, namespace=self._config.draft_namespace)
        self._apis: dict[type[BaseApi], BaseApi] = {}

    @classmethod
    def from_env(cls, session: aiohttp.ClientSession | None = None) -> Client:
        return cls(session, config=ClientConfig.from_env())

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._apis.clear()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def drafts(self) -> DraftStore:
        return self._drafts

    @property
    def tokens(self) -> TokenStore:
        return self._tokens

    @property
    def auth(self) -> AuthApi:
        return self._api(AuthApi)

    @property
    def reservations(self) -> ReservationsApi:
        return self._api(ReservationsApi)

    @property
    def catalogs(self) -> CatalogApi:
        return self._api(CatalogApi)

    @property
    def documents(self) -> DocumentsApi:
        return self._api(DocumentsApi)

    def create_wizard(
        self,
        camp_id: int,
        property_id: int,
        *,
        camp_start_date: str | date | None = None,
        deposit_amount: float = 0,
        store: ReservationStore | None = None,
    ) -> ReservationWizard:
        return ReservationWizard(
            self.reservations,
            self._drafts,
            store or ReservationStore(drafts=self._drafts),
            camp_id=camp_id,
            property_id=property_id,
            camp_start_date=camp_start_date,
            deposit_amount=deposit_amount,
            required_consents=self._config.required_consents,
        )

    async def open_wizard(
        self,
        camp_id: int,
        property_id: int,
        *,
        camp_start_date: str | date | None = None,
        deposit_amount: float = 0,
        store: ReservationStore | None = None,
    ) -> ReservationWizard:
        """Create a wizard and load its catalogs, transport and stored selections."""
        wizard = self.create_wizard(
            camp_id,
            property_id,
            camp_start_date=camp_start_date,
            deposit_amount=deposit_amount,
            store=store,
        )
        await wizard.load_catalogs(self.catalogs)
        await wizard.load_transport(self.catalogs)
        return wizard

    def _api(self, api_cls: type[_ApiT]) -> _ApiT:
        api = self._apis.get(api_cls)
        if api is None:
            api = api_cls(
                self._ensure_session(),
                base_url=self._base_url,
                api_uri=self._api_uri,
                timeout=self._timeout,
                retry_count=self._retry_count,
                tokens=self._tokens,
            )
            self._apis[api_cls] = api
        return api  # type: ignore[return-value]

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session
