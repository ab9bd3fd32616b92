"""Catalog endpoints with turnus-to-general fallback."""

from __future__ import annotations

import logging
from typing import Any

from ..catalog.entries import only_placeholders, parse_entries
from ..catalog.loader import CatalogKind, get_catalog_kind
from ..exceptions import ApiError, AuthError, NetworkError, NotFoundError
from ..models import CatalogResult, TransportCity
from ..util import coerce_int, coerce_price
from .base import BaseApi
from .const import TRANSPORT_CITIES_ENDPOINT, TRANSPORT_ENDPOINT

_LOGGER = logging.getLogger(__name__)


class CatalogApi(BaseApi):
    """Fetch selectable entities for a camp turnus."""

    async def fetch(
        self,
        kind: str | CatalogKind,
        camp_id: int | None,
        property_id: int | None,
    ) -> CatalogResult:
        """Return the catalog for a turnus.

        The turnus catalog wins whenever it has real entries. A 404, an empty
        list or a list of placeholders switches to the first general catalog
        that answers. Any other failure yields an empty result carrying the
        kind's load error; this method does not raise for backend problems.
        """
        catalog_kind = get_catalog_kind(kind)
        if not camp_id or not property_id:
            return CatalogResult(kind=catalog_kind.kind)
        _LOGGER.debug("fetch %s catalog started", catalog_kind.kind)
        try:
            result = await self._fetch(catalog_kind, camp_id, property_id)
        except (ApiError, AuthError, NetworkError) as exc:
            _LOGGER.warning("Loading %s catalog failed: %s", catalog_kind.kind, exc)
            return CatalogResult(kind=catalog_kind.kind, error=catalog_kind.load_error)
        _LOGGER.debug(
            "fetch %s catalog completed (%d entries from %s)",
            catalog_kind.kind,
            len(result.entries),
            result.source,
        )
        return result

    async def _fetch(self, kind: CatalogKind, camp_id: int, property_id: int) -> CatalogResult:
        path = kind.turnus_url_path(camp_id, property_id)
        params = dict(kind.turnus_params) or None
        try:
            data = await self._request_json("GET", path, params=params)
        except NotFoundError:
            data = None
        if isinstance(data, list) and data and not only_placeholders(data):
            return CatalogResult(
                kind=kind.kind,
                entries=parse_entries(data, kind),
                source="turnus",
            )
        if data is not None and not isinstance(data, list):
            raise ApiError(f"Backend response included an invalid {kind.kind} catalog.")
        return await self._fetch_general(kind)

    async def _fetch_general(self, kind: CatalogKind) -> CatalogResult:
        for path in kind.general_paths:
            try:
                data = await self._request_json("GET", path)
            except NotFoundError:
                continue
            if not isinstance(data, list):
                raise ApiError(f"Backend response included an invalid {kind.kind} catalog.")
            _LOGGER.debug("Using general %s catalog from %s", kind.kind, path)
            return CatalogResult(kind=kind.kind, entries=parse_entries(data, kind), source="general")
        return CatalogResult(kind=kind.kind)

    async def transport(self, camp_id: int, property_id: int) -> dict[str, Any] | None:
        camp_id_value = self._require_id(camp_id, "camp_id")
        property_id_value = self._require_id(property_id, "property_id")
        path = TRANSPORT_ENDPOINT.format(camp_id=camp_id_value, property_id=property_id_value)
        try:
            data = await self._request_json("GET", path)
        except NotFoundError:
            return None
        if data is not None and not isinstance(data, dict):
            raise ApiError("Backend response included invalid transport data.")
        return data

    async def transport_cities(self, camp_id: int, property_id: int) -> list[TransportCity]:
        camp_id_value = self._require_id(camp_id, "camp_id")
        property_id_value = self._require_id(property_id, "property_id")
        path = TRANSPORT_CITIES_ENDPOINT.format(camp_id=camp_id_value, property_id=property_id_value)
        try:
            data = await self._request_json("GET", path)
        except NotFoundError:
            return []
        return self._map_transport_cities(data)

    def _map_transport_cities(self, data: Any) -> list[TransportCity]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError("Backend response included invalid transport cities.")
        cities: list[TransportCity] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            city_id = coerce_int(item.get("id"))
            name = item.get("city")
            if city_id is None or not isinstance(name, str) or not name:
                continue
            cities.append(
                TransportCity(
                    id=city_id,
                    city=name,
                    departure_price=_optional_price(item.get("departure_price")),
                    return_price=_optional_price(item.get("return_price")),
                )
            )
        return cities


def _optional_price(value: Any) -> float | None:
    if value is None:
        return None
    return coerce_price(value)
