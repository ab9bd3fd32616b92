"""Reservation endpoints."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import ApiError, ValidationError
from ..models import Reservation
from ..util import coerce_int, coerce_price
from .base import BaseApi
from .const import DEFAULT_PAGE_SIZE, MY_RESERVATIONS_ENDPOINT, RESERVATIONS_ENDPOINT

_LOGGER = logging.getLogger(__name__)


class ReservationsApi(BaseApi):
    """Create, read and update reservations."""

    async def create(self, payload: dict[str, Any]) -> Reservation:
        """Submit an assembled reservation.

        Only a 201 answer counts as created. A 422 answer raises
        ``ServerValidationError`` with the parsed field errors; it is never
        retried.
        """
        if not isinstance(payload, dict):
            raise ValidationError("payload must be a mapping.")
        _LOGGER.debug("create reservation started")
        data = await self._request_json(
            "POST",
            f"{RESERVATIONS_ENDPOINT}/",
            expected_status=201,
            json=payload,
        )
        reservation = self._map_reservation(data)
        _LOGGER.debug("create reservation completed (id=%s)", reservation.id)
        return reservation

    async def get(self, reservation_id: int) -> Reservation:
        reservation_id_value = self._require_id(reservation_id, "reservation_id")
        data = await self._request_json("GET", f"{RESERVATIONS_ENDPOINT}/{reservation_id_value}")
        return self._map_reservation(data)

    async def list(self, skip: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> list[Reservation]:
        params = self._page_params(skip, limit)
        data = await self._request_json("GET", f"{RESERVATIONS_ENDPOINT}/", params=params)
        return self._map_reservation_list(data)

    async def list_mine(self, skip: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> list[Reservation]:
        params = self._page_params(skip, limit)
        data = await self._request_json(
            "GET",
            MY_RESERVATIONS_ENDPOINT,
            params=params,
            auth_required=True,
        )
        reservations = self._map_reservation_list(data)
        _LOGGER.debug("list_mine completed (%d reservations)", len(reservations))
        return reservations

    async def update(self, reservation_id: int, patch: dict[str, Any]) -> Reservation:
        reservation_id_value = self._require_id(reservation_id, "reservation_id")
        if not isinstance(patch, dict) or not patch:
            raise ValidationError("patch must be a non-empty mapping.")
        data = await self._request_json(
            "PATCH",
            f"{RESERVATIONS_ENDPOINT}/{reservation_id_value}",
            json=patch,
            auth_required=True,
        )
        return self._map_reservation(data)

    def _page_params(self, skip: int, limit: int) -> dict[str, str]:
        if isinstance(skip, bool) or not isinstance(skip, int) or skip < 0:
            raise ValidationError("skip must be a non-negative integer.")
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValidationError("limit must be a positive integer.")
        return {"skip": str(skip), "limit": str(limit)}

    def _map_reservation_list(self, data: Any) -> list[Reservation]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError("Backend response included invalid reservations.")
        return [self._map_reservation(item) for item in data if isinstance(item, dict)]

    def _map_reservation(self, data: Any) -> Reservation:
        if not isinstance(data, dict):
            raise ApiError("Backend response included invalid reservation data.")
        reservation_id = coerce_int(data.get("id"))
        if reservation_id is None:
            raise ApiError("Backend response missing reservation id.")
        participant = self._participant(data)
        deposit = data.get("deposit_amount")
        number = data.get("reservation_number")
        return Reservation(
            id=reservation_id,
            reservation_number=str(number) if number else None,
            status=str(data.get("status") or ""),
            camp_id=coerce_int(data.get("camp_id")),
            property_id=coerce_int(data.get("property_id")),
            total_price=coerce_price(data.get("total_price")),
            deposit_amount=None if deposit is None else coerce_price(deposit),
            participant_first_name=participant.get("firstName"),
            participant_last_name=participant.get("lastName"),
            created_at=data.get("created_at"),
            snapshot=dict(data),
        )

    def _participant(self, data: dict[str, Any]) -> dict[str, str | None]:
        # Older responses echo step1, newer ones flatten participant_* columns.
        first_name = data.get("participant_first_name")
        last_name = data.get("participant_last_name")
        step1 = data.get("step1")
        if isinstance(step1, dict) and isinstance(step1.get("participantData"), dict):
            nested = step1["participantData"]
            first_name = first_name or nested.get("firstName")
            last_name = last_name or nested.get("lastName")
        return {
            "firstName": str(first_name) if first_name else None,
            "lastName": str(last_name) if last_name else None,
        }
