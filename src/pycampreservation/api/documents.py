"""Contracts, invoices, qualification cards and manual payments."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ..exceptions import ApiError, NotFoundError, ValidationError
from ..models import DownloadedFile, Invoice, ManualPayment
from ..util import coerce_int, coerce_price
from .base import BaseApi
from .const import (
    CONTRACT_ENDPOINT,
    CONTRACT_GENERATE_ENDPOINT,
    INVOICE_PDF_ENDPOINT,
    PAYMENT_UPLOAD_ENDPOINT,
    QUALIFICATION_CARD_ENDPOINT,
    QUALIFICATION_CARD_UPLOAD_ENDPOINT,
    RESERVATION_INVOICES_ENDPOINT,
    RESERVATION_PAYMENTS_ENDPOINT,
)

_LOGGER = logging.getLogger(__name__)

_CONTRACT_TIMEOUT = aiohttp.ClientTimeout(total=60)
PDF_CONTENT_TYPE = "application/pdf"


class DocumentsApi(BaseApi):
    """Documents attached to a reservation. Every call needs a signed-in user."""

    async def download_contract(self, reservation_id: int) -> DownloadedFile:
        """Download the contract PDF, generating it first when it does not exist yet."""
        reservation_id_value = self._require_id(reservation_id, "reservation_id")
        path = CONTRACT_ENDPOINT.format(reservation_id=reservation_id_value)
        default_filename = f"umowa_{reservation_id_value}.pdf"
        try:
            return await self._request_file(
                "GET",
                path,
                default_filename=default_filename,
                timeout=_CONTRACT_TIMEOUT,
            )
        except NotFoundError:
            _LOGGER.debug("Contract %s missing; requesting generation", reservation_id_value)
        await self._request_none(
            "POST",
            CONTRACT_GENERATE_ENDPOINT.format(reservation_id=reservation_id_value),
            auth_required=True,
            timeout=_CONTRACT_TIMEOUT,
        )
        return await self._request_file(
            "GET",
            path,
            default_filename=default_filename,
            timeout=_CONTRACT_TIMEOUT,
        )

    async def list_invoices(self, reservation_id: int) -> list[Invoice]:
        reservation_id_value = self._require_id(reservation_id, "reservation_id")
        data = await self._request_json(
            "GET",
            RESERVATION_INVOICES_ENDPOINT.format(reservation_id=reservation_id_value),
            auth_required=True,
        )
        return self._map_invoice_list(data)

    async def download_invoice(self, invoice_id: int) -> DownloadedFile:
        invoice_id_value = self._require_id(invoice_id, "invoice_id")
        return await self._request_file(
            "GET",
            INVOICE_PDF_ENDPOINT.format(invoice_id=invoice_id_value),
            default_filename=f"faktura_{invoice_id_value}.pdf",
        )

    async def download_qualification_card(self, card_id: int) -> DownloadedFile:
        card_id_value = self._require_id(card_id, "card_id")
        return await self._request_file(
            "GET",
            QUALIFICATION_CARD_ENDPOINT.format(card_id=card_id_value),
            default_filename=f"karta_kwalifikacyjna_{card_id_value}.pdf",
        )

    async def upload_qualification_card(
        self,
        reservation_id: int,
        filename: str,
        content: bytes,
    ) -> dict[str, Any]:
        reservation_id_value = self._require_id(reservation_id, "reservation_id")
        if not isinstance(filename, str) or not filename.lower().endswith(".pdf"):
            raise ValidationError("Qualification card must be a PDF file.")
        form = self._file_form(filename, content, PDF_CONTENT_TYPE)
        data = await self._request_json(
            "POST",
            QUALIFICATION_CARD_UPLOAD_ENDPOINT,
            params={"reservation_id": str(reservation_id_value)},
            data=form,
            auth_required=True,
        )
        if not isinstance(data, dict):
            raise ApiError("Backend response included invalid upload data.")
        return data

    async def list_manual_payments(self, reservation_id: int) -> list[ManualPayment]:
        reservation_id_value = self._require_id(reservation_id, "reservation_id")
        data = await self._request_json(
            "GET",
            RESERVATION_PAYMENTS_ENDPOINT.format(reservation_id=reservation_id_value),
            auth_required=True,
        )
        return self._map_payment_list(data)

    async def upload_payment_attachment(
        self,
        payment_id: int,
        filename: str,
        content: bytes,
        content_type: str | None = None,
    ) -> ManualPayment:
        payment_id_value = self._require_id(payment_id, "payment_id")
        if not isinstance(filename, str) or not filename.strip():
            raise ValidationError("filename is required.")
        form = self._file_form(filename, content, content_type)
        data = await self._request_json(
            "POST",
            PAYMENT_UPLOAD_ENDPOINT.format(payment_id=payment_id_value),
            data=form,
            auth_required=True,
        )
        return self._map_payment(data)

    def _file_form(self, filename: str, content: bytes, content_type: str | None) -> aiohttp.FormData:
        if not isinstance(content, bytes | bytearray) or not content:
            raise ValidationError("content must be non-empty bytes.")
        form = aiohttp.FormData()
        form.add_field(
            "file",
            bytes(content),
            filename=filename,
            content_type=content_type or "application/octet-stream",
        )
        return form

    def _map_invoice_list(self, data: Any) -> list[Invoice]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError("Backend response included invalid invoices.")
        return [self._map_invoice(item) for item in data if isinstance(item, dict)]

    def _map_invoice(self, data: dict[str, Any]) -> Invoice:
        invoice_id = coerce_int(data.get("id"))
        if invoice_id is None:
            raise ApiError("Backend response missing invoice id.")
        return Invoice(
            id=invoice_id,
            invoice_number=str(data.get("invoice_number") or ""),
            reservation_id=coerce_int(data.get("reservation_id")),
            total_amount=coerce_price(data.get("total_amount")),
            is_paid=data.get("is_paid") is True,
            is_canceled=data.get("is_canceled") is True,
            issued_at=data.get("issue_date"),
        )

    def _map_payment_list(self, data: Any) -> list[ManualPayment]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError("Backend response included invalid payments.")
        return [self._map_payment(item) for item in data if isinstance(item, dict)]

    def _map_payment(self, data: Any) -> ManualPayment:
        if not isinstance(data, dict):
            raise ApiError("Backend response included invalid payment data.")
        payment_id = coerce_int(data.get("id"))
        reservation_id = coerce_int(data.get("reservation_id"))
        if payment_id is None or reservation_id is None:
            raise ApiError("Backend response missing payment fields.")
        return ManualPayment(
            id=payment_id,
            reservation_id=reservation_id,
            amount=coerce_price(data.get("amount")),
            payment_date=data.get("payment_date"),
            payment_method=data.get("payment_method"),
            description=data.get("description"),
            attachment_filename=data.get("attachment_filename"),
        )
