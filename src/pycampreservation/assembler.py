"""Build the reservation request body from the four step slices."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .models import ReservationItem
from .steps import Step1Data, Step2Data, Step3Data, Step4Data

DEFAULT_DIET = "standard"


def compute_total(items: Iterable[ReservationItem]) -> float:
    """Sum of base, diet, add-ons, protections, transport and (negative) promotion items."""
    return float(sum(item.price for item in items))


def step1_payload(step1: Step1Data, *, diet_label: str | None = None) -> dict[str, Any]:
    data = step1.to_dict()
    return {
        "parents": data["parents"],
        "participantData": data["participantData"],
        "selectedDietId": data["selectedDietId"],
        "diet": diet_label or DEFAULT_DIET,
        "accommodationRequest": data["accommodationRequest"],
        "healthQuestions": data["healthQuestions"],
        "healthDetails": data["healthDetails"],
        "additionalNotes": data["additionalNotes"],
    }


def step2_payload(step2: Step2Data) -> dict[str, Any]:
    transport = step2.transportData
    return {
        "selectedDiets": list(step2.selectedDiets),
        "selectedAddons": list(step2.selectedAddons),
        "selectedProtection": list(step2.selectedProtection),
        "selectedPromotion": step2.selectedPromotion,
        "promotionJustification": step2.promotionJustification.to_dict(),
        "transportData": {
            "departureType": transport.departureType,
            "departureCity": transport.departureCity,
            "returnType": transport.returnType,
            "returnCity": transport.returnCity,
        },
        "selectedSource": step2.selectedSource,
        "inneText": step2.inneText,
    }


def step3_payload(step3: Step3Data) -> dict[str, Any]:
    return {
        "invoiceType": step3.invoiceType,
        "privateData": step3.privateData.to_dict() if step3.invoiceType == "private" else None,
        "companyData": step3.companyData.to_dict() if step3.invoiceType == "company" else None,
        "deliveryType": step3.deliveryType,
        "differentAddress": step3.differentAddress,
        "deliveryAddress": step3.deliveryAddress.to_dict() if step3.needs_delivery_address else None,
    }


def step4_payload(step4: Step4Data) -> dict[str, Any]:
    return step4.to_dict()


def assemble(
    step1: Step1Data,
    step2: Step2Data,
    step3: Step3Data,
    step4: Step4Data,
    camp_id: int,
    property_id: int,
    total_price: float,
    deposit_amount: float = 0,
    *,
    diet_label: str | None = None,
) -> dict[str, Any]:
    """Return the create-reservation body.

    Every key is always present; optional values are empty rather than
    missing. Invoice and delivery sub-objects are ``None`` when they do not
    apply to the selected invoice and delivery type.
    """
    return {
        "camp_id": camp_id,
        "property_id": property_id,
        "step1": step1_payload(step1, diet_label=diet_label),
        "step2": step2_payload(step2),
        "step3": step3_payload(step3),
        "step4": step4_payload(step4),
        "total_price": float(total_price),
        "deposit_amount": float(deposit_amount or 0),
    }


def assemble_patch(
    *,
    step1: Step1Data | None = None,
    step2: Step2Data | None = None,
    step3: Step3Data | None = None,
    step4: Step4Data | None = None,
    total_price: float | None = None,
) -> dict[str, Any]:
    """Return a partial update body containing only the given steps."""
    body: dict[str, Any] = {}
    if step1 is not None:
        body["step1"] = step1_payload(step1)
    if step2 is not None:
        body["step2"] = step2_payload(step2)
    if step3 is not None:
        body["step3"] = step3_payload(step3)
    if step4 is not None:
        body["step4"] = step4_payload(step4)
    if total_price is not None:
        body["total_price"] = float(total_price)
    return body
