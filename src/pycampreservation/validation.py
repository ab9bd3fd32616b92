"""Step-local validation.

Each validator returns a mapping of field path to a user-facing Polish
message. An empty mapping means the step is valid. Paths use dotted
notation relative to the step slice, e.g. ``parents.0.email``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .steps import (
    SOURCE_OTHER,
    TRANSPORT_COLLECTIVE,
    CompanyData,
    DeliveryAddress,
    Parent,
    PrivateData,
    Step1Data,
    Step2Data,
    Step3Data,
    Step4Data,
    VoucherJustification,
    parse_justification,
    requires_justification,
)
from .util import PLACEHOLDER_CHOICE, birth_year_bounds, coerce_int, is_blank, is_valid_email, parse_start_year

REQUIRED = "Pole obowiązkowe"
INVALID_EMAIL = "Nieprawidłowy adres e-mail"
INVALID_BIRTH_YEAR = "Nieprawidłowy rocznik"
AGE_OUT_OF_RANGE = "Uczestnik musi mieć 7-17 lat w dniu rozpoczęcia obozu"
JUSTIFICATION_REQUIRED = "To pole jest wymagane"
TOO_MANY_GUARDIANS = "Można podać maksymalnie dwóch opiekunów"

MAX_GUARDIANS = 2
ALL_CONSENTS: tuple[str, ...] = ("consent1", "consent2", "consent3", "consent4")

Errors = dict[str, str]


def _is_unset_choice(value: str) -> bool:
    return is_blank(value) or value == PLACEHOLDER_CHOICE


def _require(errors: Errors, prefix: str, values: dict[str, str], fields: Iterable[str]) -> None:
    for name in fields:
        if is_blank(values.get(name)):
            errors[f"{prefix}{name}"] = REQUIRED


def _validate_parent(parent: Parent, index: int) -> Errors:
    errors: Errors = {}
    prefix = f"parents.{index}."
    _require(errors, prefix, parent.to_dict(), ("firstName", "lastName", "phoneNumber"))
    if index == 0:
        if is_blank(parent.email):
            errors[f"{prefix}email"] = REQUIRED
        elif not is_valid_email(parent.email):
            errors[f"{prefix}email"] = INVALID_EMAIL
    elif not is_blank(parent.email) and not is_valid_email(parent.email):
        errors[f"{prefix}email"] = INVALID_EMAIL
    return errors


def validate_step1(step1: Step1Data, *, camp_start_date: str | date | None = None) -> Errors:
    """Guardians and participant.

    Street, postal code and city are optional for guardians. When the camp
    start date is known the participant's birth year must make them 7-17
    years old on that date.
    """
    errors: Errors = {}
    if not step1.parents:
        errors["parents.0.firstName"] = REQUIRED
    elif len(step1.parents) > MAX_GUARDIANS:
        errors["parents"] = TOO_MANY_GUARDIANS
    for index, parent in enumerate(step1.parents[:MAX_GUARDIANS]):
        errors.update(_validate_parent(parent, index))

    participant = step1.participantData
    _require(errors, "participantData.", participant.to_dict(), ("firstName", "lastName", "city"))
    if _is_unset_choice(participant.age):
        errors["participantData.age"] = REQUIRED
    else:
        start_year = parse_start_year(camp_start_date)
        if start_year is not None:
            birth_year = coerce_int(participant.age)
            if birth_year is None:
                errors["participantData.age"] = INVALID_BIRTH_YEAR
            else:
                lowest, highest = birth_year_bounds(start_year)
                if not lowest <= birth_year <= highest:
                    errors["participantData.age"] = AGE_OUT_OF_RANGE
    if _is_unset_choice(participant.gender):
        errors["participantData.gender"] = REQUIRED
    return errors


def validate_step2(step2: Step2Data, *, promotion_name: str | None = None) -> Errors:
    errors: Errors = {}
    transport = step2.transportData
    if is_blank(transport.departureType):
        errors["transportData.departureType"] = REQUIRED
    elif transport.departureType == TRANSPORT_COLLECTIVE and is_blank(transport.departureCity):
        errors["transportData.departureCity"] = REQUIRED
    if is_blank(transport.returnType):
        errors["transportData.returnType"] = REQUIRED
    elif transport.returnType == TRANSPORT_COLLECTIVE and is_blank(transport.returnCity):
        errors["transportData.returnCity"] = REQUIRED

    if step2.selectedSource == SOURCE_OTHER and is_blank(step2.inneText):
        errors["inneText"] = REQUIRED

    if promotion_name and step2.selectedPromotion and requires_justification(promotion_name):
        errors.update(_validate_justification(step2, promotion_name))
    return errors


def _validate_justification(step2: Step2Data, promotion_name: str) -> Errors:
    errors: Errors = {}
    justification = parse_justification(step2.promotionJustification.to_dict(), promotion_name)
    if isinstance(justification, VoucherJustification):
        if not any(not is_blank(year) for year in justification.years):
            errors["promotionJustification.years"] = JUSTIFICATION_REQUIRED
        return errors
    values = justification.to_dict()
    for name in justification.required_fields:
        if is_blank(values.get(name)):
            errors[f"promotionJustification.{name}"] = JUSTIFICATION_REQUIRED
    return errors


def _validate_private(data: PrivateData) -> Errors:
    errors: Errors = {}
    _require(errors, "privateData.", data.to_dict(), ("firstName", "lastName", "street", "postalCode", "city"))
    if not is_blank(data.email) and not is_valid_email(data.email):
        errors["privateData.email"] = INVALID_EMAIL
    return errors


def _validate_company(data: CompanyData) -> Errors:
    errors: Errors = {}
    _require(errors, "companyData.", data.to_dict(), ("companyName", "nip", "street", "postalCode", "city"))
    return errors


def _validate_delivery(data: DeliveryAddress) -> Errors:
    errors: Errors = {}
    _require(errors, "deliveryAddress.", data.to_dict(), ("street", "postalCode", "city"))
    return errors


def validate_step3(step3: Step3Data) -> Errors:
    errors: Errors = {}
    if step3.invoiceType == "company":
        errors.update(_validate_company(step3.companyData))
    else:
        errors.update(_validate_private(step3.privateData))
    if step3.needs_delivery_address:
        errors.update(_validate_delivery(step3.deliveryAddress))
    return errors


def validate_step4(step4: Step4Data, *, required_consents: Iterable[str] = ALL_CONSENTS) -> Errors:
    errors: Errors = {}
    values = step4.to_dict()
    for name in required_consents:
        if values.get(name) is not True:
            errors[name] = REQUIRED
    return errors
