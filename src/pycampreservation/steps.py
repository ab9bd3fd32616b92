"""Typed wizard step slices and their wire mapping.

Slices are mutable working copies owned by a step form. ``to_dict`` always
emits the backend's camelCase field names with every key present, and
``from_dict`` tolerates missing or legacy keys so drafts written by older
versions still load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal

from .util import coerce_int

InvoiceType = Literal["private", "company"]
DeliveryType = Literal["electronic", "paper"]

TRANSPORT_COLLECTIVE = "zbiorowy"
TRANSPORT_OWN = "wlasny"
SOURCE_OTHER = "inne"
HEALTH_CATEGORIES = ("chronicDiseases", "dysfunctions", "psychiatric")
_VOUCHER_GRADES = ("brązowy", "brazowy", "srebrny", "złoty", "zloty", "platynowy")


def _str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _int_list(value: Any) -> list[int]:
    if not isinstance(value, list):
        return []
    result: list[int] = []
    for item in value:
        coerced = coerce_int(item)
        if coerced is not None:
            result.append(coerced)
    return result


@dataclass(slots=True)
class Parent:
    id: str = "1"
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = "+48"
    phoneNumber: str = ""
    street: str = ""
    postalCode: str = ""
    city: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.firstName,
            "lastName": self.lastName,
            "email": self.email,
            "phone": self.phone,
            "phoneNumber": self.phoneNumber,
            "street": self.street,
            "postalCode": self.postalCode,
            "city": self.city,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Parent:
        return cls(
            id=_str(data.get("id")) or "1",
            firstName=_str(data.get("firstName")),
            lastName=_str(data.get("lastName")),
            email=_str(data.get("email")),
            phone=_str(data.get("phone")) or "+48",
            phoneNumber=_str(data.get("phoneNumber")),
            street=_str(data.get("street")),
            postalCode=_str(data.get("postalCode")),
            city=_str(data.get("city")),
        )


@dataclass(slots=True)
class Participant:
    firstName: str = ""
    lastName: str = ""
    age: str = ""
    gender: str = ""
    city: str = ""
    selectedParticipant: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstName": self.firstName,
            "lastName": self.lastName,
            "age": self.age,
            "gender": self.gender,
            "city": self.city,
            "selectedParticipant": self.selectedParticipant,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Participant:
        return cls(
            firstName=_str(data.get("firstName")),
            lastName=_str(data.get("lastName")),
            age=_str(data.get("age")),
            gender=_str(data.get("gender")),
            city=_str(data.get("city")),
            selectedParticipant=_str(data.get("selectedParticipant")),
        )


@dataclass(slots=True)
class HealthAnswers:
    """Per-category answers; ``extra`` keeps categories this version does not know."""

    chronicDiseases: str = ""
    dysfunctions: str = ""
    psychiatric: str = ""
    extra: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "chronicDiseases": self.chronicDiseases,
                "dysfunctions": self.dysfunctions,
                "psychiatric": self.psychiatric,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Any) -> HealthAnswers:
        if not isinstance(data, dict):
            return cls()
        extra = {
            str(key): _str(value) for key, value in data.items() if key not in HEALTH_CATEGORIES
        }
        return cls(
            chronicDiseases=_str(data.get("chronicDiseases")),
            dysfunctions=_str(data.get("dysfunctions")),
            psychiatric=_str(data.get("psychiatric")),
            extra=extra,
        )


@dataclass(slots=True)
class Step1Data:
    parents: list[Parent] = field(default_factory=lambda: [Parent()])
    participantData: Participant = field(default_factory=Participant)
    selectedDietId: int | None = None
    accommodationRequest: str = ""
    healthQuestions: HealthAnswers = field(default_factory=HealthAnswers)
    healthDetails: HealthAnswers = field(default_factory=HealthAnswers)
    additionalNotes: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "parents": [parent.to_dict() for parent in self.parents],
            "participantData": self.participantData.to_dict(),
            "selectedDietId": self.selectedDietId,
            "accommodationRequest": self.accommodationRequest,
            "healthQuestions": self.healthQuestions.to_dict(),
            "healthDetails": self.healthDetails.to_dict(),
            "additionalNotes": self.additionalNotes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Step1Data:
        raw_parents = data.get("parents")
        parents = [
            Parent.from_dict(item) for item in raw_parents or [] if isinstance(item, dict)
        ]
        participant = data.get("participantData")
        return cls(
            parents=parents or [Parent()],
            participantData=Participant.from_dict(participant if isinstance(participant, dict) else {}),
            selectedDietId=coerce_int(data.get("selectedDietId")),
            accommodationRequest=_str(data.get("accommodationRequest")),
            healthQuestions=HealthAnswers.from_dict(data.get("healthQuestions")),
            healthDetails=HealthAnswers.from_dict(data.get("healthDetails")),
            additionalNotes=_str(data.get("additionalNotes")),
        )


@dataclass(slots=True)
class TransportData:
    departureType: str = ""
    departureCity: str = ""
    returnType: str = ""
    returnCity: str = ""
    differentCities: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "departureType": self.departureType,
            "departureCity": self.departureCity,
            "returnType": self.returnType,
            "returnCity": self.returnCity,
            "differentCities": self.differentCities,
        }

    @classmethod
    def from_dict(cls, data: Any) -> TransportData:
        if not isinstance(data, dict):
            return cls()
        return cls(
            departureType=_str(data.get("departureType")),
            departureCity=_str(data.get("departureCity")),
            returnType=_str(data.get("returnType")),
            returnCity=_str(data.get("returnCity")),
            differentCities=data.get("differentCities") is True,
        )


# Promotion justification variants. The tag is derived from the promotion name.


@dataclass(slots=True)
class LargeFamilyJustification:
    tag: ClassVar[str] = "duza_rodzina"
    required_fields: ClassVar[tuple[str, ...]] = ("card_number",)
    card_number: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"card_number": self.card_number}


@dataclass(slots=True)
class SiblingsJustification:
    tag: ClassVar[str] = "rodzenstwo_razem"
    required_fields: ClassVar[tuple[str, ...]] = ("sibling_first_name", "sibling_last_name")
    sibling_first_name: str = ""
    sibling_last_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "sibling_first_name": self.sibling_first_name,
            "sibling_last_name": self.sibling_last_name,
        }


@dataclass(slots=True)
class CampLoyaltyJustification:
    tag: ClassVar[str] = "obozy_na_maxa"
    required_fields: ClassVar[tuple[str, ...]] = ("first_camp_date", "first_camp_name")
    first_camp_date: str = ""
    first_camp_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_camp_date": self.first_camp_date,
            "first_camp_name": self.first_camp_name,
        }


@dataclass(slots=True)
class FirstMinuteJustification:
    tag: ClassVar[str] = "first_minute"
    required_fields: ClassVar[tuple[str, ...]] = ("reason",)
    reason: str = "Promocja - First Minute"

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason}


@dataclass(slots=True)
class VoucherJustification:
    tag: ClassVar[str] = "bonowych"
    required_fields: ClassVar[tuple[str, ...]] = ("years",)
    years: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"years": list(self.years)}


@dataclass(slots=True)
class UnknownJustification:
    """Legacy or unrecognized payloads are carried through untouched."""

    tag: ClassVar[str] = "other"
    required_fields: ClassVar[tuple[str, ...]] = ()
    raw: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.raw)


PromotionJustification = (
    LargeFamilyJustification
    | SiblingsJustification
    | CampLoyaltyJustification
    | FirstMinuteJustification
    | VoucherJustification
    | UnknownJustification
)

_JUSTIFICATION_TYPES: dict[str, type] = {
    LargeFamilyJustification.tag: LargeFamilyJustification,
    SiblingsJustification.tag: SiblingsJustification,
    CampLoyaltyJustification.tag: CampLoyaltyJustification,
    FirstMinuteJustification.tag: FirstMinuteJustification,
    VoucherJustification.tag: VoucherJustification,
}


def promotion_type_for(name: str) -> str:
    lowered = (name or "").lower()
    if "duża rodzina" in lowered or "duza rodzina" in lowered:
        return "duza_rodzina"
    if "rodzeństwo razem" in lowered or "rodzenstwo razem" in lowered:
        return "rodzenstwo_razem"
    if "obozy na max" in lowered:
        return "obozy_na_maxa"
    if "first minute" in lowered or "wczesna rezerwacja" in lowered:
        return "first_minute"
    if "bon" in lowered and any(grade in lowered for grade in _VOUCHER_GRADES):
        return "bonowych"
    if "bonowych" in lowered or "bonowa" in lowered:
        return "bonowych"
    return "other"


def requires_justification(name: str) -> bool:
    return promotion_type_for(name) in _JUSTIFICATION_TYPES


def empty_justification(promotion_name: str) -> PromotionJustification:
    cls = _JUSTIFICATION_TYPES.get(promotion_type_for(promotion_name))
    if cls is None:
        return UnknownJustification()
    return cls()


def parse_justification(data: Any, promotion_name: str | None = None) -> PromotionJustification:
    """Build the justification variant for ``data``.

    The promotion name decides the variant when known; otherwise the shape of
    the stored keys does. Anything else becomes ``UnknownJustification``.
    """
    if not isinstance(data, dict):
        data = {}
    tag = promotion_type_for(promotion_name) if promotion_name else None
    if tag is None or tag == "other":
        tag = _tag_from_keys(data)
    if tag == "duza_rodzina":
        return LargeFamilyJustification(card_number=_str(data.get("card_number")))
    if tag == "rodzenstwo_razem":
        return SiblingsJustification(
            sibling_first_name=_str(data.get("sibling_first_name")),
            sibling_last_name=_str(data.get("sibling_last_name")),
        )
    if tag == "obozy_na_maxa":
        return CampLoyaltyJustification(
            first_camp_date=_str(data.get("first_camp_date")),
            first_camp_name=_str(data.get("first_camp_name")),
        )
    if tag == "first_minute":
        reason = _str(data.get("reason")).strip()
        return FirstMinuteJustification(reason=reason or FirstMinuteJustification().reason)
    if tag == "bonowych":
        return VoucherJustification(years=_str_list(data.get("years")))
    return UnknownJustification(raw=dict(data))


def _tag_from_keys(data: dict[str, Any]) -> str:
    keys = set(data)
    if "card_number" in keys:
        return "duza_rodzina"
    if keys & {"sibling_first_name", "sibling_last_name"}:
        return "rodzenstwo_razem"
    if keys & {"first_camp_date", "first_camp_name"}:
        return "obozy_na_maxa"
    if "years" in keys:
        return "bonowych"
    if keys == {"reason"}:
        return "first_minute"
    return "other"


@dataclass(slots=True)
class Step2Data:
    selectedDiets: list[int] = field(default_factory=list)
    selectedAddons: list[str] = field(default_factory=list)
    selectedProtection: list[str] = field(default_factory=list)
    selectedProtectionIds: list[int] = field(default_factory=list)
    selectedPromotion: str = ""
    promotionJustification: PromotionJustification = field(default_factory=UnknownJustification)
    transportData: TransportData = field(default_factory=TransportData)
    transportModalConfirmed: bool = False
    selectedSource: str = ""
    inneText: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "selectedDiets": list(self.selectedDiets),
            "selectedAddons": list(self.selectedAddons),
            "selectedProtection": list(self.selectedProtection),
            "selectedProtectionIds": list(self.selectedProtectionIds),
            "selectedPromotion": self.selectedPromotion,
            "promotionJustification": self.promotionJustification.to_dict(),
            "transportData": self.transportData.to_dict(),
            "transportModalConfirmed": self.transportModalConfirmed,
            "selectedSource": self.selectedSource,
            "inneText": self.inneText,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Step2Data:
        protection = data.get("selectedProtection")
        if isinstance(protection, str):
            # Older drafts stored a single protection id.
            protection = [protection] if protection else []
        return cls(
            selectedDiets=_int_list(data.get("selectedDiets")),
            selectedAddons=_str_list(data.get("selectedAddons")),
            selectedProtection=_str_list(protection),
            selectedProtectionIds=_int_list(data.get("selectedProtectionIds")),
            selectedPromotion=_str(data.get("selectedPromotion")),
            promotionJustification=parse_justification(data.get("promotionJustification")),
            transportData=TransportData.from_dict(data.get("transportData")),
            transportModalConfirmed=data.get("transportModalConfirmed") is True,
            selectedSource=_str(data.get("selectedSource")),
            inneText=_str(data.get("inneText")),
        )


@dataclass(slots=True)
class PrivateData:
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = ""
    street: str = ""
    postalCode: str = ""
    city: str = ""
    nip: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "firstName": self.firstName,
            "lastName": self.lastName,
            "email": self.email,
            "phone": self.phone,
            "street": self.street,
            "postalCode": self.postalCode,
            "city": self.city,
            "nip": self.nip,
        }

    @classmethod
    def from_dict(cls, data: Any) -> PrivateData:
        if not isinstance(data, dict):
            return cls()
        return cls(**{name: _str(data.get(name)) for name in cls.__dataclass_fields__})


@dataclass(slots=True)
class CompanyData:
    companyName: str = ""
    nip: str = ""
    street: str = ""
    postalCode: str = ""
    city: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "companyName": self.companyName,
            "nip": self.nip,
            "street": self.street,
            "postalCode": self.postalCode,
            "city": self.city,
        }

    @classmethod
    def from_dict(cls, data: Any) -> CompanyData:
        if not isinstance(data, dict):
            return cls()
        return cls(**{name: _str(data.get(name)) for name in cls.__dataclass_fields__})


@dataclass(slots=True)
class DeliveryAddress:
    street: str = ""
    postalCode: str = ""
    city: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"street": self.street, "postalCode": self.postalCode, "city": self.city}

    @classmethod
    def from_dict(cls, data: Any) -> DeliveryAddress:
        if not isinstance(data, dict):
            return cls()
        return cls(**{name: _str(data.get(name)) for name in cls.__dataclass_fields__})


@dataclass(slots=True)
class Step3Data:
    invoiceType: InvoiceType = "private"
    privateData: PrivateData = field(default_factory=PrivateData)
    companyData: CompanyData = field(default_factory=CompanyData)
    deliveryType: DeliveryType = "electronic"
    differentAddress: bool = False
    deliveryAddress: DeliveryAddress = field(default_factory=DeliveryAddress)

    @property
    def needs_delivery_address(self) -> bool:
        return self.deliveryType == "paper" and self.differentAddress

    def to_dict(self) -> dict[str, Any]:
        return {
            "invoiceType": self.invoiceType,
            "privateData": self.privateData.to_dict(),
            "companyData": self.companyData.to_dict(),
            "deliveryType": self.deliveryType,
            "differentAddress": self.differentAddress,
            "deliveryAddress": self.deliveryAddress.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Step3Data:
        invoice_type = data.get("invoiceType")
        delivery_type = data.get("deliveryType")
        return cls(
            invoiceType="company" if invoice_type == "company" else "private",
            privateData=PrivateData.from_dict(data.get("privateData")),
            companyData=CompanyData.from_dict(data.get("companyData")),
            deliveryType="paper" if delivery_type == "paper" else "electronic",
            differentAddress=data.get("differentAddress") is True,
            deliveryAddress=DeliveryAddress.from_dict(data.get("deliveryAddress")),
        )


@dataclass(slots=True)
class Step4Data:
    consent1: bool = False
    consent2: bool = False
    consent3: bool = False
    consent4: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "consent1": self.consent1,
            "consent2": self.consent2,
            "consent3": self.consent3,
            "consent4": self.consent4,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Step4Data:
        return cls(**{name: data.get(name) is True for name in cls.__dataclass_fields__})


StepData = Step1Data | Step2Data | Step3Data | Step4Data

STEP_TYPES: dict[int, type] = {
    1: Step1Data,
    2: Step2Data,
    3: Step3Data,
    4: Step4Data,
}


def step_from_dict(step: int, data: dict[str, Any]) -> StepData:
    return STEP_TYPES[step].from_dict(data)
