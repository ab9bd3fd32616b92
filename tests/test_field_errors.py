import pytest

from pycampreservation.field_errors import (
    GENERIC_FIELD,
    FieldErrorMapper,
    default_mapper,
    format_errors,
    parse_validation_errors,
)
from pycampreservation.models import FieldError


def test_parse_details_shape() -> None:
    body = {
        "detail": {
            "error": "Validation failed",
            "details": [
                {"field": "step1.parents[0].email", "message": "Nieprawidłowy e-mail"},
                {"field": "step3.privateData.city", "message": "Pole obowiązkowe"},
            ],
        }
    }
    assert parse_validation_errors(body) == [
        FieldError(field="step1.parents.0.email", message="Nieprawidłowy e-mail"),
        FieldError(field="step3.privateData.city", message="Pole obowiązkowe"),
    ]


def test_parse_pydantic_shape_strips_body() -> None:
    body = {"detail": [{"loc": ["body", "step2", "transportData", "departureCity"], "msg": "field required"}]}
    assert parse_validation_errors(body) == [
        FieldError(field="step2.transportData.departureCity", message="field required")
    ]


def test_parse_plain_detail() -> None:
    assert parse_validation_errors({"detail": "Turnus jest pełny"}) == [
        FieldError(field=GENERIC_FIELD, message="Turnus jest pełny")
    ]
    assert parse_validation_errors({"detail": {"message": "Brak miejsc"}}) == [
        FieldError(field=GENERIC_FIELD, message="Brak miejsc")
    ]
    assert parse_validation_errors("not a dict") == []


def test_format_errors() -> None:
    errors = [
        FieldError(field="step4.consent1", message="Pole obowiązkowe"),
        FieldError(field=GENERIC_FIELD, message="Turnus jest pełny"),
    ]
    assert format_errors(errors) == "step4.consent1: Pole obowiązkowe, Turnus jest pełny"


def test_mapper_resolves_step_prefix() -> None:
    mapper = FieldErrorMapper()
    assert mapper.resolve("step1.parents.0.email") == (1, "parents.0.email")
    assert mapper.resolve("step1") is None
    assert mapper.resolve("camp_id") is None
    assert mapper.resolve(GENERIC_FIELD) is None


def test_mapper_longest_prefix_wins() -> None:
    mapper = FieldErrorMapper()
    mapper.register("step2.transport", 2, "transportData")
    assert mapper.resolve("step2.transport.returnCity") == (2, "transportData.returnCity")
    assert mapper.resolve("step2.inneText") == (2, "inneText")


def test_mapper_register_validates_step() -> None:
    with pytest.raises(ValueError):
        FieldErrorMapper().register("x", 5)


def test_default_mapper_handles_bare_fields() -> None:
    mapper = default_mapper()
    mapped = mapper.map(
        [
            FieldError(field="privateData.nip", message="Nieprawidłowy NIP"),
            FieldError(field="consent2", message="Wymagane"),
            FieldError(field="step1.participantData.age", message="Za młody"),
            FieldError(field="property_id", message="Turnus nie istnieje"),
        ]
    )
    assert mapped.by_step == {
        3: {"privateData.nip": "Nieprawidłowy NIP"},
        4: {"consent2": "Wymagane"},
        1: {"participantData.age": "Za młody"},
    }
    assert mapped.first_step == 1
    assert [error.field for error in mapped.unmatched] == ["property_id"]
    assert not mapped.is_empty()
