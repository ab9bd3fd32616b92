from pycampreservation.steps import (
    LargeFamilyJustification,
    Parent,
    Step1Data,
    Step2Data,
    Step3Data,
    Step4Data,
    VoucherJustification,
)
from pycampreservation.validation import (
    AGE_OUT_OF_RANGE,
    INVALID_EMAIL,
    JUSTIFICATION_REQUIRED,
    REQUIRED,
    TOO_MANY_GUARDIANS,
    validate_step1,
    validate_step2,
    validate_step3,
    validate_step4,
)


def _valid_step1() -> Step1Data:
    step1 = Step1Data()
    parent = step1.parents[0]
    parent.firstName = "Anna"
    parent.lastName = "Kowalska"
    parent.email = "anna@example.pl"
    parent.phoneNumber = "600100200"
    participant = step1.participantData
    participant.firstName = "Jaś"
    participant.lastName = "Kowalski"
    participant.age = "2014"
    participant.gender = "Chłopiec"
    participant.city = "Gdańsk"
    return step1


def _valid_step2() -> Step2Data:
    step2 = Step2Data()
    step2.transportData.departureType = "zbiorowy"
    step2.transportData.departureCity = "Gdańsk"
    step2.transportData.returnType = "wlasny"
    return step2


def test_valid_step1() -> None:
    assert validate_step1(_valid_step1(), camp_start_date="2025-07-01") == {}


def test_step1_reports_missing_fields() -> None:
    errors = validate_step1(Step1Data())
    assert errors["parents.0.firstName"] == REQUIRED
    assert errors["parents.0.email"] == REQUIRED
    assert errors["participantData.age"] == REQUIRED
    assert "parents.0.street" not in errors


def test_step1_invalid_email_and_second_guardian() -> None:
    step1 = _valid_step1()
    step1.parents[0].email = "anna@"
    step1.parents.append(Parent(id="2", firstName="Piotr", lastName="Kowalski", phoneNumber="600"))
    errors = validate_step1(step1)
    assert errors == {"parents.0.email": INVALID_EMAIL}


def test_step1_too_many_guardians() -> None:
    step1 = _valid_step1()
    step1.parents.extend([Parent(id="2"), Parent(id="3")])
    assert validate_step1(step1)["parents"] == TOO_MANY_GUARDIANS


def test_step1_age_checked_against_camp_start() -> None:
    step1 = _valid_step1()
    step1.participantData.age = "2020"
    assert validate_step1(step1, camp_start_date="2025-07-01")["participantData.age"] == AGE_OUT_OF_RANGE
    assert "participantData.age" not in validate_step1(step1)


def test_step1_placeholder_choice_is_missing() -> None:
    step1 = _valid_step1()
    step1.participantData.gender = "Wybierz z listy"
    assert validate_step1(step1)["participantData.gender"] == REQUIRED


def test_step2_collective_transport_needs_city() -> None:
    step2 = _valid_step2()
    assert validate_step2(step2) == {}
    step2.transportData.returnType = "zbiorowy"
    assert validate_step2(step2) == {"transportData.returnCity": REQUIRED}


def test_step2_other_source_needs_text() -> None:
    step2 = _valid_step2()
    step2.selectedSource = "inne"
    assert validate_step2(step2) == {"inneText": REQUIRED}


def test_step2_promotion_justification() -> None:
    step2 = _valid_step2()
    step2.selectedPromotion = "4"
    step2.promotionJustification = LargeFamilyJustification()
    assert validate_step2(step2, promotion_name="Duża rodzina") == {
        "promotionJustification.card_number": JUSTIFICATION_REQUIRED
    }
    step2.promotionJustification = LargeFamilyJustification(card_number="KDR-1")
    assert validate_step2(step2, promotion_name="Duża rodzina") == {}


def test_step2_voucher_needs_a_year() -> None:
    step2 = _valid_step2()
    step2.selectedPromotion = "8"
    step2.promotionJustification = VoucherJustification(years=[" "])
    assert validate_step2(step2, promotion_name="Bon złoty") == {
        "promotionJustification.years": JUSTIFICATION_REQUIRED
    }


def test_step2_first_minute_needs_nothing_from_user() -> None:
    step2 = _valid_step2()
    step2.selectedPromotion = "1"
    assert validate_step2(step2, promotion_name="First Minute") == {}


def test_step3_private_invoice() -> None:
    step3 = Step3Data()
    errors = validate_step3(step3)
    assert set(errors) == {
        "privateData.firstName",
        "privateData.lastName",
        "privateData.street",
        "privateData.postalCode",
        "privateData.city",
    }


def test_step3_company_without_name_is_blocked() -> None:
    step3 = Step3Data(invoiceType="company")
    step3.companyData.nip = "5250001090"
    step3.companyData.street = "Długa 1"
    step3.companyData.postalCode = "80-001"
    step3.companyData.city = "Gdańsk"
    assert validate_step3(step3) == {"companyData.companyName": REQUIRED}


def test_step3_paper_delivery_without_different_address() -> None:
    step3 = Step3Data(deliveryType="paper", differentAddress=False)
    step3.privateData.firstName = "Anna"
    step3.privateData.lastName = "Kowalska"
    step3.privateData.street = "Długa 1"
    step3.privateData.postalCode = "80-001"
    step3.privateData.city = "Gdańsk"
    assert validate_step3(step3) == {}
    step3.differentAddress = True
    assert set(validate_step3(step3)) == {
        "deliveryAddress.street",
        "deliveryAddress.postalCode",
        "deliveryAddress.city",
    }


def test_step4_consents() -> None:
    step4 = Step4Data(consent1=True, consent2=True)
    assert set(validate_step4(step4)) == {"consent3", "consent4"}
    assert validate_step4(step4, required_consents=("consent1", "consent2")) == {}
