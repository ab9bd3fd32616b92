from pycampreservation.exceptions import (
    ApiError,
    AuthError,
    ConfigError,
    DraftStoreError,
    NetworkError,
    NotFoundError,
    PyCampReservationError,
    ServerValidationError,
    ServiceUnavailableError,
    TimeoutError,
    ValidationError,
)
from pycampreservation.models import FieldError


def test_error_defaults() -> None:
    exc = PyCampReservationError("base error")
    assert exc.error_type == "unknown"
    assert exc.error_code is None
    assert exc.detail == "base error"
    assert exc.user_message is None


def test_error_detail_fallback() -> None:
    exc = ApiError(detail="short detail")
    assert str(exc) == "short detail"
    assert exc.detail == "short detail"
    assert exc.error_code == "api_error"
    assert exc.status is None


def test_error_overrides() -> None:
    exc = NetworkError(
        "network down",
        error_code="network_timeout",
        detail="timeout talking to backend",
        user_message="Nie udało się połączyć z serwerem.",
    )
    assert exc.error_type == "network"
    assert exc.error_code == "network_timeout"
    assert exc.detail == "timeout talking to backend"
    assert exc.user_message == "Nie udało się połączyć z serwerem."


def test_error_types_have_codes() -> None:
    assert AuthError("nope").error_code == "auth_error"
    assert NetworkError("nope").error_code == "network_error"
    assert ValidationError("nope").error_code == "validation_error"
    assert ApiError("nope").error_code == "api_error"
    assert ServiceUnavailableError("nope").error_code == "service_unavailable"
    assert NotFoundError("nope").error_code == "not_found"
    assert TimeoutError("nope").error_code == "timeout"
    assert ConfigError("nope").error_code == "config_error"
    assert DraftStoreError("nope").error_code == "draft_store_error"


def test_timeout_is_a_network_error() -> None:
    assert isinstance(TimeoutError("slow"), NetworkError)


def test_server_validation_error_keeps_field_errors() -> None:
    errors = [FieldError(field="step1.parents.0.email", message="invalid")]
    exc = ServerValidationError("rejected", field_errors=errors)
    assert exc.status == 422
    assert exc.field_errors == errors
    assert isinstance(exc, ApiError)
