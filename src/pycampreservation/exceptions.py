"""Library exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import FieldError


class PyCampReservationError(Exception):
    """Base exception for the library."""

    error_type = "unknown"
    default_error_code: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
    ) -> None:
        text = message if message is not None else detail
        super().__init__(text or "")
        self.error_code = error_code or self.default_error_code
        self.detail = detail if detail is not None else text
        self.user_message = user_message


class AuthError(PyCampReservationError):
    """Raised when authentication fails or a session expired."""

    error_type = "auth"
    default_error_code = "auth_error"


class NetworkError(PyCampReservationError):
    """Raised when network communication fails."""

    error_type = "network"
    default_error_code = "network_error"


class TimeoutError(NetworkError):
    """Raised when the backend does not answer in time."""

    error_type = "timeout"
    default_error_code = "timeout"


class ValidationError(PyCampReservationError):
    """Raised when inputs fail local validation."""

    error_type = "validation"
    default_error_code = "validation_error"


class ApiError(PyCampReservationError):
    """Raised when the backend returns an error or an unusable response."""

    error_type = "api"
    default_error_code = "api_error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status: int | None = None,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(
            message,
            error_code=error_code,
            detail=detail,
            user_message=user_message,
        )
        self.status = status


class ServerValidationError(ApiError):
    """Raised when the backend rejects a payload with HTTP 422."""

    error_type = "server_validation"
    default_error_code = "server_validation"

    def __init__(
        self,
        message: str | None = None,
        *,
        field_errors: list[FieldError] | None = None,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(
            message,
            status=422,
            error_code=error_code,
            detail=detail,
            user_message=user_message,
        )
        self.field_errors: list[FieldError] = list(field_errors or [])


class NotFoundError(ApiError):
    """Raised when the backend answers 404."""

    error_type = "not_found"
    default_error_code = "not_found"


class ServiceUnavailableError(ApiError):
    """Raised on 5xx and rate limit responses; the request may be retried."""

    error_type = "service_unavailable"
    default_error_code = "service_unavailable"


class ConfigError(PyCampReservationError):
    """Raised when configuration values are missing or invalid."""

    error_type = "config"
    default_error_code = "config_error"


class DraftStoreError(PyCampReservationError):
    """Raised when the draft backing store cannot be written."""

    error_type = "draft_store"
    default_error_code = "draft_store_error"
