"""pyCampReservation package."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from .assembler import assemble, assemble_patch, compute_total
from .catalog import SelectionReconciler
from .client import Client
from .config import ClientConfig
from .exceptions import (
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
from .field_errors import FieldErrorMapper, MappedErrors, default_mapper, parse_validation_errors
from .models import (
    CatalogEntry,
    CatalogResult,
    DownloadedFile,
    FieldError,
    Invoice,
    ManualPayment,
    Reservation,
    ReservationCamp,
    ReservationItem,
    TransportCity,
    User,
)
from .state import ReservationState, ReservationStore
from .storage import DraftStore, JsonFileStore, KeyValueStore, MemoryStore
from .wizard import ReservationWizard, StepForm, SubmissionResult, WizardState

try:
    __version__ = version("pycampreservation")
except PackageNotFoundError:  # pragma: no cover - not installed
    __version__ = "0.0.0"

__all__ = [
    "ApiError",
    "AuthError",
    "CatalogEntry",
    "CatalogResult",
    "Client",
    "ClientConfig",
    "ConfigError",
    "DownloadedFile",
    "DraftStore",
    "DraftStoreError",
    "FieldError",
    "FieldErrorMapper",
    "Invoice",
    "JsonFileStore",
    "KeyValueStore",
    "ManualPayment",
    "MappedErrors",
    "MemoryStore",
    "NetworkError",
    "NotFoundError",
    "PyCampReservationError",
    "Reservation",
    "ReservationCamp",
    "ReservationItem",
    "ReservationState",
    "ReservationStore",
    "ReservationWizard",
    "SelectionReconciler",
    "ServerValidationError",
    "ServiceUnavailableError",
    "StepForm",
    "SubmissionResult",
    "TimeoutError",
    "TransportCity",
    "User",
    "ValidationError",
    "WizardState",
    "__version__",
    "assemble",
    "assemble_patch",
    "compute_total",
    "default_mapper",
    "parse_validation_errors",
]
