"""Async clients for the reservation backend."""

from .auth import AuthApi
from .base import BaseApi
from .catalog import CatalogApi
from .documents import DocumentsApi
from .reservations import ReservationsApi
from .tokens import TokenStore

__all__ = [
    "AuthApi",
    "BaseApi",
    "CatalogApi",
    "DocumentsApi",
    "ReservationsApi",
    "TokenStore",
]
