"""Mask personal data in live check output."""

from __future__ import annotations

from typing import Any

# Key fragments, matched case-insensitively against payload keys.
_MASKED_FRAGMENTS = (
    "password",
    "token",
    "pesel",
    "nip",
    "card_number",
    "account_number",
    "iban",
    "phone",
    "login",
    "firstname",
    "first_name",
    "lastname",
    "last_name",
    "companyname",
    "company_name",
    "street",
    "postalcode",
    "postal_code",
    "address",
    "city",
    "health",
    "additionalnotes",
    "accommodationrequest",
)
# Transport legs name a pick-up point, not where the family lives.
_KEPT_KEYS = {"departurecity", "returncity"}


def mask_value(value: Any) -> Any:
    """Return a length-preserving mask; ``None`` and booleans pass through."""
    if value is None or isinstance(value, bool):
        return value
    return "*" * len(str(value))


def mask_email(value: Any) -> Any:
    if not isinstance(value, str) or "@" not in value:
        return mask_value(value)
    local, _, domain = value.partition("@")
    return f"{'*' * len(local)}@{domain}"


def sanitize_data(value: Any, *, key: str = "") -> Any:
    """Mask the personal fields of a reservation payload or response."""
    lowered = key.lower()
    if lowered not in _KEPT_KEYS:
        if "email" in lowered:
            return mask_email(value) if isinstance(value, str) else _mask_all(value)
        if any(fragment in lowered for fragment in _MASKED_FRAGMENTS):
            return _mask_all(value)
    if isinstance(value, dict):
        return {str(name): sanitize_data(item, key=str(name)) for name, item in value.items()}
    if isinstance(value, list):
        return [sanitize_data(item, key=key) for item in value]
    return value


def _mask_all(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(name): _mask_all(item) for name, item in value.items()}
    if isinstance(value, list):
        return [_mask_all(item) for item in value]
    return mask_value(value)
