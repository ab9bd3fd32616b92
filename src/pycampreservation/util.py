"""Shared utilities for validation and normalization."""

from __future__ import annotations

import re
from datetime import date, datetime
from email.message import Message
from typing import Any

from .exceptions import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_INDEX_RE = re.compile(r"\[(\d+)\]")
PLACEHOLDER_CHOICE = "Wybierz z listy"


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def is_valid_email(value: str) -> bool:
    return isinstance(value, str) and EMAIL_RE.match(value) is not None


def mask_email(value: str) -> str:
    if not isinstance(value, str) or "@" not in value:
        return "***"
    local, _, domain = value.partition("@")
    if len(local) <= 1:
        return f"*@{domain}"
    return f"{local[:1]}{'*' * (len(local) - 1)}@{domain}"


def normalize_field_path(path: str) -> str:
    """Convert ``parents[0].firstName`` style paths into ``parents.0.firstName``."""
    if not isinstance(path, str):
        raise ValidationError("Field path must be a string.")
    normalized = _INDEX_RE.sub(r".\1", path.strip())
    return normalized.strip(".")


def coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    return None


def coerce_price(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().replace(",", "."))
        except ValueError:
            return 0.0
    return 0.0


def parse_start_year(value: str | date | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, datetime | date):
        return value.year
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    try:
        return datetime.fromisoformat(raw).year
    except ValueError:
        pass
    try:
        return date.fromisoformat(raw[:10]).year
    except ValueError:
        return None


def birth_year_bounds(start_year: int, *, min_age: int = 7, max_age: int = 17) -> tuple[int, int]:
    """Return the inclusive birth year range for participants of a camp."""
    return start_year - max_age, start_year - min_age


def filename_from_content_disposition(header: str | None) -> str | None:
    if not header:
        return None
    message = Message()
    message["content-disposition"] = header
    filename = message.get_filename()
    if not filename:
        return None
    # Drop any directory component sent by the server.
    filename = filename.replace("\\", "/").rsplit("/", 1)[-1].strip()
    return filename or None
