"""Parsing of backend 422 bodies and mapping of field paths onto wizard steps."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .models import FieldError
from .util import normalize_field_path

_LOGGER = logging.getLogger(__name__)

GENERIC_FIELD = "__all__"


def parse_validation_errors(body: Any) -> list[FieldError]:
    """Extract field errors from the shapes the backend is known to send.

    Supported shapes are ``{"detail": {"details": [{"field", "message"}]}}``,
    pydantic's ``{"detail": [{"loc": [...], "msg": ...}]}`` and a plain
    ``{"detail": "text"}``. Anything else yields a single generic error.
    """
    if not isinstance(body, dict):
        return []
    detail = body.get("detail")
    if isinstance(detail, dict):
        details = detail.get("details")
        if isinstance(details, list):
            return [_from_detail_entry(entry) for entry in details if isinstance(entry, dict)]
        message = detail.get("error") or detail.get("message")
        if isinstance(message, str) and message.strip():
            return [FieldError(field=GENERIC_FIELD, message=message.strip())]
        return [FieldError(field=GENERIC_FIELD, message=json.dumps(detail, ensure_ascii=False))]
    if isinstance(detail, list):
        return [_from_pydantic_entry(entry) for entry in detail if isinstance(entry, dict)]
    if isinstance(detail, str) and detail.strip():
        return [FieldError(field=GENERIC_FIELD, message=detail.strip())]
    details = body.get("details")
    if isinstance(details, list):
        return [_from_detail_entry(entry) for entry in details if isinstance(entry, dict)]
    return []


def _from_detail_entry(entry: dict[str, Any]) -> FieldError:
    raw_field = entry.get("field") or entry.get("loc") or GENERIC_FIELD
    if isinstance(raw_field, list):
        raw_field = _join_loc(raw_field)
    message = entry.get("message") or entry.get("msg") or "Validation error"
    return FieldError(field=_normalize(str(raw_field)), message=str(message))


def _from_pydantic_entry(entry: dict[str, Any]) -> FieldError:
    loc = entry.get("loc")
    raw_field = _join_loc(loc) if isinstance(loc, list) else GENERIC_FIELD
    message = entry.get("msg") or entry.get("message") or "Validation error"
    return FieldError(field=_normalize(raw_field), message=str(message))


def _join_loc(loc: list[Any]) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] == "body":
        parts = parts[1:]
    return ".".join(parts) or GENERIC_FIELD


def _normalize(path: str) -> str:
    if path == GENERIC_FIELD:
        return path
    return normalize_field_path(path) or GENERIC_FIELD


def format_errors(errors: Iterable[FieldError]) -> str:
    """Join errors as ``field: message`` pairs for a single banner line."""
    return ", ".join(
        error.message if error.field == GENERIC_FIELD else f"{error.field}: {error.message}"
        for error in errors
    )


@dataclass(frozen=True, slots=True)
class FieldRule:
    prefix: str
    step: int
    local_prefix: str = ""


@dataclass(slots=True)
class MappedErrors:
    by_step: dict[int, dict[str, str]] = field(default_factory=dict)
    unmatched: list[FieldError] = field(default_factory=list)

    @property
    def first_step(self) -> int | None:
        if not self.by_step:
            return None
        return min(self.by_step)

    def is_empty(self) -> bool:
        return not self.by_step and not self.unmatched


class FieldErrorMapper:
    """Map backend field paths onto a wizard step and the step's local field path.

    Rules are matched by the longest path prefix. The defaults cover the
    ``stepN.<field>`` convention; extra rules can be registered for paths the
    backend reports differently.
    """

    def __init__(self, rules: Iterable[FieldRule] | None = None, *, include_defaults: bool = True) -> None:
        self._rules: list[FieldRule] = []
        if include_defaults:
            for step in (1, 2, 3, 4):
                self._rules.append(FieldRule(prefix=f"step{step}", step=step))
        for rule in rules or ():
            self._rules.append(rule)

    def register(self, prefix: str, step: int, local_prefix: str = "") -> None:
        if step not in (1, 2, 3, 4):
            raise ValueError("step must be between 1 and 4.")
        self._rules.append(
            FieldRule(
                prefix=normalize_field_path(prefix),
                step=step,
                local_prefix=normalize_field_path(local_prefix) if local_prefix else "",
            )
        )

    def resolve(self, path: str) -> tuple[int, str] | None:
        if path == GENERIC_FIELD:
            return None
        normalized = normalize_field_path(path)
        best: FieldRule | None = None
        for rule in self._rules:
            if normalized == rule.prefix or normalized.startswith(f"{rule.prefix}."):
                if best is None or len(rule.prefix) >= len(best.prefix):
                    best = rule
        if best is None:
            return None
        remainder = normalized[len(best.prefix) :].lstrip(".")
        local = ".".join(part for part in (best.local_prefix, remainder) if part)
        if not local:
            return None
        return best.step, local

    def map(self, errors: Iterable[FieldError]) -> MappedErrors:
        mapped = MappedErrors()
        for error in errors:
            target = self.resolve(error.field)
            if target is None:
                mapped.unmatched.append(error)
                continue
            step, local = target
            mapped.by_step.setdefault(step, {}).setdefault(local, error.message)
        if mapped.unmatched:
            _LOGGER.debug("%d server errors could not be mapped to a field", len(mapped.unmatched))
        return mapped


# Slice fields the backend may report without a ``stepN.`` prefix.
STEP_FIELD_PREFIXES: dict[int, tuple[str, ...]] = {
    1: (
        "parents",
        "participantData",
        "selectedDietId",
        "diet",
        "accommodationRequest",
        "healthQuestions",
        "healthDetails",
        "additionalNotes",
    ),
    2: (
        "selectedDiets",
        "selectedAddons",
        "selectedProtection",
        "selectedPromotion",
        "promotionJustification",
        "transportData",
        "selectedSource",
        "inneText",
    ),
    3: (
        "invoiceType",
        "privateData",
        "companyData",
        "deliveryType",
        "differentAddress",
        "deliveryAddress",
    ),
    4: ("consent1", "consent2", "consent3", "consent4"),
}


def default_mapper() -> FieldErrorMapper:
    """Mapper for ``stepN.<path>`` plus the bare slice field names."""
    mapper = FieldErrorMapper()
    for step, prefixes in STEP_FIELD_PREFIXES.items():
        for prefix in prefixes:
            mapper.register(prefix, step, prefix)
    return mapper
