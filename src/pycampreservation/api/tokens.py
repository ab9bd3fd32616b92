"""Persistence of the access token and the signed-in user."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..models import User
from ..storage import KeyValueStore, MemoryStore
from .const import TOKEN_KEY, USER_KEY

_LOGGER = logging.getLogger(__name__)


def user_from_dict(data: Any) -> User | None:
    if not isinstance(data, dict) or data.get("id") is None:
        return None
    try:
        user_id = int(data["id"])
    except (TypeError, ValueError):
        return None
    return User(
        id=user_id,
        login=str(data.get("login") or ""),
        groups=tuple(str(group) for group in data.get("groups") or ()),
        accessible_sections=tuple(str(section) for section in data.get("accessible_sections") or ()),
    )


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "login": user.login,
        "groups": list(user.groups),
        "accessible_sections": list(user.accessible_sections),
    }


class TokenStore:
    """Keeps the bearer token and user next to the drafts."""

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self._store = store if store is not None else MemoryStore()

    @property
    def token(self) -> str | None:
        return self._store.get(TOKEN_KEY) or None

    @property
    def user(self) -> User | None:
        raw = self._store.get(USER_KEY)
        if not raw:
            return None
        try:
            return user_from_dict(json.loads(raw))
        except json.JSONDecodeError:
            _LOGGER.warning("Stored user is not valid JSON; ignoring it")
            return None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def save(self, token: str, user: User | None) -> None:
        self._store.set(TOKEN_KEY, token)
        if user is None:
            self._store.delete(USER_KEY)
        else:
            self._store.set(USER_KEY, json.dumps(user_to_dict(user)))

    def clear(self) -> None:
        self._store.delete(TOKEN_KEY)
        self._store.delete(USER_KEY)
