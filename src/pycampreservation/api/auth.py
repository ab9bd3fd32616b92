"""Authentication against the reservation backend."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import ApiError, AuthError, ValidationError
from ..models import User
from .base import BaseApi
from .const import LOGIN_ENDPOINT, ME_ENDPOINT
from .tokens import user_from_dict

_LOGGER = logging.getLogger(__name__)


class AuthApi(BaseApi):
    """Login, logout and session verification."""

    @property
    def token(self) -> str | None:
        return self._tokens.token

    @property
    def user(self) -> User | None:
        return self._tokens.user

    @property
    def is_authenticated(self) -> bool:
        return self._tokens.is_authenticated

    async def login(self, login: str, password: str) -> User:
        if not isinstance(login, str) or not login.strip():
            raise ValidationError("login is required.")
        if not isinstance(password, str) or not password:
            raise ValidationError("password is required.")
        _LOGGER.debug("Login started")
        try:
            data = await self._request_json(
                "POST",
                LOGIN_ENDPOINT,
                json={"login": login.strip(), "password": password},
            )
        except ApiError as exc:
            if exc.status in (400, 422):
                raise AuthError("Invalid login or password.", detail=exc.detail) from exc
            raise
        token, user = self._map_login(data)
        self._tokens.save(token, user)
        _LOGGER.debug("Login completed")
        return user

    def logout(self) -> None:
        self._tokens.clear()
        _LOGGER.debug("Logged out")

    async def verify(self) -> User | None:
        """Refresh the stored user from the backend; a rejected token signs out."""
        if not self._tokens.is_authenticated:
            return None
        try:
            data = await self._request_json("GET", ME_ENDPOINT, auth_required=True)
        except AuthError:
            return None
        user = user_from_dict(data)
        token = self._tokens.token
        if user is None or token is None:
            raise ApiError("Backend response included invalid user data.")
        self._tokens.save(token, user)
        return user

    def _map_login(self, data: Any) -> tuple[str, User]:
        if not isinstance(data, dict):
            raise ApiError("Backend response included invalid login data.")
        token = data.get("access_token")
        if not isinstance(token, str) or not token:
            raise ApiError("Backend response missing access_token.")
        user = user_from_dict(data.get("user"))
        if user is None:
            raise ApiError("Backend response included invalid user data.")
        return token, user
