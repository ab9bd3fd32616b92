"""Shared request layer for the backend APIs."""

from __future__ import annotations

import logging
from typing import Any, Literal

import aiohttp

from ..exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    ServerValidationError,
    ServiceUnavailableError,
    ValidationError,
)
from ..exceptions import TimeoutError as RequestTimeoutError
from ..field_errors import format_errors, parse_validation_errors
from ..models import DownloadedFile
from ..util import filename_from_content_disposition
from .const import DEFAULT_HEADERS, NETWORK_ERROR_MESSAGE, SESSION_EXPIRED_MESSAGE
from .tokens import TokenStore

_LOGGER = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=30)

Expect = Literal["json", "text", "bytes", "none"]


class BaseApi:
    """Base class for backend API groups."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        base_url: str | None = None,
        api_uri: str | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
        retry_count: int = 0,
        tokens: TokenStore | None = None,
    ) -> None:
        if session is None:
            raise ValidationError("Session is required.")
        self._session = session
        self._base_url = self._normalize_base_url(base_url)
        self._api_uri = self._normalize_api_uri(api_uri)
        self._timeout = timeout or _DEFAULT_TIMEOUT
        self._retry_count = max(0, retry_count)
        self._tokens = tokens if tokens is not None else TokenStore()

    @property
    def tokens(self) -> TokenStore:
        return self._tokens

    def _build_url(self, path: str) -> str:
        if not isinstance(path, str) or not path:
            raise ValidationError("Path must be a non-empty string.")
        if path.startswith("http://") or path.startswith("https://"):
            raise ValidationError("Use relative paths when building backend requests.")
        if self._base_url is None:
            raise ValidationError("base_url is required to build backend requests.")
        normalized_path = path if path.startswith("/") else f"/{path}"
        return f"{self._base_url}{self._api_uri}{normalized_path}"

    def _build_headers(self, *, auth_required: bool) -> dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        token = self._tokens.token
        if auth_required and token is None:
            raise AuthError("Authentication required.", user_message=SESSION_EXPIRED_MESSAGE)
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        auth_required: bool = False,
        expected_status: int | None = None,
        **kwargs: Any,
    ) -> Any:
        url = self._build_url(path)
        headers = self._build_headers(auth_required=auth_required)
        return await self._request(
            method,
            url,
            expect="json",
            expected_status=expected_status,
            headers=headers,
            **kwargs,
        )

    async def _request_none(
        self,
        method: str,
        path: str,
        *,
        auth_required: bool = False,
        **kwargs: Any,
    ) -> None:
        url = self._build_url(path)
        headers = self._build_headers(auth_required=auth_required)
        await self._request(method, url, expect="none", headers=headers, **kwargs)

    async def _request_file(
        self,
        method: str,
        path: str,
        *,
        default_filename: str,
        auth_required: bool = True,
        **kwargs: Any,
    ) -> DownloadedFile:
        url = self._build_url(path)
        headers = self._build_headers(auth_required=auth_required)
        content, content_type, disposition = await self._request(
            method,
            url,
            expect="bytes",
            headers=headers,
            **kwargs,
        )
        return DownloadedFile(
            filename=filename_from_content_disposition(disposition) or default_filename,
            content_type=content_type,
            content=content,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        expect: Expect,
        expected_status: int | None = None,
        **kwargs: Any,
    ) -> Any:
        retries = self._retry_count if method.upper() == "GET" else 0
        attempts = retries + 1
        timeout = kwargs.pop("timeout", None) or self._timeout
        for attempt in range(attempts):
            try:
                async with self._session.request(
                    method,
                    url,
                    timeout=timeout,
                    **kwargs,
                ) as response:
                    await self._raise_for_status(response)
                    if expected_status is not None and response.status != expected_status:
                        raise ApiError(
                            f"Expected status {expected_status}, got {response.status}.",
                            status=response.status,
                        )
                    return await self._read_body(response, expect)
            except ServiceUnavailableError:
                if attempt >= attempts - 1:
                    raise
                _LOGGER.warning("%s %s unavailable; retrying (%d/%d)", method, url, attempt + 1, retries)
            except TimeoutError as exc:
                if attempt >= attempts - 1:
                    raise RequestTimeoutError(
                        "Request timed out.",
                        user_message=NETWORK_ERROR_MESSAGE,
                    ) from exc
            except aiohttp.ClientError as exc:
                if attempt >= attempts - 1:
                    raise NetworkError(
                        "Network request failed.",
                        user_message=NETWORK_ERROR_MESSAGE,
                    ) from exc
        raise NetworkError("Request failed.", user_message=NETWORK_ERROR_MESSAGE)

    async def _read_body(self, response: aiohttp.ClientResponse, expect: Expect) -> Any:
        if expect == "none":
            return None
        if expect == "text":
            return await response.text()
        if expect == "bytes":
            headers = response.headers
            return (
                await response.read(),
                headers.get("Content-Type"),
                headers.get("Content-Disposition"),
            )
        try:
            return await response.json()
        except (aiohttp.ContentTypeError, ValueError) as exc:
            raise ApiError("Response did not contain valid JSON.", status=response.status) from exc

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        status = response.status
        if 200 <= status < 300:
            return
        if status == 401:
            if self._tokens.is_authenticated:
                _LOGGER.warning("Session rejected by the backend; signing out")
            self._tokens.clear()
            raise AuthError("Authentication failed.", user_message=SESSION_EXPIRED_MESSAGE)
        if status == 403:
            raise AuthError("Access denied.", error_code="forbidden")
        body = await self._safe_json(response)
        if status == 422:
            errors = parse_validation_errors(body)
            raise ServerValidationError(
                "Backend rejected the request.",
                field_errors=errors,
                detail=format_errors(errors) or None,
            )
        message = self._detail_message(body)
        if status == 404:
            raise NotFoundError(message or "Resource not found.", status=status)
        if status == 429 or status >= 500:
            raise ServiceUnavailableError(
                f"Backend request failed with status {status}.",
                status=status,
                detail=message,
                user_message=NETWORK_ERROR_MESSAGE,
            )
        raise ApiError(
            message or f"Backend request failed with status {status}.",
            status=status,
        )

    async def _safe_json(self, response: aiohttp.ClientResponse) -> Any:
        try:
            return await response.json()
        except (aiohttp.ContentTypeError, ValueError):
            return None

    def _detail_message(self, body: Any) -> str | None:
        if not isinstance(body, dict):
            return None
        detail = body.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail.strip()
        if isinstance(detail, dict):
            message = detail.get("error") or detail.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
        return None

    def _normalize_base_url(self, base_url: str | None) -> str | None:
        if base_url is None:
            return None
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValidationError("base_url must be a non-empty string.")
        return base_url.strip().rstrip("/")

    def _normalize_api_uri(self, api_uri: str | None) -> str:
        if api_uri is None:
            return ""
        if not isinstance(api_uri, str):
            raise ValidationError("api_uri must be a string.")
        normalized = api_uri.strip().strip("/")
        if not normalized:
            return ""
        return f"/{normalized}"

    def _require_id(self, value: Any, field_name: str) -> int:
        if isinstance(value, bool):
            raise ValidationError(f"{field_name} must be a positive integer.")
        try:
            number = int(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"{field_name} must be a positive integer.") from exc
        if number <= 0:
            raise ValidationError(f"{field_name} must be a positive integer.")
        return number
