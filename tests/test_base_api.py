from __future__ import annotations

import asyncio

import aiohttp
import pytest

from pycampreservation.api.base import BaseApi
from pycampreservation.api.const import NETWORK_ERROR_MESSAGE
from pycampreservation.api.tokens import TokenStore
from pycampreservation.exceptions import (
    ApiError,
    AuthError,
    NetworkError,
    NotFoundError,
    ServerValidationError,
    ServiceUnavailableError,
    TimeoutError,
    ValidationError,
)
from pycampreservation.models import User


class _FakeResponse:
    def __init__(
        self,
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
        json_data: object | None = None,
        text_data: str = "",
        body: bytes = b"",
        json_error: Exception | None = None,
    ) -> None:
        self.status = status
        self.headers = headers or {}
        self._json_data = json_data
        self._text_data = text_data
        self._body = body
        self._json_error = json_error

    async def json(self) -> object:
        if self._json_error is not None:
            raise self._json_error
        return self._json_data

    async def text(self) -> str:
        return self._text_data

    async def read(self) -> bytes:
        return self._body


class _FakeRequestContext:
    def __init__(self, response: _FakeResponse) -> None:
        self._response = response

    async def __aenter__(self) -> _FakeResponse:
        return self._response

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class _SequenceSession:
    def __init__(self, responses: list[object]) -> None:
        self._responses = responses
        self.calls = 0
        self.requests: list[dict[str, object]] = []

    def request(self, method: str, url: str, **kwargs) -> _FakeRequestContext:
        self.requests.append({"method": method, "url": url, "kwargs": kwargs})
        self.calls += 1
        response = self._responses[self.calls - 1]
        if isinstance(response, Exception):
            raise response
        return _FakeRequestContext(response)


def _api(session: object, *, retry_count: int = 0, tokens: TokenStore | None = None) -> BaseApi:
    return BaseApi(
        session,  # type: ignore[arg-type]
        base_url="https://example/",
        api_uri=None,
        retry_count=retry_count,
        tokens=tokens,
    )


def _signed_in_tokens() -> TokenStore:
    tokens = TokenStore()
    tokens.save("secret", User(id=1, login="anna"))
    return tokens


def test_build_url_validation() -> None:
    api = _api(_SequenceSession([]))
    assert api._build_url("/api/auth/me") == "https://example/api/auth/me"
    assert api._build_url("api/auth/me") == "https://example/api/auth/me"
    with pytest.raises(ValidationError):
        api._build_url("")
    with pytest.raises(ValidationError):
        api._build_url("https://example.com/absolute")


def test_build_url_requires_base_url() -> None:
    api = BaseApi(_SequenceSession([]), base_url=None)  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        api._build_url("/api/reservations")


def test_normalize_api_uri() -> None:
    api = _api(_SequenceSession([]))
    assert api._normalize_api_uri(None) == ""
    assert api._normalize_api_uri(" /v1/ ") == "/v1"
    assert api._normalize_api_uri("/") == ""


def test_build_headers_adds_bearer_token() -> None:
    api = _api(_SequenceSession([]), tokens=_signed_in_tokens())
    headers = api._build_headers(auth_required=True)
    assert headers["Authorization"] == "Bearer secret"


def test_build_headers_requires_token_when_auth_required() -> None:
    api = _api(_SequenceSession([]))
    assert "Authorization" not in api._build_headers(auth_required=False)
    with pytest.raises(AuthError):
        api._build_headers(auth_required=True)


def test_require_id() -> None:
    api = _api(_SequenceSession([]))
    assert api._require_id("7", "reservation_id") == 7
    for value in (True, 0, -1, "x", None):
        with pytest.raises(ValidationError):
            api._require_id(value, "reservation_id")


@pytest.mark.asyncio
async def test_request_json_returns_payload() -> None:
    session = _SequenceSession([_FakeResponse(json_data={"ok": True})])
    assert await _api(session)._request_json("GET", "/api/ping") == {"ok": True}
    assert session.requests[0]["method"] == "GET"


@pytest.mark.asyncio
async def test_invalid_json_raises_api_error() -> None:
    session = _SequenceSession([_FakeResponse(json_error=ValueError("bad json"))])
    with pytest.raises(ApiError):
        await _api(session)._request_json("GET", "/api/ping")


@pytest.mark.asyncio
async def test_401_clears_session() -> None:
    tokens = _signed_in_tokens()
    session = _SequenceSession([_FakeResponse(status=401)])
    with pytest.raises(AuthError):
        await _api(session, tokens=tokens)._request_json("GET", "/api/reservations/my", auth_required=True)
    assert tokens.token is None
    assert tokens.user is None


@pytest.mark.asyncio
async def test_403_keeps_session() -> None:
    tokens = _signed_in_tokens()
    session = _SequenceSession([_FakeResponse(status=403)])
    with pytest.raises(AuthError) as excinfo:
        await _api(session, tokens=tokens)._request_json("GET", "/api/reservations/my", auth_required=True)
    assert excinfo.value.error_code == "forbidden"
    assert tokens.token == "secret"


@pytest.mark.asyncio
async def test_422_raises_server_validation_error() -> None:
    body = {
        "detail": [
            {"loc": ["body", "step1", "parents", 0, "email"], "msg": "value is not a valid email"},
        ]
    }
    session = _SequenceSession([_FakeResponse(status=422, json_data=body)])
    with pytest.raises(ServerValidationError) as excinfo:
        await _api(session)._request_json("POST", "/api/reservations/", json={})
    errors = excinfo.value.field_errors
    assert [(error.field, error.message) for error in errors] == [
        ("step1.parents.0.email", "value is not a valid email")
    ]


@pytest.mark.asyncio
async def test_404_raises_not_found_with_detail() -> None:
    session = _SequenceSession([_FakeResponse(status=404, json_data={"detail": "Reservation not found"})])
    with pytest.raises(NotFoundError) as excinfo:
        await _api(session)._request_json("GET", "/api/reservations/9")
    assert str(excinfo.value) == "Reservation not found"
    assert excinfo.value.status == 404


@pytest.mark.asyncio
async def test_other_client_errors_raise_api_error() -> None:
    session = _SequenceSession([_FakeResponse(status=409, json_data={"detail": {"error": "Conflict"}})])
    with pytest.raises(ApiError) as excinfo:
        await _api(session)._request_json("POST", "/api/reservations/", json={})
    assert excinfo.value.status == 409
    assert str(excinfo.value) == "Conflict"


@pytest.mark.asyncio
async def test_get_retries_on_service_unavailable() -> None:
    session = _SequenceSession(
        [
            _FakeResponse(status=503),
            _FakeResponse(json_data=[]),
        ]
    )
    assert await _api(session, retry_count=1)._request_json("GET", "/api/reservations/") == []
    assert session.calls == 2


@pytest.mark.asyncio
async def test_post_is_never_retried() -> None:
    session = _SequenceSession(
        [
            _FakeResponse(status=502),
            _FakeResponse(json_data={"id": 1}),
        ]
    )
    with pytest.raises(ServiceUnavailableError) as excinfo:
        await _api(session, retry_count=3)._request_json("POST", "/api/reservations/", json={})
    assert session.calls == 1
    assert excinfo.value.user_message == NETWORK_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_network_error_is_wrapped() -> None:
    session = _SequenceSession([aiohttp.ClientError("boom")])
    with pytest.raises(NetworkError) as excinfo:
        await _api(session)._request_json("GET", "/api/ping")
    assert excinfo.value.user_message == NETWORK_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_timeout_is_wrapped_after_retries() -> None:
    session = _SequenceSession([asyncio.TimeoutError(), asyncio.TimeoutError()])
    with pytest.raises(TimeoutError):
        await _api(session, retry_count=1)._request_json("GET", "/api/ping")
    assert session.calls == 2


@pytest.mark.asyncio
async def test_request_file_uses_content_disposition() -> None:
    session = _SequenceSession(
        [
            _FakeResponse(
                headers={
                    "Content-Type": "application/pdf",
                    "Content-Disposition": 'attachment; filename="umowa_R-1.pdf"',
                },
                body=b"%PDF-1.4",
            )
        ]
    )
    api = _api(session, tokens=_signed_in_tokens())
    downloaded = await api._request_file("GET", "/api/contracts/1", default_filename="umowa_1.pdf")
    assert downloaded.filename == "umowa_R-1.pdf"
    assert downloaded.content_type == "application/pdf"
    assert downloaded.content == b"%PDF-1.4"
