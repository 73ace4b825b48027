"""Unit tests for the PayPal REST transport.

HTTP traffic is served by httpx.MockTransport; no network access.
"""

import json
from collections.abc import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio

from invoicing.shared.config import Settings
from invoicing.shared.errors import TransportError
from invoicing.transport.paypal_client import (
    PRODUCTION_BASE_URL,
    SANDBOX_BASE_URL,
    TOKEN_PATH,
    PayPalClient,
)

Handler = Callable[[httpx.Request], httpx.Response]
ClientFactory = Callable[..., PayPalClient]


@pytest.fixture
def paypal_settings() -> Settings:
    """Create test settings with sandbox credentials."""
    return Settings(paypal_client_id="client-id", paypal_client_secret="client-secret")


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest_asyncio.fixture
async def make_client() -> AsyncGenerator[ClientFactory, None]:
    """Build PayPal clients backed by MockTransport; their HTTP clients are closed afterwards."""
    http_clients: list[httpx.AsyncClient] = []

    def factory(
        settings: Settings, handler: Handler, clock: FakeClock | None = None
    ) -> PayPalClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        http_clients.append(http)
        return PayPalClient(settings, client=http, clock=clock or FakeClock())

    yield factory

    for http in http_clients:
        await http.aclose()


def token_response(expires_in: int = 32400) -> httpx.Response:
    return httpx.Response(200, json={"access_token": "token-1", "expires_in": expires_in})


def unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected request: {request.method} {request.url}")


class TestAvailability:
    @pytest.mark.asyncio
    async def test_available_with_credentials(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        assert make_client(paypal_settings, unreachable).is_available() is True

    @pytest.mark.asyncio
    async def test_not_available_without_secret(self, make_client: ClientFactory) -> None:
        settings = Settings(paypal_client_id="client-id", paypal_client_secret="")
        assert make_client(settings, unreachable).is_available() is False

    @pytest.mark.asyncio
    async def test_base_urls(self, paypal_settings: Settings, make_client: ClientFactory) -> None:
        assert make_client(paypal_settings, unreachable).base_url == SANDBOX_BASE_URL
        production = paypal_settings.model_copy(update={"paypal_environment": "PRODUCTION"})
        assert make_client(production, unreachable).base_url == PRODUCTION_BASE_URL

    @pytest.mark.asyncio
    async def test_aclose_closes_owned_client(self, paypal_settings: Settings) -> None:
        client = PayPalClient(paypal_settings)

        await client.aclose()

        assert client._client.is_closed is True


class TestAccessToken:
    @pytest.mark.asyncio
    async def test_requests_client_credentials_token(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return token_response()

        client = make_client(paypal_settings, handler)

        token = await client.get_access_token()

        assert token == "token-1"
        request = seen[0]
        assert str(request.url) == f"{SANDBOX_BASE_URL}{TOKEN_PATH}"
        assert request.method == "POST"
        assert request.content == b"grant_type=client_credentials"
        assert request.headers["Authorization"].startswith("Basic ")

    @pytest.mark.asyncio
    async def test_token_is_cached_until_margin(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return token_response(expires_in=3600)

        clock = FakeClock()
        client = make_client(paypal_settings, handler, clock)

        await client.get_access_token()
        clock.now += 3600 - 5 * 60 - 1
        await client.get_access_token()
        assert calls == 1

        clock.now += 2
        await client.get_access_token()
        assert calls == 2

    @pytest.mark.asyncio
    async def test_missing_credentials(self, make_client: ClientFactory) -> None:
        client = make_client(Settings(), lambda request: token_response())

        with pytest.raises(TransportError, match="credentials not configured"):
            await client.get_access_token()

    @pytest.mark.asyncio
    async def test_rejected_credentials(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_client"})

        client = make_client(paypal_settings, handler)

        with pytest.raises(TransportError) as exc_info:
            await client.get_access_token()

        assert str(exc_info.value) == "Failed to authenticate with PayPal API"
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == {"error": "invalid_client"}


class TestAuthenticatedRequest:
    @pytest.mark.asyncio
    async def test_post_with_bearer_token(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == TOKEN_PATH:
                return token_response()
            seen.append(request)
            return httpx.Response(201, json={"id": "INV2-AAAA"})

        client = make_client(paypal_settings, handler)

        result = await client.authenticated_request(
            "POST", "/v2/invoicing/invoices", {"detail": {"invoice_number": "INV-1"}}
        )

        assert result == {"id": "INV2-AAAA"}
        request = seen[0]
        assert request.headers["Authorization"] == "Bearer token-1"
        assert json.loads(request.content) == {"detail": {"invoice_number": "INV-1"}}

    @pytest.mark.asyncio
    async def test_query_params(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == TOKEN_PATH:
                return token_response()
            seen.append(request)
            return httpx.Response(200, json={"items": []})

        client = make_client(paypal_settings, handler)

        await client.authenticated_request(
            "GET", "/v2/invoicing/invoices", params={"page": 2, "page_size": 10}
        )

        assert seen[0].url.params["page"] == "2"
        assert seen[0].url.params["page_size"] == "10"

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_dict(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == TOKEN_PATH:
                return token_response()
            return httpx.Response(204)

        client = make_client(paypal_settings, handler)

        assert await client.authenticated_request("POST", "/v2/invoicing/invoices/X/send") == {}

    @pytest.mark.asyncio
    async def test_error_status_raises_with_body(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        error_body = {"name": "UNPROCESSABLE_ENTITY", "message": "The requested action could not be performed"}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == TOKEN_PATH:
                return token_response()
            return httpx.Response(422, json=error_body)

        client = make_client(paypal_settings, handler)

        with pytest.raises(TransportError) as exc_info:
            await client.authenticated_request("POST", "/v2/invoicing/invoices", {})

        assert exc_info.value.status_code == 422
        assert exc_info.value.body == error_body
        assert "status code 422" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error_becomes_transport_error(
        self, paypal_settings: Settings, make_client: ClientFactory
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == TOKEN_PATH:
                return token_response()
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(paypal_settings, handler)

        with pytest.raises(TransportError) as exc_info:
            await client.authenticated_request("GET", "/v2/invoicing/invoices")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_aclose_leaves_injected_client_open(self, paypal_settings: Settings) -> None:
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: token_response()))
        client = PayPalClient(paypal_settings, client=http)

        await client.aclose()

        assert http.is_closed is False
        await http.aclose()
