"""PayPal REST transport with OAuth2 client-credentials authentication.

Access tokens are cached in-process and refreshed when they are within five
minutes of expiry. No retries: a failed call surfaces as TransportError.

See: https://developer.paypal.com/api/rest/authentication/
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from invoicing.shared.config import Settings
from invoicing.shared.errors import TransportError
from invoicing.transport.base import HttpMethod, InvoicingTransport

logger = logging.getLogger(__name__)

SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"
PRODUCTION_BASE_URL = "https://api-m.paypal.com"
TOKEN_PATH = "/v1/oauth2/token"
TOKEN_EXPIRY_MARGIN_SECONDS = 5 * 60


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class PayPalClient(InvoicingTransport):
    """Async PayPal REST client.

    Requires APP_PAYPAL_CLIENT_ID and APP_PAYPAL_CLIENT_SECRET.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize PayPal client.

        Args:
            settings: Application settings with PayPal credentials
            client: Preconfigured HTTP client (tests pass one backed by MockTransport)
            clock: Monotonic seconds, used for token expiry
        """
        self.settings = settings
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.paypal_timeout_seconds)
        self._clock = clock
        self._access_token: str | None = None
        self._token_expires_at = 0.0

    @property
    def environment(self) -> str:
        return self.settings.paypal_environment

    @property
    def base_url(self) -> str:
        if self.environment == "PRODUCTION":
            return PRODUCTION_BASE_URL
        return SANDBOX_BASE_URL

    def is_available(self) -> bool:
        """Check if PayPal credentials are configured.

        Returns:
            True if both client id and secret are set
        """
        return bool(self.settings.paypal_client_id and self.settings.paypal_client_secret)

    async def get_access_token(self) -> str:
        """Return a valid access token, requesting a new one when needed.

        Returns:
            Bearer token

        Raises:
            TransportError: If credentials are missing or PayPal rejects them
        """
        if self._access_token and self._clock() < self._token_expires_at:
            return self._access_token

        if not self.is_available():
            raise TransportError(
                "PayPal credentials not configured. "
                "Set APP_PAYPAL_CLIENT_ID and APP_PAYPAL_CLIENT_SECRET."
            )

        try:
            response = await self._client.post(
                f"{self.base_url}{TOKEN_PATH}",
                data={"grant_type": "client_credentials"},
                auth=(self.settings.paypal_client_id, self.settings.paypal_client_secret),
                headers={"Accept": "application/json", "Accept-Language": "en_US"},
            )
        except httpx.HTTPError as e:
            logger.error(f"PayPal authentication request failed: {e}")
            raise TransportError(f"Failed to authenticate with PayPal API: {e}") from e

        if response.is_error:
            body = _error_body(response)
            logger.error(f"PayPal authentication failed ({response.status_code}): {body}")
            raise TransportError(
                "Failed to authenticate with PayPal API",
                status_code=response.status_code,
                body=body,
            )

        data = response.json()
        self._access_token = data["access_token"]
        expires_in = float(data.get("expires_in", 0))
        self._token_expires_at = self._clock() + expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        logger.info(f"PayPal authentication successful ({self.environment})")
        return self._access_token

    async def authenticated_request(
        self,
        method: HttpMethod,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request with a bearer token.

        Args:
            method: HTTP method
            path: API path
            body: JSON body
            params: Query string parameters

        Returns:
            Decoded JSON response, {} when PayPal returns no content

        Raises:
            TransportError: On authentication failure, network error or non-2xx status
        """
        token = await self.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Accept-Language": "en_US",
        }

        try:
            response = await self._client.request(
                method,
                f"{self.base_url}{path}",
                json=body,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"PayPal API request failed: {method} {path}: {e}")
            raise TransportError(f"PayPal API request failed: {e}") from e

        if response.is_error:
            error_body = _error_body(response)
            logger.error(f"PayPal API request failed: {method} {path}: {error_body}")
            message = f"Request failed with status code {response.status_code}"
            if isinstance(error_body, dict) and error_body.get("message"):
                message = f"{message}: {error_body['message']}"
            raise TransportError(message, status_code=response.status_code, body=error_body)

        if not response.content:
            return {}
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
