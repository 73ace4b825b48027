"""Abstract base class for invoicing transports.

The invoice manager only needs "send an authenticated request, get JSON back or a
TransportError". Keeping that behind an interface lets tests substitute a fake
and keeps the OAuth2 details out of the orchestration code.

Based on Strategy Pattern:
https://refactoring.guru/design-patterns/strategy/python
"""

from abc import ABC, abstractmethod
from typing import Any, Literal

HttpMethod = Literal["GET", "POST"]


class InvoicingTransport(ABC):
    """Authenticated JSON transport to the invoicing REST API."""

    @abstractmethod
    async def authenticated_request(
        self,
        method: HttpMethod,
        path: str,
        body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send an authenticated request.

        Args:
            method: HTTP method
            path: API path, e.g. "/v2/invoicing/invoices"
            body: JSON body for POST requests
            params: Query string parameters

        Returns:
            Decoded JSON response ({} for empty bodies)

        Raises:
            TransportError: If authentication or the request fails
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether credentials are configured.

        Returns:
            True if the transport can authenticate
        """
        pass

    async def aclose(self) -> None:
        """Release network resources."""
