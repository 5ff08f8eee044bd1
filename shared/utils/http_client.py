"""
Resource Actions - HTTP Service Client
======================================

Async HTTP client for talking to the managing service's REST API.
Handles bearer-token auth, TLS verification, timeouts and correlation ID
propagation. Status handling is left to the caller.

Usage:
    from shared.utils.http_client import ServiceClient, ServiceClientConfig

    client = ServiceClient(
        base_url="https://argocd.example.com",
        config=ServiceClientConfig(auth_token="..."),
    )
    response = await client.get("/api/v1/applications/guestbook/managed-resources")
"""

import httpx
from typing import Any, Optional
from dataclasses import dataclass

from shared.constants import ApiPaths
from shared.utils.logging import get_logger, get_correlation_id

logger = get_logger(__name__)


@dataclass
class ServiceClientConfig:
    """Configuration for the HTTP service client."""
    timeout_seconds: float = 30.0
    auth_token: str = ""
    verify_tls: bool = True
    user_agent: str = "resource-actions/0.1.0"


class ServiceClient:
    """
    Async HTTP client for the managing service.

    Features:
    - Bearer-token authentication
    - Automatic correlation ID propagation
    - Connection pooling through a lazily created httpx.AsyncClient
    - Async context manager support

    Example:
        async with ServiceClient("https://argocd.example.com") as client:
            response = await client.get("/api/v1/applications/guestbook/managed-resources")
            response.raise_for_status()
    """

    def __init__(
        self,
        base_url: str,
        config: Optional[ServiceClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the service client.

        Args:
            base_url: Base URL of the managing service
            config: Optional configuration overrides
            transport: Optional httpx transport, used to stub the server in tests
        """
        self.base_url = base_url.rstrip("/")
        self.config = config or ServiceClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                verify=self.config.verify_tls,
                follow_redirects=True,
                transport=self._transport
            )
        return self._client

    def _build_headers(self, extra_headers: Optional[dict] = None) -> dict:
        """Build request headers with auth and correlation ID."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }

        if self.config.auth_token:
            headers["Authorization"] = f"Bearer {self.config.auth_token}"

        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        if extra_headers:
            headers.update(extra_headers)

        return headers

    async def get(
        self,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None
    ) -> httpx.Response:
        """
        Make a GET request.

        Args:
            path: API path (e.g., "/api/v1/applications/guestbook/managed-resources")
            params: Optional query parameters
            headers: Optional additional headers

        Returns:
            httpx.Response object
        """
        client = await self._get_client()

        logger.debug(
            f"GET {self.base_url}{path}",
            extra={"params": params}
        )

        response = await client.get(
            path,
            params=params,
            headers=self._build_headers(headers)
        )

        logger.debug(
            f"Response: {response.status_code}",
            extra={"path": path, "status": response.status_code}
        )

        return response

    async def post(
        self,
        path: str,
        data: Any = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None
    ) -> httpx.Response:
        """
        Make a POST request with a JSON body.

        Args:
            path: API path
            data: JSON-serializable payload; a bare string is sent as a JSON string
            params: Optional query parameters
            headers: Optional additional headers

        Returns:
            httpx.Response object
        """
        client = await self._get_client()

        logger.debug(
            f"POST {self.base_url}{path}",
            extra={"params": params}
        )

        response = await client.post(
            path,
            json=data,
            params=params,
            headers=self._build_headers(headers)
        )

        logger.debug(
            f"Response: {response.status_code}",
            extra={"path": path, "status": response.status_code}
        )

        return response

    async def health_check(self) -> bool:
        """
        Check if the managing service is reachable and healthy.

        Returns:
            True if the service responds with 200, False otherwise
        """
        try:
            response = await self.get(ApiPaths.HEALTH)
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(
                f"Health check failed for {self.base_url}",
                extra={"error": str(e)}
            )
            return False

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ServiceClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

