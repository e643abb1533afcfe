"""
Authenticated HTTP transport for the market data API.

Wraps a pooled ``httpx.AsyncClient`` that attaches the credential headers to
every request and turns transport failures and non-2xx responses into
:class:`NetworkError`. No retries are attempted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from alpacadata.core.config.settings import AlpacaConfig, CredentialsConfig
from alpacadata.core.exceptions.base import AuthenticationError, ConfigurationError, NetworkError
from alpacadata.core.logging import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "APCA-API-KEY-ID"
SECRET_KEY_HEADER = "APCA-API-SECRET-KEY"


@dataclass
class HttpConfig:
    """Configuration for HTTP client behavior."""

    timeout: float = 30.0
    user_agent: str = "alpacadata/0.1.0"
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate HTTP configuration."""
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")

    @classmethod
    def from_config(cls, config: AlpacaConfig) -> "HttpConfig":
        return cls(timeout=config.http.timeout, user_agent=config.http.user_agent)


@dataclass(frozen=True)
class AlpacaAuth:
    """Credential headers for the data API."""

    api_key: str
    secret_key: str

    def __post_init__(self):
        if not self.api_key.strip() or not self.secret_key.strip():
            raise ConfigurationError("Alpaca API key or secret key not found", setting="credentials")

    def __repr__(self) -> str:
        return "AlpacaAuth(api_key='***', secret_key='***')"

    @classmethod
    def from_credentials(cls, credentials: CredentialsConfig) -> "AlpacaAuth":
        return cls(api_key=credentials.api_key, secret_key=credentials.secret_key)

    def get_auth_headers(self) -> Dict[str, str]:
        """Get authentication headers for HTTP requests."""
        return {
            API_KEY_HEADER: self.api_key,
            SECRET_KEY_HEADER: self.secret_key,
        }


class HttpClient:
    """
    Async HTTP client issuing authenticated GET requests.

    Usable as an async context manager; the underlying ``httpx.AsyncClient``
    is created lazily and shared by every request until :meth:`close`.
    """

    def __init__(
        self,
        auth: AlpacaAuth,
        http_config: Optional[HttpConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize HTTP client with configuration."""
        self.auth = auth
        self.http_config = http_config or HttpConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(
        cls,
        config: AlpacaConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "HttpClient":
        """Build a client, failing before any request when credentials are missing."""
        credentials = config.require_credentials()
        return cls(
            AlpacaAuth.from_credentials(credentials),
            HttpConfig.from_config(config),
            transport=transport,
        )

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            headers = {
                "User-Agent": self.http_config.user_agent,
                "accept": "application/json",
                **self.http_config.headers,
                **self.auth.get_auth_headers(),
            }
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.http_config.timeout),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(self, url: str) -> httpx.Response:
        """Execute a GET request against an absolute URL."""
        client = await self._ensure_client()
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Request failed with {type(e).__name__}: {e}")
            raise NetworkError(
                f"Request to {url} failed: {e}",
                details={"url": url, "exception": type(e).__name__},
            ) from e

        logger.debug(f"REQUEST: {url} STATUS: {response.status_code}")
        self._raise_for_status(url, response)
        return response

    async def get_text(self, url: str) -> str:
        """Execute a GET request and return the response body as text."""
        response = await self.get(url)
        return response.text

    @staticmethod
    def _raise_for_status(url: str, response: httpx.Response) -> None:
        if response.is_success:
            return

        details = {"url": url, "body": response.text[:200]}
        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Provider rejected credentials: {response.status_code}",
                status_code=response.status_code,
                details=details,
            )
        raise NetworkError(
            f"HTTP request failed: {response.status_code}",
            status_code=response.status_code,
            details=details,
        )


__all__ = ["API_KEY_HEADER", "SECRET_KEY_HEADER", "AlpacaAuth", "HttpClient", "HttpConfig"]
