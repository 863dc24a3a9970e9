"""Resilient HTTP Transport — wraps httpx.AsyncClient with timeout, backoff, and error mapping.

Invariants:
    - Every request is bounded by the client timeout
    - Idempotent requests (reads, address minting lookups): transient errors
      (connection, timeout, 5xx) retried with exponential backoff + jitter
    - Non-idempotent requests (sends): exactly one attempt, never retried
    - All failures mapped to NetworkClientError (core/errors.py)

Design Decisions:
    - Wrapper over raw client: isolates retry logic from wallet/chain semantics
    - ±25% jitter on backoff: prevents thundering herd against a shared wallet RPC
    - A retried send could pay twice: the caller (settlement) owns send retries
"""

import asyncio
import random
import logging

import httpx

from swapbridge.core.errors import NetworkClientError

logger = logging.getLogger(__name__)


class ResilientHttpClient:
    """JSON-over-HTTP client with retry for idempotent calls."""

    def __init__(
        self,
        network: str,
        base_url: str = "",
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 10_000,
        auth: httpx.Auth | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.network = network
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            auth=auth,
            headers=headers,
            transport=transport,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def request_json(
        self,
        method: str,
        url: str,
        *,
        idempotent: bool,
        json: object | None = None,
        params: dict | None = None,
    ):
        """Send a request and decode the JSON body, retrying only if idempotent."""
        attempts = self.max_retries + 1 if idempotent else 1
        for attempt in range(attempts):
            try:
                response = await self.client.request(
                    method, url, json=json, params=params,
                )
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                error = NetworkClientError(str(e) or "request timed out", self.network, "timeout")
            except httpx.TransportError as e:
                error = NetworkClientError(str(e), self.network, "connection_error")
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                error = NetworkClientError(
                    f"HTTP {status} from {url}", self.network, "http_error",
                )
                if status < 500:
                    raise error
            except ValueError as e:
                raise NetworkClientError(
                    f"Invalid JSON from {url}: {e}", self.network, "decode_error",
                )

            if attempt + 1 >= attempts:
                raise error
            await self._backoff(attempt, error)

    async def _backoff(self, attempt: int, error: NetworkClientError) -> None:
        delay_ms = min(self.base_delay_ms * (2 ** attempt), self.max_delay_ms)
        delay_ms *= random.uniform(0.75, 1.25)
        logger.warning(
            f"{self.network} request failed ({error.error_type}), "
            f"retrying in {delay_ms:.0f}ms",
            extra={"attempt": attempt + 1, "network": self.network},
        )
        await asyncio.sleep(delay_ms / 1000)

    async def aclose(self) -> None:
        await self.client.aclose()
