"""Gateway HTTP client — status polls, registration and the event stream.

Provides an async HTTP client for the transaction gateway:
- GET  {base}/tx/status/{tx_hash} — Query transaction status
- GET  {base}/tx/stream/{tx_hash} — Server-sent event stream of state changes
- POST {base}/tx/register — Ask the gateway to start tracking a transaction
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING

import httpx

from tx_watcher.errors.gateway_errors import GatewayError, StreamError
from tx_watcher.errors.watcher_errors import MalformedEventError
from tx_watcher.gateway.models import TxStatus

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from tx_watcher.config.settings import GatewayConfig

logger = logging.getLogger(__name__)


def _auth_headers(token: str | None) -> dict[str, str]:
    if token:
        return {"Authorization": f"Bearer {token}"}
    return {}


class GatewayClient:
    """Async HTTP client for the transaction gateway API.

    The bearer token is passed per call rather than fixed at connect time,
    because the watcher's credential can change between connection attempts.

    Usage::

        gateway = GatewayClient(config)
        await gateway.connect()
        try:
            status = await gateway.get_status(tx_hash, token=jwt)
        finally:
            await gateway.close()
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            config: Gateway configuration (url, api prefix, api key, timeout).
            transport: Optional httpx transport, mainly for tests.
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        if self._client is not None:
            return
        headers: dict[str, str] = {}
        if self._config.api_key:
            headers["X-API-Key"] = self._config.api_key

        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_status(self, tx_hash: str, *, token: str | None = None) -> TxStatus | None:
        """Query the gateway for the current status of a transaction.

        Args:
            tx_hash: The 64-character hex transaction hash.
            token: Bearer token, if the user is signed in.

        Returns:
            The current TxStatus, or None if the gateway does not know the
            transaction yet (404, expected briefly after submission).

        Raises:
            GatewayError: On transport errors, non-2xx responses or
                undecodable bodies.
        """
        client = self._ensure_connected()

        try:
            response = await client.get(f"/tx/status/{tx_hash}", headers=_auth_headers(token))
        except httpx.HTTPError as exc:
            raise GatewayError(f"Gateway status request failed: {exc}") from exc

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            self._raise_for_status(response, "status")

        try:
            return TxStatus.from_dict(response.json(), tx_hash=tx_hash)
        except (ValueError, MalformedEventError) as exc:
            raise GatewayError(f"Gateway returned an invalid status body: {exc}") from exc

    async def register_transaction(
        self,
        tx_hash: str,
        tx_type: str,
        *,
        token: str | None = None,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Register a submitted transaction so the gateway starts tracking it.

        Raises:
            GatewayError: On HTTP or API errors.
        """
        client = self._ensure_connected()

        body: dict[str, object] = {"tx_hash": tx_hash, "tx_type": tx_type}
        if metadata:
            body["metadata"] = metadata

        try:
            response = await client.post("/tx/register", json=body, headers=_auth_headers(token))
        except httpx.HTTPError as exc:
            raise GatewayError(f"Gateway registration failed: {exc}") from exc

        if response.status_code not in (200, 201, 202):
            self._raise_for_status(response, "register")

    @contextlib.asynccontextmanager
    async def stream(
        self, tx_hash: str, *, token: str | None = None
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open the event stream for a transaction.

        Yields an async iterator over raw body chunks. The connection is
        closed when the context exits.

        Raises:
            StreamError: If the connection fails or the gateway answers
                with a non-2xx status.
        """
        client = self._ensure_connected()
        headers = {
            "Accept": "text/event-stream",
            "Cache-Control": "no-cache",
            **_auth_headers(token),
        }
        # No read timeout: the gateway may stay silent between state changes.
        timeout = httpx.Timeout(self._config.timeout, read=None)
        request = client.build_request(
            "GET", f"/tx/stream/{tx_hash}", headers=headers, timeout=timeout
        )

        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise StreamError(f"Stream connection failed: {exc}") from exc

        try:
            if not response.is_success:
                await response.aread()
                raise StreamError(
                    f"Stream connection failed: {response.status_code}",
                    status_code=response.status_code,
                )
            logger.debug("Stream opened for %s", tx_hash[:16])
            yield response.aiter_bytes()
        finally:
            await response.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            msg = "Gateway client not connected. Call connect() first."
            raise GatewayError(msg, status_code=500)
        return self._client

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        """Raise a GatewayError from a non-2xx response."""
        status = response.status_code
        try:
            body = response.json()
            detail = body.get("error", body.get("detail", response.text))
        except Exception:
            detail = response.text

        error_map = {
            401: "Gateway authentication failed",
            403: "Gateway access forbidden",
            429: "Gateway rate limit exceeded",
        }

        message = error_map.get(status, f"Gateway {operation} failed ({status}): {detail}")
        raise GatewayError(message, status_code=status)
