"""Per-provider pool of keep-alive HTTP clients.

Each provider gets at most one ``httpx.AsyncClient``, created on first lookup
and reused by every request to that provider so TCP/TLS sessions survive
between calls.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

import httpx

from tts_compare.config import Settings
from tts_compare.providers import Provider, parse_provider

logger = logging.getLogger(__name__)


class ConnectionPoolRegistry:
    """Lazily created, provider-keyed keep-alive clients."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._limits = httpx.Limits(
            max_connections=settings.pool_max_connections,
            max_keepalive_connections=settings.pool_max_keepalive_connections,
            keepalive_expiry=settings.pool_keepalive_expiry_seconds,
        )
        self._timeout = httpx.Timeout(settings.pool_timeout_seconds)
        self._transport = transport
        self._clients: dict[Provider, httpx.AsyncClient] = {}
        self._lock = Lock()

    def _create_client(self, provider: Provider) -> httpx.AsyncClient:
        client = httpx.AsyncClient(
            limits=self._limits,
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.info(
            "Created %s client with keep-alive (max_connections=%s, keepalive=%s)",
            provider.value,
            self._limits.max_connections,
            self._limits.max_keepalive_connections,
        )
        return client

    def get(self, provider: Provider | str) -> httpx.AsyncClient:
        """Return the pooled client for ``provider``, creating it if absent."""

        key = parse_provider(provider)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = self._create_client(key)
                self._clients[key] = client
            return client

    def active_providers(self) -> list[Provider]:
        with self._lock:
            return [p for p in Provider if p in self._clients]

    async def destroy(self, provider: Provider | str) -> None:
        """Close ``provider``'s client and clear its slot. No-op if absent."""

        key = parse_provider(provider)
        with self._lock:
            client = self._clients.pop(key, None)
        if client is None:
            return
        await client.aclose()
        logger.info("%s client destroyed", key.value)

    async def destroy_all(self) -> None:
        for provider in Provider:
            await self.destroy(provider)
        logger.info("All provider clients destroyed")


__all__ = ["ConnectionPoolRegistry"]
