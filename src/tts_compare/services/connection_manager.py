"""Single entry point for provider connections."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import httpx

from tts_compare.config import Settings, load_settings
from tts_compare.providers import Provider
from tts_compare.services.connection_pool import ConnectionPoolRegistry
from tts_compare.services.warmup import WarmupCoordinator, WarmupReport, WarmupResult

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the client registry and the warmup coordinator.

    Built once by the application factory and shared through ``app.state``;
    TTS request code should obtain clients via :meth:`get_connection` so that
    it reuses the sessions opened by warmup.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings_loader: Callable[[], Settings] = load_settings,
    ) -> None:
        self._settings_loader = settings_loader
        self.registry = ConnectionPoolRegistry(settings, transport=transport)
        self.coordinator = WarmupCoordinator(
            self.registry,
            timeout=settings.warmup_timeout_seconds,
            settings_loader=settings_loader,
        )

    def get_connection(self, provider: Provider | str) -> httpx.AsyncClient:
        return self.registry.get(provider)

    def configured_providers(self) -> list[Provider]:
        return self._settings_loader().configured_providers()

    def connected_providers(self) -> list[Provider]:
        return self.registry.active_providers()

    async def warmup_one(self, provider: Provider | str) -> WarmupResult:
        return await self.coordinator.warmup_one(provider)

    async def warmup_all(self) -> WarmupReport:
        return await self.coordinator.warmup_all()

    async def destroy(self, provider: Provider | str) -> None:
        await self.registry.destroy(provider)

    async def destroy_all(self) -> None:
        await self.registry.destroy_all()

    async def shutdown(self) -> None:
        """Release every pooled connection. Safe to call more than once."""

        logger.info("Shutting down provider connections")
        await self.registry.destroy_all()


__all__ = ["ConnectionManager"]
