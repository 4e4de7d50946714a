"""Connection warmup for TTS providers.

A warmup sends each provider a request with empty text through its pooled
client. The provider usually rejects it, which is fine: the point is to pay
the DNS + TCP + TLS cost before a user is waiting on real audio.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx

from tts_compare.config import Settings, load_settings
from tts_compare.providers import (
    Provider,
    UnknownProviderError,
    get_provider_spec,
    parse_provider,
)
from tts_compare.services.connection_pool import ConnectionPoolRegistry

logger = logging.getLogger(__name__)

NO_API_KEY_ERROR = "No valid API key configured"
UNKNOWN_PROVIDER_ERROR = "Unknown provider"


@dataclass(frozen=True)
class WarmupResult:
    """Outcome of a single provider warmup.

    ``elapsed_ms`` is ``None`` when no request was attempted (unknown
    provider or missing credential). ``status_code`` is whatever the provider
    answered; any status counts as a successful warmup.
    """

    provider: str
    success: bool
    elapsed_ms: Optional[int] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    def asdict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "provider": self.provider,
            "success": self.success,
        }
        if self.elapsed_ms is not None:
            payload["elapsedMs"] = self.elapsed_ms
        if self.error is not None:
            payload["error"] = self.error
        if self.status_code is not None:
            payload["statusCode"] = self.status_code
        return payload


@dataclass(frozen=True)
class WarmupReport:
    results: tuple[WarmupResult, ...]
    total_elapsed_ms: int

    @property
    def succeeded(self) -> list[str]:
        return [r.provider for r in self.results if r.success]

    def asdict(self) -> dict[str, Any]:
        return {
            "results": [result.asdict() for result in self.results],
            "totalTimeMs": self.total_elapsed_ms,
        }


def _elapsed_ms(started: float) -> int:
    return int(round((time.perf_counter() - started) * 1000))


def _describe_error(exc: BaseException) -> str:
    # httpx timeouts frequently carry an empty message
    message = str(exc).strip()
    return message or exc.__class__.__name__


class WarmupCoordinator:
    """Issue no-op requests through pooled clients and report the outcome."""

    def __init__(
        self,
        registry: ConnectionPoolRegistry,
        *,
        timeout: float = 10.0,
        settings_loader: Callable[[], Settings] = load_settings,
    ) -> None:
        self._registry = registry
        self._timeout = timeout
        # Called on every warmup; credentials are never cached here
        self._settings_loader = settings_loader

    async def warmup_one(self, provider: Provider | str) -> WarmupResult:
        """Warm up a single provider. Never raises."""

        try:
            key = parse_provider(provider)
        except UnknownProviderError:
            logger.warning("Warmup requested for unknown provider %r", provider)
            return WarmupResult(
                provider=str(provider),
                success=False,
                error=UNKNOWN_PROVIDER_ERROR,
            )

        api_key = self._settings_loader().api_key_for(key)
        if api_key is None:
            logger.info("%s warmup skipped - no valid API key", key.value)
            return WarmupResult(provider=key.value, success=False, error=NO_API_KEY_ERROR)

        started = time.perf_counter()
        try:
            status_code = await asyncio.wait_for(
                self._send(key, api_key), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            elapsed = _elapsed_ms(started)
            error = f"Timed out after {self._timeout:g}s"
            logger.warning(
                "%s warmup failed after %dms: %s", key.value, elapsed, error
            )
            return WarmupResult(
                provider=key.value, success=False, elapsed_ms=elapsed, error=error
            )
        except (httpx.HTTPError, OSError) as exc:
            elapsed = _elapsed_ms(started)
            error = _describe_error(exc)
            logger.warning(
                "%s warmup failed after %dms: %s", key.value, elapsed, error
            )
            return WarmupResult(
                provider=key.value, success=False, elapsed_ms=elapsed, error=error
            )
        except Exception as exc:
            elapsed = _elapsed_ms(started)
            logger.exception("%s warmup raised unexpectedly", key.value)
            return WarmupResult(
                provider=key.value,
                success=False,
                elapsed_ms=elapsed,
                error=_describe_error(exc),
            )

        elapsed = _elapsed_ms(started)
        logger.info(
            "%s connection warmed up in %dms (HTTP %s)",
            key.value,
            elapsed,
            status_code,
        )
        return WarmupResult(
            provider=key.value,
            success=True,
            elapsed_ms=elapsed,
            status_code=status_code,
        )

    async def _send(self, provider: Provider, api_key: str) -> int:
        spec = get_provider_spec(provider)
        request_kwargs: dict[str, Any] = {
            "headers": spec.build_headers(api_key),
            "timeout": self._timeout,
        }
        payload = spec.build_empty_payload()
        if payload is not None:
            request_kwargs["json"] = payload

        client = self._registry.get(provider)
        response = await client.request(spec.method, spec.endpoint, **request_kwargs)
        # Status is irrelevant; reaching the server is the whole point
        return response.status_code

    async def warmup_all(self) -> WarmupReport:
        """Warm up every known provider concurrently."""

        started = time.perf_counter()
        results = await asyncio.gather(
            *(self.warmup_one(provider) for provider in Provider)
        )
        report = WarmupReport(
            results=tuple(results),
            total_elapsed_ms=_elapsed_ms(started),
        )
        logger.info(
            "All connections warmed up in %dms (%d/%d ready)",
            report.total_elapsed_ms,
            len(report.succeeded),
            len(report.results),
        )
        return report


__all__ = [
    "NO_API_KEY_ERROR",
    "UNKNOWN_PROVIDER_ERROR",
    "WarmupCoordinator",
    "WarmupReport",
    "WarmupResult",
]
