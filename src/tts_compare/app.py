"""Application factory for the FastAPI service."""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager, suppress
from typing import Any, Callable, Optional

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import PROJECT_ROOT, Settings, get_settings, load_settings
from .logging_handlers import DateStampedFileHandler, cleanup_old_logs
from .logging_settings import parse_logging_settings
from .providers import Provider
from .routers.warmup import router as warmup_router
from .services.connection_manager import ConnectionManager
from .services.warmup import WarmupReport

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(settings: Settings) -> None:
    """Configure logging from the logging settings file and environment.

    ``LOG_LEVEL`` overrides the terminal level; ``LOG_DIR`` enables
    date-stamped log files under that directory.
    """
    # Load .env file first to ensure LOG_* variables are available
    load_dotenv()

    settings_path = settings.log_settings_path
    if not settings_path.is_absolute():
        settings_path = PROJECT_ROOT / settings_path
    log_settings = parse_logging_settings(settings_path)

    terminal_level = log_settings.terminal_level
    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        terminal_level = getattr(logging, env_level.upper(), logging.INFO)

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)
    handlers: list[logging.Handler] = []

    if terminal_level is not None:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(terminal_level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    log_dir = os.getenv("LOG_DIR")
    if log_dir and log_settings.file_level is not None:
        file_handler = DateStampedFileHandler(log_dir)
        file_handler.setLevel(log_settings.file_level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        # Every sink is off; also suppresses logging.lastResort
        null_handler = logging.NullHandler()
        null_handler.setLevel(logging.WARNING)
        handlers.append(null_handler)

    root_level = min((h.level for h in handlers), default=logging.WARNING)
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    # Quiet the HTTP client stack unless debugging
    if root_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    if log_dir:
        cleanup_old_logs([log_dir], log_settings.retention_hours, logger=logger)


def _log_warmup_report(report: WarmupReport) -> None:
    for result in report.results:
        if result.success:
            logger.info("[Warmup] %s: %sms", result.provider, result.elapsed_ms)
        else:
            logger.info("[Warmup] %s: not warmed - %s", result.provider, result.error)


def create_app(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    settings_loader: Optional[Callable[[], Settings]] = None,
) -> FastAPI:
    if settings is None:
        settings = get_settings()
        settings_loader = settings_loader or load_settings
    elif settings_loader is None:
        explicit = settings
        settings_loader = lambda: explicit
    _configure_logging(settings)

    manager = ConnectionManager(
        settings, transport=transport, settings_loader=settings_loader
    )
    warmup_task: asyncio.Task | None = None

    async def _startup_warmup() -> None:
        report = await manager.warmup_all()
        _log_warmup_report(report)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        nonlocal warmup_task
        if settings.warmup_on_startup:
            warmup_task = asyncio.create_task(_startup_warmup())
        try:
            yield
        finally:
            if warmup_task is not None and not warmup_task.done():
                warmup_task.cancel()
                with suppress(asyncio.CancelledError):
                    await warmup_task
            try:
                await asyncio.wait_for(manager.shutdown(), timeout=10.0)
            except asyncio.TimeoutError:
                logger.warning("Connection shutdown timed out after 10s")

    app = FastAPI(
        title="TTS Compare Backend",
        version="0.1.0",
        description="Side-by-side TTS provider comparison with pre-warmed connections.",
        lifespan=lifespan,
    )

    app.state.connection_manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(warmup_router)

    @app.get("/health", tags=["health"])
    async def healthcheck() -> dict[str, Any]:
        return {
            "status": "ok",
            "providers": [p.value for p in Provider],
            "configured": [p.value for p in manager.configured_providers()],
        }

    return app


__all__ = ["create_app"]
