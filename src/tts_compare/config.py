"""Application configuration using environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from tts_compare.providers import Provider, get_provider_spec

# Resolve the project root once so that `.env` is discovered regardless of CWD
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """Load configuration from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider credentials (all optional; unset providers are skipped)
    inworld_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("INWORLD_API_KEY", "inworld_api_key"),
    )
    cartesia_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("CARTESIA_API_KEY", "cartesia_api_key"),
    )
    elevenlabs_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("ELEVENLABS_API_KEY", "elevenlabs_api_key"),
    )
    hume_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("HUME_API_KEY", "hume_api_key"),
    )

    warmup_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        validation_alias=AliasChoices(
            "WARMUP_TIMEOUT_SECONDS",
            "warmup_timeout_seconds",
        ),
    )
    warmup_on_startup: bool = Field(
        default=True,
        validation_alias=AliasChoices("WARMUP_ON_STARTUP", "warmup_on_startup"),
    )

    # Per-provider keep-alive pool policy
    pool_max_connections: int = Field(
        default=10,
        ge=1,
        validation_alias=AliasChoices(
            "POOL_MAX_CONNECTIONS",
            "pool_max_connections",
        ),
    )
    pool_max_keepalive_connections: int = Field(
        default=5,
        ge=0,
        validation_alias=AliasChoices(
            "POOL_MAX_KEEPALIVE_CONNECTIONS",
            "pool_max_keepalive_connections",
        ),
    )
    pool_keepalive_expiry_seconds: float = Field(
        default=30.0,
        ge=0,
        validation_alias=AliasChoices(
            "POOL_KEEPALIVE_EXPIRY_SECONDS",
            "pool_keepalive_expiry_seconds",
        ),
    )
    pool_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        validation_alias=AliasChoices(
            "POOL_TIMEOUT_SECONDS",
            "pool_timeout_seconds",
        ),
    )

    log_settings_path: Path = Field(
        default_factory=lambda: Path("logging_settings.conf"),
        validation_alias=AliasChoices("LOG_SETTINGS_PATH", "log_settings_path"),
    )

    def api_key_for(self, provider: Provider | str) -> Optional[str]:
        """Return the usable API key for ``provider``, or ``None`` if unset.

        Empty, whitespace-only and template placeholder values all count as
        "not configured".
        """

        spec = get_provider_spec(provider)
        secret: SecretStr | None = getattr(self, f"{spec.provider.value}_api_key")
        if secret is None:
            return None
        value = secret.get_secret_value()
        if not value.strip() or value == spec.placeholder:
            return None
        return value

    def configured_providers(self) -> list[Provider]:
        return [p for p in Provider if self.api_key_for(p) is not None]


def load_settings() -> Settings:
    """Build a fresh `Settings` instance, re-reading the environment."""

    return Settings()  # pyright: ignore[reportCallIssue]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return load_settings()


__all__ = ["PROJECT_ROOT", "Settings", "get_settings", "load_settings"]
