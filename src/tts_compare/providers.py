"""Static description of each supported TTS provider.

Every provider is one row in ``PROVIDER_SPECS``: where its API lives, which
method to use, how to authenticate and what an empty (no-op) synthesis
request looks like. Warmup and pooling code only ever reads this table, so a
new provider is added here and nowhere else.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Literal, Optional


class Provider(str, Enum):
    INWORLD = "inworld"
    CARTESIA = "cartesia"
    ELEVENLABS = "elevenlabs"
    HUME = "hume"


class UnknownProviderError(ValueError):
    """Raised when a provider identifier is not in the provider table."""

    def __init__(self, provider: object) -> None:
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


HeaderBuilder = Callable[[str], dict[str, str]]
PayloadBuilder = Callable[[], Optional[dict[str, Any]]]


@dataclass(frozen=True)
class ProviderSpec:
    provider: Provider
    endpoint: str
    method: Literal["GET", "POST"]
    build_headers: HeaderBuilder
    build_empty_payload: PayloadBuilder

    @property
    def placeholder(self) -> str:
        # Value shipped in the `.env` template
        return f"your_{self.provider.value}_api_key_here"


def _json_headers(headers: dict[str, str]) -> dict[str, str]:
    return {**headers, "Content-Type": "application/json"}


def _inworld_payload() -> dict[str, Any]:
    return {
        "text": "",
        "voiceId": "Alex",
        "modelId": "inworld-tts-1.5-mini",
        "audioConfig": {"audioEncoding": "MP3", "sampleRateHertz": 44100},
    }


def _cartesia_payload() -> dict[str, Any]:
    return {
        "model_id": "sonic-2",
        "transcript": "",
        "voice": {"mode": "id", "id": "a0e99841-438c-4a64-b679-ae501e7d6091"},
        "output_format": {
            "container": "raw",
            "encoding": "pcm_f32le",
            "sample_rate": 44100,
        },
    }


def _hume_payload() -> dict[str, Any]:
    return {
        "utterances": [
            {
                "text": "",
                "voice": {"name": "Male English Actor", "provider": "HUME_AI"},
            }
        ]
    }


PROVIDER_SPECS: dict[Provider, ProviderSpec] = {
    Provider.INWORLD: ProviderSpec(
        provider=Provider.INWORLD,
        endpoint="https://api.inworld.ai/tts/v1/voice:stream",
        method="POST",
        build_headers=lambda key: _json_headers({"Authorization": f"Basic {key}"}),
        build_empty_payload=_inworld_payload,
    ),
    Provider.CARTESIA: ProviderSpec(
        provider=Provider.CARTESIA,
        endpoint="https://api.cartesia.ai/tts/sse",
        method="POST",
        build_headers=lambda key: _json_headers(
            {"Cartesia-Version": "2024-06-10", "X-API-Key": key}
        ),
        build_empty_payload=_cartesia_payload,
    ),
    # A plain listing call is enough to open the connection
    Provider.ELEVENLABS: ProviderSpec(
        provider=Provider.ELEVENLABS,
        endpoint="https://api.elevenlabs.io/v1/voices",
        method="GET",
        build_headers=lambda key: {"xi-api-key": key},
        build_empty_payload=lambda: None,
    ),
    Provider.HUME: ProviderSpec(
        provider=Provider.HUME,
        endpoint="https://api.hume.ai/v0/tts/stream/json",
        method="POST",
        build_headers=lambda key: _json_headers({"X-Hume-Api-Key": key}),
        build_empty_payload=_hume_payload,
    ),
}


def parse_provider(value: Provider | str) -> Provider:
    """Coerce ``value`` to a `Provider`, raising `UnknownProviderError`."""

    if isinstance(value, Provider):
        return value
    try:
        return Provider(value.strip().lower())
    except (AttributeError, ValueError):
        raise UnknownProviderError(value) from None


def get_provider_spec(value: Provider | str) -> ProviderSpec:
    return PROVIDER_SPECS[parse_provider(value)]


__all__ = [
    "PROVIDER_SPECS",
    "Provider",
    "ProviderSpec",
    "UnknownProviderError",
    "get_provider_spec",
    "parse_provider",
]
