from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from tts_compare.config import Settings
from tts_compare.providers import Provider, UnknownProviderError
from tts_compare.services.connection_pool import ConnectionPoolRegistry


def make_registry() -> ConnectionPoolRegistry:
    settings = Settings(_env_file=None)  # pyright: ignore[reportCallIssue]
    transport = httpx.MockTransport(lambda request: httpx.Response(204))
    return ConnectionPoolRegistry(settings, transport=transport)


@pytest.mark.asyncio
async def test_get_reuses_client_per_provider():
    registry = make_registry()
    try:
        for provider in Provider:
            first = registry.get(provider)
            assert registry.get(provider) is first
            assert registry.get(provider.value) is first
    finally:
        await registry.destroy_all()


@pytest.mark.asyncio
async def test_providers_get_distinct_clients():
    registry = make_registry()
    try:
        clients = {id(registry.get(provider)) for provider in Provider}
        assert len(clients) == len(Provider)
    finally:
        await registry.destroy_all()


@pytest.mark.asyncio
async def test_destroy_closes_and_recreates():
    registry = make_registry()
    first = registry.get(Provider.CARTESIA)

    await registry.destroy(Provider.CARTESIA)

    assert first.is_closed
    assert Provider.CARTESIA not in registry.active_providers()
    second = registry.get("cartesia")
    assert second is not first
    assert not second.is_closed
    await registry.destroy_all()


@pytest.mark.asyncio
async def test_destroy_absent_provider_is_noop():
    registry = make_registry()

    await registry.destroy(Provider.HUME)
    await registry.destroy(Provider.HUME)

    assert registry.active_providers() == []


@pytest.mark.asyncio
async def test_destroy_all_leaves_no_stale_clients():
    registry = make_registry()
    before = {provider: registry.get(provider) for provider in Provider}

    await registry.destroy_all()

    assert registry.active_providers() == []
    for provider, old in before.items():
        assert old.is_closed
        assert registry.get(provider) is not old
    await registry.destroy_all()


@pytest.mark.asyncio
async def test_unknown_provider_is_rejected():
    registry = make_registry()

    with pytest.raises(UnknownProviderError):
        registry.get("polly")
    with pytest.raises(UnknownProviderError):
        await registry.destroy("polly")

    assert registry.active_providers() == []


@pytest.mark.asyncio
async def test_concurrent_threads_share_one_client():
    registry = make_registry()
    try:
        with ThreadPoolExecutor(max_workers=8) as pool:
            clients = list(pool.map(lambda _: registry.get(Provider.HUME), range(32)))

        assert len({id(client) for client in clients}) == 1
        assert registry.active_providers() == [Provider.HUME]
    finally:
        await registry.destroy_all()


@pytest.mark.asyncio
async def test_created_client_uses_keepalive_pool_policy():
    settings = Settings(_env_file=None)  # pyright: ignore[reportCallIssue]
    registry = ConnectionPoolRegistry(settings)
    try:
        client = registry.get(Provider.INWORLD)

        assert client.timeout == httpx.Timeout(60.0)
        pool = client._transport._pool  # type: ignore[attr-defined]
        assert pool._max_connections == 10
        assert pool._max_keepalive_connections == 5
        assert pool._keepalive_expiry == 30.0
    finally:
        await registry.destroy_all()
