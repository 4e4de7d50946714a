"""Warmup, provider status and connection teardown endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from ..providers import Provider, UnknownProviderError
from ..schemas.warmup import ProviderStatus, WarmupReportModel, WarmupResultModel
from ..services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["warmup"])


def get_connection_manager(request: Request) -> ConnectionManager:
    manager = getattr(request.app.state, "connection_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="Connection manager not initialized")
    return manager


@router.post(
    "/warmup/all",
    response_model=WarmupReportModel,
    response_model_exclude_none=True,
)
async def warmup_all(
    manager: ConnectionManager = Depends(get_connection_manager),
) -> dict:
    report = await manager.warmup_all()
    return report.asdict()


@router.post(
    "/warmup/{provider}",
    response_model=WarmupResultModel,
    response_model_exclude_none=True,
)
async def warmup_provider(
    provider: str,
    manager: ConnectionManager = Depends(get_connection_manager),
) -> dict:
    # Unknown providers come back as a structured failure, not a 4xx
    result = await manager.warmup_one(provider)
    return result.asdict()


@router.get("/providers", response_model=list[ProviderStatus])
async def list_providers(
    manager: ConnectionManager = Depends(get_connection_manager),
) -> list[ProviderStatus]:
    configured = set(manager.configured_providers())
    connected = set(manager.connected_providers())
    return [
        ProviderStatus(
            provider=provider.value,
            configured=provider in configured,
            connected=provider in connected,
        )
        for provider in Provider
    ]


@router.delete("/connections", status_code=204)
async def destroy_all_connections(
    manager: ConnectionManager = Depends(get_connection_manager),
) -> None:
    await manager.destroy_all()


@router.delete("/connections/{provider}", status_code=204)
async def destroy_connection(
    provider: str,
    manager: ConnectionManager = Depends(get_connection_manager),
) -> None:
    try:
        await manager.destroy(provider)
    except UnknownProviderError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


__all__ = ["get_connection_manager", "router"]
