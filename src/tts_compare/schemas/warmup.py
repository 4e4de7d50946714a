"""Response schemas for the warmup and provider status endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WarmupResultModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    provider: str
    success: bool
    elapsed_ms: Optional[int] = Field(default=None, alias="elapsedMs")
    error: Optional[str] = None
    status_code: Optional[int] = Field(default=None, alias="statusCode")


class WarmupReportModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    results: list[WarmupResultModel]
    total_time_ms: int = Field(alias="totalTimeMs")


class ProviderStatus(BaseModel):
    provider: str
    configured: bool = Field(description="A usable API key is set")
    connected: bool = Field(description="A pooled client currently exists")
