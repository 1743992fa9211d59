"""Pydantic request/response schemas for the Payments API."""

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class ConfigureGatewayRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"mode": "decline", "failure_reason": "Insufficient funds"}]}}

    mode: Literal["succeed", "decline", "unavailable"] = "succeed"
    failure_reason: str = "Card declined"
    latency: float = Field(0.0, ge=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ClientTokenResponse(BaseModel):
    ok: bool = True
    clientToken: str


class GatewayConfigResponse(BaseModel):
    gateway: str
    mode: str
    failure_reason: str
    latency: float
