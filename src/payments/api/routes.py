"""FastAPI routes for the Payments domain: client tokens and gateway controls."""

from fastapi import APIRouter, Depends, HTTPException, Request

from payments.api.schemas import ClientTokenResponse, ConfigureGatewayRequest, GatewayConfigResponse
from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway


def get_gateway(request: Request) -> PaymentGateway:
    """Return the gateway the application built at startup."""
    return request.app.state.gateway


# ---------------------------------------------------------------------------
# Client Token Router
# ---------------------------------------------------------------------------
client_token_router = APIRouter(tags=["payments"])


@client_token_router.get("/client-token", response_model=ClientTokenResponse)
async def client_token(gateway: PaymentGateway = Depends(get_gateway)) -> ClientTokenResponse:
    """Issue a client token for the gateway's drop-in payment form."""
    token = await gateway.issue_client_token()
    return ClientTokenResponse(clientToken=token)


# ---------------------------------------------------------------------------
# Gateway Router
# ---------------------------------------------------------------------------
gateway_router = APIRouter(prefix="/payments", tags=["payments"])


@gateway_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(
    body: ConfigureGatewayRequest,
    request: Request,
    gateway: PaymentGateway = Depends(get_gateway),
) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available when ENVIRONMENT is not 'production'.
    It allows switching between succeed, decline and unavailable outcomes
    for manual API testing.
    """
    if request.app.state.settings.is_production:
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        mode=body.mode,
        failure_reason=body.failure_reason,
        latency=body.latency,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        mode=gateway.mode,
        failure_reason=gateway.failure_reason,
        latency=gateway.latency,
    )
