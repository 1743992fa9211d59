"""FastAPI routes for the Ordering domain: checkout and order history.

Checkout failures are ``CheckoutError`` subclasses; the application's error
handlers render them as ``{ok: false, error: {kind, message, retryable}}``
with 400 for invalid requests and 500 for gateway or persistence failures.
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ordering.api.schemas import CheckoutRequest, CheckoutResponse, OrdersResponse
from ordering.checkout.coordinator import CheckoutCoordinator
from ordering.checkout.errors import InvalidRequest
from ordering.order.ledger import OrderLedger

router = APIRouter(tags=["ordering"])


def get_buyer_id(x_customer_id: str | None = Header(default=None)) -> str:
    """Identify the authenticated caller; the upstream auth layer sets the header."""
    if not x_customer_id or not x_customer_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_customer_id.strip()


def get_coordinator(request: Request) -> CheckoutCoordinator:
    return request.app.state.coordinator


def get_ledger(request: Request) -> OrderLedger:
    return request.app.state.ledger


async def checkout_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer an unparseable checkout body with the checkout error envelope."""
    if request.url.path != "/checkout":
        return await request_validation_exception_handler(request, exc)

    error = InvalidRequest("Missing nonce or cart")
    return JSONResponse(status_code=error.status_code, content={"ok": False, "error": error.to_dict()})


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    body: CheckoutRequest,
    buyer_id: str = Depends(get_buyer_id),
    coordinator: CheckoutCoordinator = Depends(get_coordinator),
) -> CheckoutResponse:
    """Charge the cart total against the nonce and record the order."""
    result = await coordinator.commit_order(nonce=body.nonce, cart=body.cart, buyer_id=buyer_id)
    return CheckoutResponse(**result.to_dict())


@router.get("/orders", response_model=OrdersResponse)
def list_orders(
    buyer_id: str = Depends(get_buyer_id),
    ledger: OrderLedger = Depends(get_ledger),
) -> OrdersResponse:
    orders = ledger.orders_for(buyer_id)
    return OrdersResponse(orders=[order.to_dict() for order in orders])
