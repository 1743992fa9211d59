"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer): the cart is accepted
loosely here and parsed by the checkout coordinator, so a malformed cart is
answered with the checkout error envelope instead of a schema error.
"""

from typing import Any

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "nonce": "fake-valid-nonce",
                    "cart": [
                        {"_id": "5b0c7a52-8c8e-4c59-9a8e-3a3c2f1d9e10", "name": "Classic Black T-Shirt", "price": 29.99},
                        {"_id": "0f4b8b1e-6f8e-4e0f-9d8d-2a4f5b6c7d8e", "name": "Canvas Tote", "price": 12.5},
                    ],
                }
            ]
        }
    }

    nonce: Any | None = None
    cart: Any | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class TransactionSchema(BaseModel):
    id: str
    success: bool
    amount: str
    status: str


class CheckoutResponse(BaseModel):
    ok: bool = True
    transaction: TransactionSchema
    orderId: str


class OrdersResponse(BaseModel):
    success: bool = True
    orders: list[dict]
