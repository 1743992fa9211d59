"""Configurable fake payment gateway for development and testing.

This adapter simulates a real payment gateway without any external calls.
It can be configured at runtime to succeed, decline or be unavailable,
making it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials

Like the real gateway, a nonce is single use: charging a consumed nonce is
rejected whatever the configured mode.
"""

import asyncio
from decimal import Decimal
from uuid import uuid4

from payments.gateway.port import GatewayRejected, GatewayUnavailable, PaymentGateway, TransactionResult

MODES = ("succeed", "decline", "unavailable")


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.mode: str = "succeed"
        self.failure_reason: str = "Card declined"
        self.latency: float = 0.0
        self.calls: list[dict] = []
        self.used_nonces: set[str] = set()

    def configure(self, mode: str = "succeed", failure_reason: str = "Card declined", latency: float = 0.0) -> None:
        """Configure gateway behavior at runtime."""
        if mode not in MODES:
            raise ValueError(f"Unknown gateway mode `{mode}`, expected one of {', '.join(MODES)}")
        self.mode = mode
        self.failure_reason = failure_reason
        self.latency = latency

    async def issue_client_token(self) -> str:
        self.calls.append({"method": "issue_client_token"})
        if self.mode == "unavailable":
            raise GatewayUnavailable(self.failure_reason)
        return f"fake_client_token_{uuid4().hex[:16]}"

    async def charge_total(self, amount: Decimal, nonce: str, settle_immediately: bool = True) -> TransactionResult:
        call = {
            "method": "charge_total",
            "amount": amount,
            "nonce": nonce,
            "settle_immediately": settle_immediately,
        }
        self.calls.append(call)

        if self.latency:
            await asyncio.sleep(self.latency)

        if self.mode == "unavailable":
            raise GatewayUnavailable(self.failure_reason)
        if nonce in self.used_nonces:
            raise GatewayRejected("Payment method nonce has already been consumed", {"nonce": nonce})
        self.used_nonces.add(nonce)

        if self.mode == "decline":
            raise GatewayRejected(self.failure_reason, {"status": "PROCESSOR_DECLINED", "nonce": nonce})

        status = "SUBMITTED_FOR_SETTLEMENT" if settle_immediately else "AUTHORIZED"
        transaction_id = f"fake_txn_{uuid4().hex[:12]}"
        return TransactionResult(
            transaction_id=transaction_id,
            success=True,
            amount=f"{amount:.2f}",
            status=status,
            raw_payload={"id": transaction_id, "status": status, "amount": {"value": f"{amount:.2f}"}},
        )
