"""Order Commit Coordinator.

Runs one checkout attempt through these states::

    RECEIVED -> TOTAL_COMPUTED -> CHARGE_SUBMITTED
        -> CHARGE_SUCCEEDED -> ORDER_PERSISTED | PERSISTENCE_FAILED -> DONE
        -> CHARGE_FAILED

The gateway is called at most once per attempt and the nonce is never
resubmitted. Once the charge is submitted it is never abandoned: a timeout
or a cancelled caller stops waiting for it, but the charge keeps running and
its late outcome is logged for reconciliation. A timeout therefore reports
``GatewayUnavailable`` (outcome unknown), never a failed charge.
"""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from payments.gateway.port import GatewayRejected, GatewayUnavailable, PaymentGateway, TransactionResult
from sqlalchemy.exc import SQLAlchemyError
from structlog.contextvars import bound_contextvars

from ordering.checkout.cart import cart_total, parse_cart
from ordering.checkout.errors import InvalidRequest, PersistenceFailure
from ordering.domain import logger
from ordering.order.ledger import OrderLedger
from ordering.order.order import PaymentTransaction


class CheckoutState(Enum):
    RECEIVED = "received"
    TOTAL_COMPUTED = "total_computed"
    CHARGE_SUBMITTED = "charge_submitted"
    CHARGE_SUCCEEDED = "charge_succeeded"
    CHARGE_FAILED = "charge_failed"
    ORDER_PERSISTED = "order_persisted"
    PERSISTENCE_FAILED = "persistence_failed"
    DONE = "done"


@dataclass(frozen=True)
class CheckoutResult:
    transaction: TransactionResult
    order_id: str
    total: Decimal
    states: tuple[CheckoutState, ...] = field(default=())

    def to_dict(self) -> dict:
        return {"ok": True, "transaction": self.transaction.to_dict(), "orderId": self.order_id}


class CheckoutCoordinator:
    def __init__(
        self,
        gateway: PaymentGateway,
        ledger: OrderLedger,
        charge_timeout: float = 30.0,
        persist_attempts: int = 3,
        persist_backoff: float = 0.1,
    ) -> None:
        self.gateway = gateway
        self.ledger = ledger
        self.charge_timeout = charge_timeout
        self.persist_attempts = max(1, persist_attempts)
        self.persist_backoff = persist_backoff
        # Strong references to charges still running after the caller stopped waiting
        self._inflight: set[asyncio.Task] = set()

    async def commit_order(self, nonce: str, cart: list, buyer_id: str) -> CheckoutResult:
        states: list[CheckoutState] = []
        with bound_contextvars(checkout_id=uuid4().hex[:12], buyer_id=buyer_id):
            self._enter(states, CheckoutState.RECEIVED)

            if not isinstance(nonce, str) or not nonce.strip():
                raise InvalidRequest("Missing nonce or cart")
            if not isinstance(buyer_id, str) or not buyer_id.strip():
                raise InvalidRequest("Missing buyer")
            lines = parse_cart(cart)
            total = cart_total(lines)
            if total <= 0:
                raise InvalidRequest("Cart total must be greater than zero")
            self._enter(states, CheckoutState.TOTAL_COMPUTED, total=str(total), lines=len(lines))

            self._enter(states, CheckoutState.CHARGE_SUBMITTED)
            try:
                transaction = await self._charge(total, nonce)
            except GatewayRejected as exc:
                self._enter(states, CheckoutState.CHARGE_FAILED, reason=exc.reason)
                raise
            except GatewayUnavailable as exc:
                logger.warning("checkout.gateway_unavailable", reason=exc.reason)
                raise

            if not transaction.success:
                self._enter(states, CheckoutState.CHARGE_FAILED, reason=transaction.status)
                raise GatewayRejected(f"Transaction ended in status {transaction.status}", transaction.raw_payload)
            self._enter(states, CheckoutState.CHARGE_SUCCEEDED, transaction_id=transaction.transaction_id)

            product_ids = [line.product_id for line in lines]
            try:
                order = await self._persist(PaymentTransaction.from_result(transaction), product_ids, buyer_id)
            except PersistenceFailure:
                self._enter(states, CheckoutState.PERSISTENCE_FAILED, transaction_id=transaction.transaction_id)
                raise
            self._enter(states, CheckoutState.ORDER_PERSISTED, order_id=order.id)
            self._enter(states, CheckoutState.DONE)

            return CheckoutResult(transaction=transaction, order_id=order.id, total=total, states=tuple(states))

    async def reconcile(self, failure: PersistenceFailure) -> CheckoutResult:
        """Retry recording the order of a charge that succeeded earlier."""
        with bound_contextvars(buyer_id=failure.buyer_id, transaction_id=failure.transaction.transaction_id):
            order = await self._persist(failure.transaction, failure.product_ids, failure.buyer_id)
            logger.info("checkout.reconciled", order_id=order.id)

        payment = failure.transaction
        transaction = TransactionResult(
            transaction_id=payment.transaction_id,
            success=payment.success,
            amount=payment.amount,
            status=payment.status,
            raw_payload=payment.raw_payload,
        )
        return CheckoutResult(transaction=transaction, order_id=order.id, total=Decimal(payment.amount))

    async def _charge(self, total: Decimal, nonce: str) -> TransactionResult:
        task = asyncio.ensure_future(self.gateway.charge_total(total, nonce, settle_immediately=True))
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.charge_timeout)
        except TimeoutError:
            self._watch_late_outcome(task)
            raise GatewayUnavailable(f"no response within {self.charge_timeout:g}s, charge outcome unknown") from None
        except asyncio.CancelledError:
            self._watch_late_outcome(task)
            raise

    def _watch_late_outcome(self, task: asyncio.Task) -> None:
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        task.add_done_callback(_log_late_outcome)

    async def _persist(self, transaction: PaymentTransaction, product_ids: list[str], buyer_id: str):
        error: Exception | None = None
        for attempt in range(1, self.persist_attempts + 1):
            try:
                return await asyncio.to_thread(self.ledger.record, transaction, product_ids, buyer_id)
            except SQLAlchemyError as exc:
                error = exc
                logger.warning("checkout.persist_attempt_failed", attempt=attempt, error=str(exc))
                if attempt < self.persist_attempts and self.persist_backoff:
                    await asyncio.sleep(self.persist_backoff * attempt)
            except Exception as exc:
                # Not transient, no retry
                error = exc
                break

        logger.critical(
            "checkout.persistence_failed",
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
            product_ids=product_ids,
            buyer_id=buyer_id,
            error=str(error),
        )
        raise PersistenceFailure(transaction, product_ids, buyer_id, cause=error) from error

    @staticmethod
    def _enter(states: list[CheckoutState], state: CheckoutState, **details) -> None:
        states.append(state)
        logger.info("checkout.transition", state=state.value, **details)


def _log_late_outcome(task: asyncio.Task) -> None:
    if task.cancelled():
        logger.critical("checkout.late_charge_abandoned")
        return

    exc = task.exception()
    if exc is not None:
        logger.warning("checkout.late_charge_failed", error=str(exc))
        return

    result = task.result()
    logger.critical(
        "checkout.late_charge_succeeded",
        transaction_id=result.transaction_id,
        amount=result.amount,
        status=result.status,
    )
