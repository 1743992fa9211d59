"""Application tests for the Order Commit Coordinator."""

import asyncio
from decimal import Decimal

import pytest
from ordering.checkout.coordinator import CheckoutCoordinator, CheckoutState
from ordering.checkout.errors import InvalidRequest, PersistenceFailure
from ordering.order.order import Order
from payments.gateway.port import GatewayRejected, GatewayUnavailable
from protean.exceptions import ValidationError


def _charges(gateway):
    return [call for call in gateway.calls if call["method"] == "charge_total"]


class TestSuccessfulCheckout:
    def test_charge_and_record_order(self, coordinator, fake_gateway, ledger, cart):
        result = asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        assert result.total == Decimal("19.75")
        assert result.transaction.success is True
        assert result.transaction.amount == "19.75"

        order = ledger.find(result.transaction.transaction_id)
        assert order.id == result.order_id
        assert order.products == ["p1", "p2"]
        assert order.buyer_id == "buyer-1"
        assert order.payment["transaction_id"] == result.transaction.transaction_id

    def test_states_traversed(self, coordinator, cart):
        result = asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))
        assert result.states == (
            CheckoutState.RECEIVED,
            CheckoutState.TOTAL_COMPUTED,
            CheckoutState.CHARGE_SUBMITTED,
            CheckoutState.CHARGE_SUCCEEDED,
            CheckoutState.ORDER_PERSISTED,
            CheckoutState.DONE,
        )

    def test_gateway_charged_once_with_rounded_total(self, coordinator, fake_gateway):
        cart = [{"_id": "a", "price": 0.1}, {"_id": "b", "price": 0.2}]
        asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        [charge] = _charges(fake_gateway)
        assert charge["amount"] == Decimal("0.30")
        assert charge["nonce"] == "nonce-1"
        assert charge["settle_immediately"] is True

    def test_to_dict(self, coordinator, cart):
        result = asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))
        data = result.to_dict()
        assert data["ok"] is True
        assert data["orderId"] == result.order_id
        assert data["transaction"]["id"] == result.transaction.transaction_id


class TestInvalidRequests:
    @pytest.mark.parametrize("nonce", [None, "", "   "])
    def test_missing_nonce(self, coordinator, fake_gateway, session, cart, nonce):
        with pytest.raises(InvalidRequest):
            asyncio.run(coordinator.commit_order(nonce, cart, "buyer-1"))

        assert fake_gateway.calls == []
        assert session.query(Order).count() == 0

    @pytest.mark.parametrize("cart", [None, [], [{"price": 3}]])
    def test_missing_or_malformed_cart(self, coordinator, fake_gateway, session, cart):
        with pytest.raises(InvalidRequest):
            asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        assert fake_gateway.calls == []
        assert session.query(Order).count() == 0

    def test_zero_total(self, coordinator, fake_gateway):
        with pytest.raises(InvalidRequest):
            asyncio.run(coordinator.commit_order("nonce-1", [{"_id": "free", "price": 0}], "buyer-1"))
        assert fake_gateway.calls == []

    def test_total_out_of_range(self, coordinator, fake_gateway):
        with pytest.raises(InvalidRequest):
            asyncio.run(coordinator.commit_order("nonce-1", [{"_id": "p1", "price": 1e30}], "buyer-1"))
        assert fake_gateway.calls == []

    @pytest.mark.parametrize("buyer_id", [None, "", "   "])
    def test_missing_buyer_is_refused_before_charging(self, coordinator, fake_gateway, session, cart, buyer_id):
        with pytest.raises(InvalidRequest):
            asyncio.run(coordinator.commit_order("nonce-1", cart, buyer_id))

        assert fake_gateway.calls == []
        assert session.query(Order).count() == 0


class TestGatewayFailures:
    def test_rejection_creates_no_order(self, coordinator, fake_gateway, session, cart):
        fake_gateway.configure(mode="decline", failure_reason="Do Not Honor")

        with pytest.raises(GatewayRejected) as exc:
            asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        assert exc.value.reason == "Do Not Honor"
        assert exc.value.to_dict() == {"kind": "gateway_rejected", "message": "Do Not Honor", "retryable": False}
        assert len(_charges(fake_gateway)) == 1
        assert session.query(Order).count() == 0

    def test_reused_nonce_is_rejected_without_second_order(self, coordinator, fake_gateway, session, cart):
        asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        with pytest.raises(GatewayRejected):
            asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))
        assert session.query(Order).count() == 1

    def test_unavailable_creates_no_order(self, coordinator, fake_gateway, session, cart):
        fake_gateway.configure(mode="unavailable", failure_reason="connection reset")

        with pytest.raises(GatewayUnavailable) as exc:
            asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        assert exc.value.retryable is True
        assert session.query(Order).count() == 0

    def test_timeout_is_unavailable_not_declined(self, fake_gateway, ledger, session, cart):
        fake_gateway.configure(latency=0.3)
        coordinator = CheckoutCoordinator(fake_gateway, ledger, charge_timeout=0.05, persist_backoff=0)

        async def scenario():
            with pytest.raises(GatewayUnavailable) as exc:
                await coordinator.commit_order("nonce-1", cart, "buyer-1")
            assert "outcome unknown" in exc.value.message
            assert coordinator._inflight
            # The charge keeps running after the caller gave up
            await asyncio.sleep(0.5)

        asyncio.run(scenario())

        assert "nonce-1" in fake_gateway.used_nonces
        assert len(_charges(fake_gateway)) == 1
        assert not coordinator._inflight
        assert session.query(Order).count() == 0

    def test_cancelled_caller_does_not_abort_the_charge(self, fake_gateway, ledger, cart):
        fake_gateway.configure(latency=0.2)
        coordinator = CheckoutCoordinator(fake_gateway, ledger, charge_timeout=5.0, persist_backoff=0)

        async def scenario():
            task = asyncio.create_task(coordinator.commit_order("nonce-1", cart, "buyer-1"))
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            await asyncio.sleep(0.3)

        asyncio.run(scenario())

        assert "nonce-1" in fake_gateway.used_nonces


class TestPersistenceFailures:
    def test_transient_ledger_failures_are_retried(self, fake_gateway, make_flaky_ledger, cart):
        ledger = make_flaky_ledger(failures=2)
        coordinator = CheckoutCoordinator(fake_gateway, ledger, persist_attempts=3, persist_backoff=0)

        result = asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        assert ledger.attempts == 3
        assert ledger.find(result.transaction.transaction_id).id == result.order_id
        assert len(_charges(fake_gateway)) == 1

    def test_success_then_ledger_failure_is_persistence_failure(self, fake_gateway, make_flaky_ledger, cart):
        ledger = make_flaky_ledger(failures=10)
        coordinator = CheckoutCoordinator(fake_gateway, ledger, persist_attempts=3, persist_backoff=0)

        with pytest.raises(PersistenceFailure) as exc:
            asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        failure = exc.value
        assert not isinstance(failure, GatewayRejected)
        assert failure.kind == "persistence_failure"
        assert failure.transaction.success is True
        assert failure.product_ids == ["p1", "p2"]
        assert failure.buyer_id == "buyer-1"
        assert failure.to_dict()["transactionId"] == failure.transaction.transaction_id
        assert ledger.attempts == 3
        assert len(_charges(fake_gateway)) == 1
        assert ledger.find(failure.transaction.transaction_id) is None

    def test_reconcile_records_exactly_one_order(self, fake_gateway, make_flaky_ledger, session, cart):
        ledger = make_flaky_ledger(failures=3)
        coordinator = CheckoutCoordinator(fake_gateway, ledger, persist_attempts=3, persist_backoff=0)

        with pytest.raises(PersistenceFailure) as exc:
            asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        first = asyncio.run(coordinator.reconcile(exc.value))
        second = asyncio.run(coordinator.reconcile(exc.value))

        assert first.order_id == second.order_id
        assert first.total == Decimal("19.75")
        assert session.query(Order).count() == 1
        assert len(_charges(fake_gateway)) == 1

    def test_unexpected_ledger_error_is_persistence_failure(self, fake_gateway, cart):
        class RefusingLedger:
            attempts = 0

            def record(self, transaction, product_ids, buyer_id):
                self.attempts += 1
                raise ValidationError({"buyer": ["Buyer is required"]})

        refusing = RefusingLedger()
        coordinator = CheckoutCoordinator(fake_gateway, refusing, persist_attempts=3, persist_backoff=0)

        with pytest.raises(PersistenceFailure) as exc:
            asyncio.run(coordinator.commit_order("nonce-1", cart, "buyer-1"))

        assert isinstance(exc.value.cause, ValidationError)
        assert exc.value.transaction.success is True
        assert refusing.attempts == 1
        assert len(_charges(fake_gateway)) == 1
