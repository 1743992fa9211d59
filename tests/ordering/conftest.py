import pytest
from sqlalchemy.exc import OperationalError


class FlakyLedger:
    """Delegates to a real ledger after failing the first ``failures`` writes."""

    def __init__(self, ledger, failures):
        self.ledger = ledger
        self.failures = failures
        self.attempts = 0

    def record(self, transaction, product_ids, buyer_id):
        self.attempts += 1
        if self.failures > 0:
            self.failures -= 1
            raise OperationalError("INSERT INTO orders", {}, Exception("database is locked"))
        return self.ledger.record(transaction, product_ids, buyer_id)

    def find(self, transaction_id):
        return self.ledger.find(transaction_id)

    def orders_for(self, buyer_id):
        return self.ledger.orders_for(buyer_id)


@pytest.fixture()
def ledger(session_factory):
    from ordering.order.ledger import OrderLedger

    return OrderLedger(session_factory)


@pytest.fixture()
def make_flaky_ledger(ledger):
    return lambda failures: FlakyLedger(ledger, failures)


@pytest.fixture()
def coordinator(fake_gateway, ledger):
    from ordering.checkout.coordinator import CheckoutCoordinator

    return CheckoutCoordinator(fake_gateway, ledger, charge_timeout=1.0, persist_attempts=3, persist_backoff=0)


@pytest.fixture()
def cart():
    return [
        {"_id": "p1", "name": "Mug", "price": 12.5},
        {"_id": "p2", "name": "Tote", "price": 7.25},
    ]
