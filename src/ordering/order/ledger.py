"""Order Ledger: durable, idempotent storage of placed orders.

``record`` is an insert-if-absent keyed by transaction id. Re-recording the
same transaction, whether sequentially or from two racing writers, yields
the one stored order; the unique constraint on ``transaction_id`` decides
the race and the loser re-reads the winner.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ordering.domain import logger
from ordering.order.order import Order, PaymentTransaction


class OrderLedger:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def record(self, transaction: PaymentTransaction, product_ids: list[str], buyer_id: str) -> Order:
        with self.session_factory() as session:
            existing = self._by_transaction(session, transaction.transaction_id)
            if existing is not None:
                logger.info("order.already_recorded", order_id=existing.id, transaction_id=transaction.transaction_id)
                return existing

            order = Order.place(transaction, product_ids, buyer_id)
            session.add(order)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                winner = self._by_transaction(session, transaction.transaction_id)
                if winner is None:
                    raise
                logger.info("order.already_recorded", order_id=winner.id, transaction_id=transaction.transaction_id)
                return winner

            logger.info("order.placed", order_id=order.id, transaction_id=transaction.transaction_id, buyer_id=buyer_id)
            return order

    def find(self, transaction_id: str) -> Order | None:
        with self.session_factory() as session:
            return self._by_transaction(session, transaction_id)

    def orders_for(self, buyer_id: str) -> list[Order]:
        with self.session_factory() as session:
            stmt = select(Order).where(Order.buyer_id == buyer_id).order_by(Order.created_at.desc(), Order.id.desc())
            return list(session.scalars(stmt))

    @staticmethod
    def _by_transaction(session: Session, transaction_id: str) -> Order | None:
        return session.scalars(select(Order).where(Order.transaction_id == transaction_id)).first()
