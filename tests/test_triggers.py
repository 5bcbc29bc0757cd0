"""
Tests for the order_history audit trigger
"""

from decimal import Decimal

import pytest
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import DBAPIError

from storefront.models import Order, OrderHistory
from storefront.triggers import (
    CREATE_STATEMENTS,
    drop_triggers,
    install_triggers,
    statements_for,
)


def count_history(session):
    return session.execute(select(func.count()).select_from(OrderHistory)).scalar_one()


@pytest.fixture
def order(db_session, customer):
    order = Order(customer_id=customer.customer_id, total_amount=Decimal("179.98"))
    db_session.add(order)
    db_session.commit()
    return order


class TestOrderHistoryTrigger:
    """Test that inserting order details populates order_history"""

    def test_one_history_row_per_detail(self, db_session, order, product):
        detail = order.add_detail(product, 2)
        db_session.commit()

        history = db_session.query(OrderHistory).all()

        assert len(history) == 1
        entry = history[0]
        assert entry.order_detail_id == detail.order_detail_id
        assert entry.order_id == order.order_id
        assert entry.product_id == product.product_id
        assert entry.quantity == 2
        assert entry.unit_price == Decimal("89.99")

    def test_history_copies_customer_and_date_from_order(
        self, db_session, order, product
    ):
        order.add_detail(product, 1)
        db_session.commit()

        entry = db_session.query(OrderHistory).one()

        assert entry.customer_id == order.customer_id
        assert entry.order_date == order.order_date
        assert entry.recorded_at is not None

    def test_multiple_details_produce_matching_rows(self, db_session, order, product):
        details = [order.add_detail(product, quantity) for quantity in (1, 2, 3)]
        db_session.commit()

        recorded = {
            entry.order_detail_id: entry.quantity
            for entry in db_session.query(OrderHistory).all()
        }

        assert recorded == {detail.order_detail_id: detail.quantity for detail in details}

    def test_rejected_detail_leaves_no_history(self, db_session, order, product):
        order.add_detail(product, 0)
        with pytest.raises(DBAPIError):
            db_session.commit()
        db_session.rollback()

        assert count_history(db_session) == 0

    def test_updating_order_does_not_touch_history(self, db_session, order, product):
        order.add_detail(product, 1)
        db_session.commit()

        order.total_amount = Decimal("1.00")
        db_session.commit()

        assert count_history(db_session) == 1


class TestOrderHistoryAppendOnly:
    """Test that order_history rejects updates and deletes"""

    def test_update_rejected(self, db_session, order, product):
        order.add_detail(product, 1)
        db_session.commit()

        with pytest.raises(DBAPIError):
            db_session.execute(update(OrderHistory).values(quantity=99))
        db_session.rollback()

        assert db_session.query(OrderHistory).one().quantity == 1

    def test_delete_rejected(self, db_session, order, product):
        order.add_detail(product, 1)
        db_session.commit()

        with pytest.raises(DBAPIError):
            db_session.execute(delete(OrderHistory))
        db_session.rollback()

        assert count_history(db_session) == 1


class TestTriggerManagement:
    """Test installing and dropping triggers on an existing database"""

    def test_install_is_idempotent(self, db_engine, db_session, order, product):
        install_triggers(db_engine)
        install_triggers(db_engine)

        order.add_detail(product, 1)
        db_session.commit()

        assert count_history(db_session) == 1

    def test_drop_triggers_stops_history(self, db_engine, db_session, order, product):
        drop_triggers(db_engine)

        order.add_detail(product, 1)
        db_session.commit()

        assert count_history(db_session) == 0

    def test_statements_for_known_dialects(self):
        assert statements_for("sqlite") is CREATE_STATEMENTS["sqlite"]
        assert any(
            "record_order_history" in statement
            for statement in statements_for("postgresql")
        )

    def test_statements_for_unknown_dialect(self):
        with pytest.raises(ValueError, match="mysql"):
            statements_for("mysql")
