"""
Pytest fixtures for orderdesk backend tests.

Provides an in-memory database app, a per-test table wipe, a test client,
and factories for customers, orders and stock rows.
"""

from datetime import datetime, timedelta

import pytest
from orderdesk import create_app
from orderdesk.extensions import db
from orderdesk.models import Customer, Order, OrderItem, Stock


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'TRACKING_POLL_INTERVAL': 0.01,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def make_customer(db_session):
    """Factory: make_customer("cust-1", name="Ana Cruz") or first_name=/last_name=."""
    def _make(customer_id: str, **fields) -> Customer:
        customer = Customer(id=customer_id, **fields)
        db_session.add(customer)
        db_session.commit()
        return customer
    return _make


@pytest.fixture(scope='function')
def make_stock(db_session):
    """Factory: make_stock("Large", ["Ube", "Cheese"], quantity=5)."""
    def _make(size_name: str, varieties: list[str], quantity: int) -> Stock:
        stock = Stock(size_name=size_name, varieties=list(varieties), quantity=quantity)
        db_session.add(stock)
        db_session.commit()
        return stock
    return _make


@pytest.fixture(scope='function')
def make_order(db_session):
    """
    Factory for checkout-style orders.

    items: list of (size, varieties, quantity, unit_price_cents) tuples.
    The total is computed from the items, as checkout does.
    Each call gets a creation time one minute after the previous one, so
    "newest first" ordering is deterministic.
    """
    counter = {"n": 0}
    base = datetime(2026, 10, 1, 8, 0, 0)

    def _make(
        order_id: str,
        *,
        user_id: str = "cust-1",
        items=(("Large", ["Ube"], 1, 25000),),
        status: str = "Order Confirmed",
        payment_method: str = "Cash",
        payment_status: str | None = None,
        created_at: datetime | None = None,
    ) -> Order:
        counter["n"] += 1
        order = Order(
            id=order_id,
            user_id=user_id,
            status=status,
            payment_method=payment_method,
            payment_status=payment_status,
            total_amount_cents=sum(qty * price for _, _, qty, price in items),
            pickup_date="2026-10-20",
            pickup_time="10:30 AM",
            created_at=created_at or base + timedelta(minutes=counter["n"]),
        )
        for size, varieties, qty, price in items:
            order.items.append(OrderItem(
                size=size,
                varieties=list(varieties),
                quantity=qty,
                unit_price_cents=price,
            ))
        db_session.add(order)
        db_session.commit()
        return order
    return _make
