# Overview: Pytest coverage for concurrent status transitions against shared stock.

"""
Two staff sessions moving different orders to Ready for Pickup against the
same stock row must serialize: with Q=5 and q=3 each, exactly one wins.

Runs on a file-backed SQLite database so each thread gets its own
connection, as separate app workers would.
"""

import threading
from datetime import datetime

import pytest

from orderdesk import create_app
from orderdesk.extensions import db
from orderdesk.models import Order, OrderItem, Stock, StockHistory
from orderdesk.services.order_status_service import OrderStatusError, update_status


@pytest.fixture
def file_app(tmp_path):
    db_path = tmp_path / "concurrency.db"
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_path}",
        'SQLALCHEMY_ENGINE_OPTIONS': {"connect_args": {"timeout": 15, "check_same_thread": False}},
    })
    with app.app_context():
        db.create_all()

        stock = Stock(size_name="Large", varieties=["Ube", "Cheese"], quantity=5)
        db.session.add(stock)
        for n in (1, 2):
            order = Order(
                id=f"order-{n}",
                user_id=f"cust-{n}",
                status="Preparing Order",
                payment_method="Cash",
                total_amount_cents=75000,
                created_at=datetime(2026, 10, 1, 8, n),
            )
            order.items.append(OrderItem(size="Large", varieties=["Ube"], quantity=3, unit_price_cents=25000))
            db.session.add(order)
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def test_concurrent_ready_for_pickup_one_wins(file_app):
    results = []
    errors = []
    lock = threading.Lock()
    start = threading.Barrier(2)

    def worker(order_id):
        with file_app.app_context():
            try:
                start.wait()
                update_status(order_id, "Ready for Pickup")
                with lock:
                    results.append(order_id)
            except OrderStatusError as exc:
                with lock:
                    errors.append((order_id, exc))
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(f"order-{n}",)) for n in (1, 2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 1
    assert len(errors) == 1
    loser_id, loser_error = errors[0]
    assert loser_error.kind == "insufficient_stock"
    assert str(loser_error) == "Insufficient stock for Large with varieties Ube"

    with file_app.app_context():
        assert db.session.query(Stock).one().quantity == 2
        history = db.session.query(StockHistory).all()
        assert len(history) == 1
        assert history[0].previous_stock == 5
        assert history[0].current_stock == 2
        assert db.session.get(Order, results[0]).status == "Ready for Pickup"
        assert db.session.get(Order, loser_id).status == "Preparing Order"
