# Overview: Live, closable feed of staff-visible orders built on change polling.

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Order, OrderItem
from orderdesk.time_utils import utcnow
from .tracking_service import TrackedOrder, sync_visible_orders


@dataclass(frozen=True)
class OrderSnapshot:
    orders: list[TrackedOrder]
    degraded: bool = False
    taken_at: datetime = field(default_factory=utcnow)


def order_fingerprint() -> tuple:
    """
    Cheap summary of the orders table; any committed change to an order
    (status, payment approval, new order, new items) changes it.
    """
    rows = (
        db.session.query(
            Order.id,
            Order.version_id,
            Order.status,
            Order.payment_status,
            Order.updated_at,
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    item_count = db.session.query(func.count(OrderItem.id)).scalar()
    return tuple(tuple(row) for row in rows) + (("items", item_count),)


class OrderSubscription:
    """
    Iterator over OrderSnapshot values, one per observed change.

    The first next() always yields the current state. Later calls block,
    polling every poll_interval seconds, until something changes or the
    subscription is closed. The owner must close() it on teardown (or use
    it as a context manager); iteration then stops.

    Polling failures are logged and leave the feed degraded: one snapshot
    with degraded=True (carrying the last good orders) is yielded, polling
    continues, and the next successful poll yields a fresh snapshot.

    Must be iterated inside an app context.
    """

    def __init__(self, poll_interval: float):
        self.poll_interval = poll_interval
        self.degraded = False
        self._closed = threading.Event()
        self._fingerprint = None
        self._last_orders: list[TrackedOrder] = []

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __iter__(self):
        return self

    def __next__(self) -> OrderSnapshot:
        while not self.closed:
            snapshot = self.poll()
            if snapshot is not None:
                return snapshot
            self._closed.wait(self.poll_interval)
        raise StopIteration

    def poll(self) -> OrderSnapshot | None:
        """One non-blocking check. Returns a snapshot if there is something new to report."""
        try:
            fingerprint = order_fingerprint()
            if fingerprint == self._fingerprint:
                db.session.rollback()
                return None
            orders = sync_visible_orders()
        except SQLAlchemyError:
            current_app.logger.exception("Error fetching orders")
            db.session.rollback()
            if self.degraded:
                return None
            self.degraded = True
            # Force a fresh snapshot once the store is reachable again
            self._fingerprint = None
            return OrderSnapshot(orders=list(self._last_orders), degraded=True)

        self._fingerprint = fingerprint
        self._last_orders = orders
        self.degraded = False
        return OrderSnapshot(orders=orders)


def list_orders(poll_interval: float | None = None) -> OrderSubscription:
    """Open a live feed of visible orders. The caller owns (and must close) the handle."""
    if poll_interval is None:
        poll_interval = current_app.config.get("TRACKING_POLL_INTERVAL", 2.0)
    return OrderSubscription(poll_interval)
