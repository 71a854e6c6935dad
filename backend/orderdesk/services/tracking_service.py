# Overview: Staff-visible order listing: visibility rule, name enrichment, tracking projection sync, search.

"""
Tracking projection invariants (authoritative)

- An order is visible to staff once its payment is ready:
    GCash orders only when payment_status == "approved";
    every other method unless payment_status == "pending" (NULL is visible).
- tracking_orders holds at most one row per order_id.
- Upsert is query-then-branch: insert sets created_at and updated_at;
  update overwrites every mirrored field and refreshes updated_at only.
- Re-applying the same order state converges to the same row, so duplicate
  or out-of-order sync passes are harmless.
- The projection is never read back into business logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..models import Order, TrackingOrder
from orderdesk.time_utils import utcnow, to_utc_z
from .. import presentation
from .customer_service import (
    CustomerName,
    CustomerNameCache,
    LOADING_CUSTOMER,
    UNKNOWN_CUSTOMER,
    display_name,
)


PAYMENT_METHOD_GCASH = "GCash"
PAYMENT_STATUS_PENDING = "pending"
PAYMENT_STATUS_APPROVED = "approved"


@dataclass(frozen=True)
class TrackedOrder:
    """Immutable, customer-enriched view of one order as staff see it."""
    order_id: str
    user_id: str
    customer: CustomerName | None
    status: str | None
    payment_method: str
    payment_status: str | None
    total_amount_cents: int
    pickup_date: str | None
    pickup_time: str | None
    created_at: datetime | None
    updated_at: datetime | None
    items: tuple = field(default_factory=tuple)

    @property
    def full_name(self) -> str | None:
        return self.customer.full_name if self.customer else None

    def to_dict(self) -> dict:
        return {
            "id": self.order_id,
            "user_id": self.user_id,
            "customer_name": self.full_name,
            "status": self.status,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "total_amount_cents": self.total_amount_cents,
            "pickup_date": self.pickup_date,
            "pickup_time": self.pickup_time,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "items": [dict(item) for item in self.items],
            "display": {
                "short_id": presentation.short_order_id(self.order_id),
                "created_on": presentation.format_display_date(self.created_at),
                "customer_name": display_name(self.customer, LOADING_CUSTOMER),
                "status_badge": presentation.status_badge(self.status),
                "payment_badge": presentation.payment_badge(self.payment_method, self.payment_status),
                "payment_label": presentation.payment_label(self.payment_method, self.payment_status),
            },
        }


def is_visible_to_staff(order) -> bool:
    """Works on anything with payment_method / payment_status (Order or TrackedOrder)."""
    if order.payment_method == PAYMENT_METHOD_GCASH:
        return order.payment_status == PAYMENT_STATUS_APPROVED
    return order.payment_status != PAYMENT_STATUS_PENDING


def track_order(order: Order, customer: CustomerName | None) -> TrackedOrder:
    items = tuple(
        {
            "cart_id": item.cart_id,
            "size": item.size,
            "varieties": list(item.varieties or []),
            "quantity": item.quantity,
            "unit_price_cents": item.unit_price_cents,
        }
        for item in order.items
    )
    return TrackedOrder(
        order_id=order.id,
        user_id=order.user_id,
        customer=customer,
        status=order.status,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        total_amount_cents=order.total_amount_cents,
        pickup_date=order.pickup_date,
        pickup_time=order.pickup_time,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
    )


def _projection_fields(tracked: TrackedOrder) -> dict:
    return {
        "user_id": tracked.user_id,
        "customer_name": display_name(tracked.customer, UNKNOWN_CUSTOMER),
        "payment_method": tracked.payment_method,
        "payment_status": tracked.payment_status or "unknown",
        "order_status": tracked.status or "unknown",
        "order_created_at": tracked.created_at,
        "pickup_date": tracked.pickup_date,
        "pickup_time": tracked.pickup_time,
        "total_amount_cents": tracked.total_amount_cents,
        "items": [dict(item) for item in tracked.items],
    }


def upsert_tracking_order(tracked: TrackedOrder) -> TrackingOrder:
    """
    Insert or refresh the projection row for one order. Flushes, does not commit.

    Raises IntegrityError if a concurrent writer inserted the same order_id
    first; save_tracking_order handles that by retrying as an update.
    """
    now = utcnow()
    fields = _projection_fields(tracked)

    row = db.session.query(TrackingOrder).filter_by(order_id=tracked.order_id).first()
    if row is None:
        row = TrackingOrder(order_id=tracked.order_id, created_at=now, updated_at=now, **fields)
        db.session.add(row)
    else:
        for key, value in fields.items():
            setattr(row, key, value)
        row.updated_at = now

    db.session.flush()
    return row


def save_tracking_order(tracked: TrackedOrder) -> TrackingOrder | None:
    """
    Upsert and commit one projection row.

    Projection failures are logged and swallowed: a stale tracking row must
    never stop staff from seeing the live order list.
    """
    try:
        row = upsert_tracking_order(tracked)
        db.session.commit()
        return row
    except IntegrityError:
        # Lost the insert race; the row exists now, so this pass is an update.
        db.session.rollback()
        try:
            row = upsert_tracking_order(tracked)
            db.session.commit()
            return row
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Error saving tracking order %s", tracked.order_id)
            return None
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Error saving tracking order %s", tracked.order_id)
        return None


def load_tracked_orders() -> list[TrackedOrder]:
    """All orders, newest first, enriched with customer names (no visibility filter)."""
    orders = (
        db.session.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .populate_existing()
        .all()
    )
    names = CustomerNameCache()
    return [track_order(order, names.get(order.user_id)) for order in orders]


def sync_visible_orders() -> list[TrackedOrder]:
    """
    One full sync pass: enrich every order, keep the staff-visible ones,
    upsert each into tracking_orders, and return them newest first.
    """
    visible = [tracked for tracked in load_tracked_orders() if is_visible_to_staff(tracked)]

    for tracked in visible:
        save_tracking_order(tracked)

    # End the read transaction so the next pass sees fresh commits
    db.session.commit()
    return visible


def search_orders(orders, term: str | None) -> list[TrackedOrder]:
    """Case-insensitive substring match on order id or the customer's full name."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(orders)

    matches = []
    for tracked in orders:
        if needle in tracked.order_id.lower():
            matches.append(tracked)
        elif tracked.full_name and needle in tracked.full_name.lower():
            matches.append(tracked)
    return matches
