from __future__ import annotations

from uuid import uuid4

from ..extensions import db
from orderdesk.time_utils import to_utc_z


def _new_order_id() -> str:
    return uuid4().hex


class Order(db.Model):
    """
    Customer order as written by the checkout flow.

    WHY: The checkout flow owns creation. This backend only moves an order
    through its fulfillment statuses (see order_status_service), which is
    the single writer after creation. Orders are never deleted here.

    PAYMENT: payment_status is meaningful only for GCash orders and is set
    externally once the wallet payment is approved. NULL means "unknown".
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_created_at", "created_at"),
        db.Index("ix_orders_status", "status"),
    )

    id = db.Column(db.String(64), primary_key=True, default=_new_order_id)
    user_id = db.Column(db.String(64), nullable=False, index=True)

    status = db.Column(db.String(32), nullable=False, default="Order Placed")

    payment_method = db.Column(db.String(32), nullable=False, default="Cash")
    payment_status = db.Column(db.String(16), nullable=True)
    gcash_reference = db.Column(db.String(64), nullable=True)

    # Authoritative storage in cents
    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)

    pickup_date = db.Column(db.String(32), nullable=True)
    pickup_time = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=True)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    items = db.relationship(
        "OrderItem",
        backref="order",
        lazy="selectin",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "status": self.status,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "gcash_reference": self.gcash_reference,
            "total_amount_cents": self.total_amount_cents,
            "pickup_date": self.pickup_date,
            "pickup_time": self.pickup_time,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "completed_at": to_utc_z(self.completed_at),
            "items": [item.to_dict() for item in self.items],
            "version_id": self.version_id,
        }


class OrderItem(db.Model):
    """One ordered product: a size with one or more varieties."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(64), db.ForeignKey("orders.id"), nullable=False, index=True)
    cart_id = db.Column(db.String(64), nullable=True)

    size = db.Column(db.String(64), nullable=False)
    varieties = db.Column(db.JSON, nullable=False, default=list)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)

    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cart_id": self.cart_id,
            "size": self.size,
            "varieties": list(self.varieties or []),
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "subtotal_cents": self.subtotal_cents,
        }
