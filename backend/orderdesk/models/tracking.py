from __future__ import annotations

from ..extensions import db
from orderdesk.time_utils import to_utc_z


class TrackingOrder(db.Model):
    """
    Denormalized staff-visible copy of an order plus the customer's name.

    WHY: Presentation artifact only. It is written by tracking_service and
    never read back into business logic, so it may lag the orders table by
    one sync pass.

    TIMESTAMPS:
    - created_at is set once, when the row is first inserted
    - updated_at is refreshed on every upsert
    - order_created_at mirrors the order's own creation time
    """
    __tablename__ = "tracking_orders"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_tracking_orders_order_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(64), nullable=False)
    user_id = db.Column(db.String(64), nullable=False)
    customer_name = db.Column(db.String(255), nullable=False, default="Unknown")

    payment_method = db.Column(db.String(32), nullable=False)
    payment_status = db.Column(db.String(16), nullable=False, default="unknown")
    order_status = db.Column(db.String(32), nullable=False, default="unknown")

    order_created_at = db.Column(db.DateTime(timezone=True), nullable=True)
    pickup_date = db.Column(db.String(32), nullable=True)
    pickup_time = db.Column(db.String(32), nullable=True)
    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)
    items = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "user_id": self.user_id,
            "customer_name": self.customer_name,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "order_status": self.order_status,
            "order_created_at": to_utc_z(self.order_created_at),
            "pickup_date": self.pickup_date,
            "pickup_time": self.pickup_time,
            "total_amount_cents": self.total_amount_cents,
            "items": list(self.items or []),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
