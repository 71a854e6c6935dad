from __future__ import annotations

from ..extensions import db
from orderdesk.time_utils import to_utc_z


class SalesRecord(db.Model):
    """
    Completed-sale record written once when an order reaches Completed.

    WHY order_id is unique: a sale is recorded exactly once per order, even
    if two staff sessions race to complete the same order.

    items is a frozen copy of the order lines at completion time:
    [{"size", "varieties", "quantity", "price_cents", "subtotal_cents"}]
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_sales_order_id"),
        db.Index("ix_sales_date", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(64), db.ForeignKey("orders.id"), nullable=False)

    amount_cents = db.Column(db.Integer, nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    items = db.Column(db.JSON, nullable=False, default=list)
    payment_method = db.Column(db.String(32), nullable=False)
    customer_name = db.Column(db.String(255), nullable=False, default="Unknown")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "amount_cents": self.amount_cents,
            "date": to_utc_z(self.date),
            "items": list(self.items or []),
            "payment_method": self.payment_method,
            "customer_name": self.customer_name,
        }
