from __future__ import annotations

from ..extensions import db
from orderdesk.time_utils import to_utc_z


class Stock(db.Model):
    """
    On-hand quantity for one size + variety combination.

    Unlike a ledger-derived model, quantity is a mutable field here. It is
    only changed by the status transition protocol, always under a row lock
    and the version_id optimistic check, and every change appends a
    StockHistory row in the same DB transaction.
    """
    __tablename__ = "stocks"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        db.Index("ix_stocks_size_name", "size_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    size_name = db.Column(db.String(64), nullable=False)
    varieties = db.Column(db.JSON, nullable=False, default=list)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Stock id={self.id} size={self.size_name!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "size_name": self.size_name,
            "varieties": list(self.varieties or []),
            "quantity": self.quantity,
            "last_updated": to_utc_z(self.last_updated),
            "version_id": self.version_id,
        }


class StockHistory(db.Model):
    """
    Append-only audit row for a stock mutation.

    previous_stock / current_stock snapshot the quantity read inside the
    transaction that wrote this row. Rows are never updated; is_deleted is
    a soft-delete marker owned by the inventory screens, not by this core.
    """
    __tablename__ = "stockHistory"
    __table_args__ = (
        db.Index("ix_stock_history_stock_date", "stock_id", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    stock_id = db.Column(db.Integer, db.ForeignKey("stocks.id"), nullable=False)

    varieties = db.Column(db.JSON, nullable=False, default=list)
    size_name = db.Column(db.String(64), nullable=False)

    # "in" | "out"
    type = db.Column(db.String(8), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    previous_stock = db.Column(db.Integer, nullable=False)
    current_stock = db.Column(db.Integer, nullable=False)

    date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_by = db.Column(db.String(128), nullable=False, default="System")
    remarks = db.Column(db.String(255), nullable=True)
    is_deleted = db.Column(db.Boolean, nullable=False, default=False)

    stock = db.relationship("Stock", backref=db.backref("history", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stock_id": self.stock_id,
            "varieties": list(self.varieties or []),
            "size_name": self.size_name,
            "type": self.type,
            "quantity": self.quantity,
            "previous_stock": self.previous_stock,
            "current_stock": self.current_stock,
            "date": to_utc_z(self.date),
            "updated_by": self.updated_by,
            "remarks": self.remarks,
            "is_deleted": self.is_deleted,
        }
