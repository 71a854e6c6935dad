from __future__ import annotations

from ..extensions import db


class Customer(db.Model):
    """
    Customer directory entry, read only for this backend.

    Older sign-ups store a single `name`; newer ones store first_name and
    last_name separately. customer_service.resolve_customer_name handles both.
    """
    __tablename__ = "customers"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=True)
    first_name = db.Column(db.String(128), nullable=True)
    last_name = db.Column(db.String(128), nullable=True)
    email = db.Column(db.String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer id={self.id!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
        }
