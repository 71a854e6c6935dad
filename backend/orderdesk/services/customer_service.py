# Overview: Customer directory lookups used to put a name on each order.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Customer


MISSING_NAME_PART = "N/A"
UNKNOWN_CUSTOMER = "Unknown"
LOADING_CUSTOMER = "Loading..."


@dataclass(frozen=True)
class CustomerName:
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


def split_full_name(name: str) -> CustomerName:
    """Split on the first space: the remainder of the string is the last name."""
    first, _, last = name.strip().partition(" ")
    first = first or MISSING_NAME_PART
    last = last or MISSING_NAME_PART
    return CustomerName(first_name=first, last_name=last)


def resolve_customer_name(customer_id: str | None) -> CustomerName | None:
    """
    Look up a customer's display name.

    Returns None when the customer does not exist or the lookup fails.
    A failed lookup never breaks the caller: the order is still listed,
    just with a placeholder name.
    """
    if not customer_id:
        return None

    try:
        customer = db.session.get(Customer, customer_id)
    except SQLAlchemyError:
        current_app.logger.exception("Error fetching customer %s", customer_id)
        db.session.rollback()
        return None

    if customer is None:
        return None

    if customer.name and customer.name.strip():
        return split_full_name(customer.name)

    return CustomerName(
        first_name=customer.first_name or MISSING_NAME_PART,
        last_name=customer.last_name or MISSING_NAME_PART,
    )


def display_name(name: CustomerName | None, placeholder: str = UNKNOWN_CUSTOMER) -> str:
    return name.full_name if name else placeholder


class CustomerNameCache:
    """Memoizes lookups for the lifetime of one snapshot batch."""

    def __init__(self):
        self._names: dict[str, CustomerName | None] = {}

    def get(self, customer_id: str | None) -> CustomerName | None:
        if customer_id not in self._names:
            self._names[customer_id] = resolve_customer_name(customer_id)
        return self._names[customer_id]
