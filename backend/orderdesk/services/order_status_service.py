# Overview: Order status transitions and their stock / sales side effects, applied atomically.

"""
Order Status Transition Protocol

================================================================================
PURPOSE: Move an order to a new fulfillment status, keeping orders, stocks,
stockHistory and sales consistent in one DB transaction.
================================================================================

STATES:
    Order Placed -> Order Confirmed -> Preparing Order -> Ready for Pickup -> Completed
    Cancelled is reachable from any non-terminal state.
    Completed and Cancelled are terminal.

    Order Placed is written by checkout; staff pick any of the other five.
    With ENFORCE_FORWARD_STATUS off (the default) any target may be set.

SIDE EFFECTS:
    -> Ready for Pickup:
        For every line item, lock the first stock row (lowest id) whose size
        equals the item size and whose varieties match (STOCK_MATCH_POLICY).
        No row        -> abort "No stock found for <size> with varieties <...>"
        quantity < q  -> abort "Insufficient stock for <size> with varieties <...>"
        else decrement, stamp last_updated, append one "out" stockHistory row.
    -> Completed:
        Append one sales row (none if the order already has one) and stamp
        completed_at.
    Always: status and updated_at.

ATOMICITY:
    - One transaction per call, retried on OperationalError / StaleDataError.
    - SQLite: BEGIN IMMEDIATE serializes writers. Other DBs: FOR UPDATE locks
      on the order and stock rows. version_id columns catch anything missed.
    - Quantities are re-read under the lock, never taken from a cached copy.
    - Any abort rolls everything back: the order keeps its old status.
    - Re-applying the status an order already has is a no-op, so two staff
      racing on the same order cannot decrement stock or record a sale twice.
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import Order, Stock, StockHistory, SalesRecord
from orderdesk.time_utils import utcnow
from .concurrency import begin_immediate, lock_for_update, run_with_retry
from .customer_service import UNKNOWN_CUSTOMER, display_name, resolve_customer_name


ORDER_PLACED = "Order Placed"
ORDER_CONFIRMED = "Order Confirmed"
PREPARING_ORDER = "Preparing Order"
READY_FOR_PICKUP = "Ready for Pickup"
COMPLETED = "Completed"
CANCELLED = "Cancelled"

# Statuses staff can pick, in display order
SELECTABLE_STATUSES = (ORDER_CONFIRMED, PREPARING_ORDER, READY_FOR_PICKUP, COMPLETED, CANCELLED)
VALID_STATUSES = {ORDER_PLACED, *SELECTABLE_STATUSES}
TERMINAL_STATUSES = {COMPLETED, CANCELLED}

_PROGRESSION = (ORDER_PLACED, ORDER_CONFIRMED, PREPARING_ORDER, READY_FOR_PICKUP, COMPLETED)

MATCH_OVERLAP = "overlap"
MATCH_SUPERSET = "superset"


class OrderStatusError(Exception):
    """
    Raised when a status transition is rejected. Nothing has been written.

    details["kind"] tells callers what went wrong:
        not_found           - no order with that id (routes answer 404)
        invalid_status      - target is not a known status
        invalid_transition  - blocked by ENFORCE_FORWARD_STATUS
        no_stock            - no stock row matches a line item
        insufficient_stock  - the matching row holds less than the line quantity
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    @property
    def kind(self) -> str | None:
        return self.details.get("kind")


def validate_status(status: str) -> None:
    if status not in VALID_STATUSES:
        raise OrderStatusError(
            f"Invalid status '{status}'. Must be one of: {', '.join(SELECTABLE_STATUSES)}",
            details={"kind": "invalid_status", "status": status},
        )


def can_transition(from_status: str | None, to_status: str, *, enforce_forward: bool = False) -> bool:
    """
    Whether an order may move from from_status to to_status.

    Permissive mode allows every known target. Forward-only mode allows
    same-status no-ops, Cancelled from any non-terminal state, and moves
    further along the progression; nothing leaves a terminal state.
    """
    validate_status(to_status)
    if not enforce_forward:
        return True

    if from_status == to_status:
        return True
    if from_status in TERMINAL_STATUSES:
        return False
    if to_status == CANCELLED:
        return True
    if from_status not in _PROGRESSION:
        return True
    return _PROGRESSION.index(to_status) > _PROGRESSION.index(from_status)


def varieties_match(stock_varieties, requested, policy: str = MATCH_OVERLAP) -> bool:
    """
    overlap: at least one requested variety is carried by the stock row.
    superset: the stock row carries every requested variety.
    """
    stock_set = set(stock_varieties or [])
    requested_set = set(requested or [])
    if not requested_set:
        return False
    if policy == MATCH_SUPERSET:
        return requested_set <= stock_set
    return bool(stock_set & requested_set)


def _describe(size: str, varieties) -> str:
    return f"{size} with varieties {', '.join(varieties or [])}"


def find_matching_stock(size: str, varieties, *, policy: str = MATCH_OVERLAP, lock: bool = False) -> Stock | None:
    """
    First stock row (lowest id) for this size whose varieties match.

    Several rows may overlap the same request; lowest id wins so the choice
    is deterministic.
    """
    query = db.session.query(Stock).filter(Stock.size_name == size).order_by(Stock.id)
    if lock:
        query = lock_for_update(query)
    for stock in query.all():
        if varieties_match(stock.varieties, varieties, policy):
            return stock
    return None


def _reserve_stock_for_pickup(order: Order, *, actor: str, policy: str) -> list[StockHistory]:
    """Decrement stock for every line item. Caller owns the transaction."""
    entries = []
    for item in order.items:
        varieties = list(item.varieties or [])
        stock = find_matching_stock(item.size, varieties, policy=policy, lock=True)
        if stock is None:
            raise OrderStatusError(
                f"No stock found for {_describe(item.size, varieties)}",
                details={"kind": "no_stock", "size": item.size, "varieties": varieties},
            )

        previous = stock.quantity
        if previous < item.quantity:
            raise OrderStatusError(
                f"Insufficient stock for {_describe(item.size, varieties)}",
                details={
                    "kind": "insufficient_stock",
                    "size": item.size,
                    "varieties": varieties,
                    "requested_quantity": item.quantity,
                    "on_hand": previous,
                },
            )

        now = utcnow()
        stock.quantity = previous - item.quantity
        stock.last_updated = now

        entry = StockHistory(
            stock_id=stock.id,
            varieties=varieties,
            size_name=item.size,
            type="out",
            quantity=item.quantity,
            previous_stock=previous,
            current_stock=stock.quantity,
            date=now,
            updated_by=actor,
            remarks=f"Order {order.id} ready for pickup",
            is_deleted=False,
        )
        db.session.add(entry)
        entries.append(entry)

    # Version check on every touched stock row happens here
    db.session.flush()
    return entries


def _record_sale(order: Order, *, customer_name: str, occurred_at) -> SalesRecord:
    """Append the sales row for a completed order. Caller owns the transaction."""
    sale = SalesRecord(
        order_id=order.id,
        amount_cents=order.total_amount_cents,
        date=occurred_at,
        items=[
            {
                "size": item.size,
                "varieties": list(item.varieties or []),
                "quantity": item.quantity,
                "price_cents": item.unit_price_cents,
                "subtotal_cents": item.subtotal_cents,
            }
            for item in order.items
        ],
        payment_method=order.payment_method,
        customer_name=customer_name,
    )
    db.session.add(sale)
    db.session.flush()
    return sale


@dataclass(frozen=True)
class StatusChange:
    """Outcome of apply_status. changed is False when nothing was written."""
    order: Order
    changed: bool


def success_message(new_status: str, changed: bool = True) -> str:
    if not changed:
        return f"Order is already {new_status}."
    if new_status == COMPLETED:
        return "Order completed and sales updated successfully!"
    return "Order status updated successfully!"


def apply_status(order_id: str, new_status: str, *, actor: str | None = None) -> StatusChange:
    """
    Move an order to new_status, applying stock / sales side effects atomically.

    Raises OrderStatusError (nothing written) for an unknown order, an
    invalid or disallowed status, or a stock shortfall. Any other failure
    is rolled back and re-raised.
    """
    validate_status(new_status)

    config = current_app.config
    policy = config.get("STOCK_MATCH_POLICY", MATCH_OVERLAP)
    enforce_forward = config.get("ENFORCE_FORWARD_STATUS", False)
    actor = actor or config.get("STOCK_HISTORY_ACTOR", "System")

    # Name lookup is not transactional; resolve it before taking any locks
    customer_name = UNKNOWN_CUSTOMER
    if new_status == COMPLETED:
        user_id = db.session.query(Order.user_id).filter_by(id=order_id).scalar()
        customer_name = display_name(resolve_customer_name(user_id), UNKNOWN_CUSTOMER)

    def _op():
        begin_immediate()
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise OrderStatusError("Order not found", details={"kind": "not_found", "order_id": order_id})

        if order.status == new_status:
            # Someone else already applied this transition
            db.session.rollback()
            return StatusChange(order=order, changed=False)

        if not can_transition(order.status, new_status, enforce_forward=enforce_forward):
            raise OrderStatusError(
                f"Cannot move order from '{order.status}' to '{new_status}'",
                details={"kind": "invalid_transition", "from": order.status, "to": new_status},
            )

        now = utcnow()
        if new_status == READY_FOR_PICKUP:
            _reserve_stock_for_pickup(order, actor=actor, policy=policy)

        if new_status == COMPLETED:
            # An order moved back out of Completed keeps its original sale
            already_sold = db.session.query(SalesRecord.id).filter_by(order_id=order.id).first()
            if already_sold is None:
                _record_sale(order, customer_name=customer_name, occurred_at=now)
            else:
                current_app.logger.info("Order %s already has a sales record; not recording again", order_id)
            order.completed_at = now

        order.status = new_status
        order.updated_at = now

        db.session.commit()
        current_app.logger.info("Order %s moved to %s", order_id, new_status)
        return StatusChange(order=order, changed=True)

    try:
        return run_with_retry(_op)
    except Exception:
        db.session.rollback()
        raise


def update_status(order_id: str, new_status: str, *, actor: str | None = None) -> Order:
    """apply_status for callers that only need the updated Order."""
    return apply_status(order_id, new_status, actor=actor).order
