# backend/orderdesk/routes/orders.py
"""
Order tracking routes for the staff dashboard.

- GET  /api/orders/tracking           - visible orders (optional ?q= search)
- GET  /api/orders/tracking/stream    - live feed as Server-Sent Events
- POST /api/orders/<order_id>/status  - move an order to a new status

SECURITY: Access is gated by the external staff guard in front of this app.
"""

import json

from flask import Blueprint, Response, request, jsonify, current_app, stream_with_context

from ..services import order_status_service, tracking_service
from ..services.order_status_service import OrderStatusError
from ..services.subscription import list_orders


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("/tracking")
def list_tracking_orders_route():
    """
    Run one sync pass and return the staff-visible orders, newest first.

    Query params:
        q: case-insensitive search on order id or customer name
    """
    try:
        orders = tracking_service.sync_visible_orders()
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return jsonify({"error": "Internal server error"}), 500

    matches = tracking_service.search_orders(orders, request.args.get("q", ""))
    return jsonify({
        "orders": [order.to_dict() for order in matches],
        "count": len(matches),
    }), 200


def _sse_message(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


@orders_bp.get("/tracking/stream")
def stream_tracking_orders_route():
    """
    Live order feed. One `orders` event per observed change:

        event: orders
        data: {"orders": [...], "degraded": false}

    The subscription is closed when the client disconnects.
    """
    term = request.args.get("q", "")
    subscription = list_orders()

    def generate():
        try:
            for snapshot in subscription:
                matches = tracking_service.search_orders(snapshot.orders, term)
                yield _sse_message("orders", {
                    "orders": [order.to_dict() for order in matches],
                    "degraded": snapshot.degraded,
                })
        finally:
            subscription.close()

    return Response(
        stream_with_context(generate()),
        content_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@orders_bp.post("/<order_id>/status")
def update_order_status_route(order_id: str):
    """
    Move an order to a new status.

    Body:
        {"status": "Ready for Pickup", "actor": "optional staff name"}

    Response:
        {"order": {...}, "changed": true, "message": "..."}
        changed is false when the order already had that status.

    Error responses:
        400: missing / invalid status, no stock, insufficient stock
        404: order not found
        500: unexpected failure (status unchanged)
    """
    data = request.get_json(silent=True) or {}
    new_status = data.get("status")
    if not new_status:
        return jsonify({"error": "status required"}), 400

    try:
        change = order_status_service.apply_status(order_id, new_status, actor=data.get("actor"))
    except OrderStatusError as e:
        code = 404 if e.kind == "not_found" else 400
        return jsonify({"error": str(e), "details": e.details}), code
    except Exception:
        current_app.logger.exception("Error updating order status")
        return jsonify({"error": "Failed to update order status."}), 500

    return jsonify({
        "order": change.order.to_dict(),
        "changed": change.changed,
        "message": order_status_service.success_message(new_status, change.changed),
    }), 200
