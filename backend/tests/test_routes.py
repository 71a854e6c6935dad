# Overview: Pytest coverage for the HTTP surface (tracking list, live stream, status updates, health).

import json

from orderdesk.models import Order, SalesRecord, Stock


class TestTrackingRoutes:

    def test_lists_visible_orders(self, client, db_session, make_customer, make_order):
        make_customer("cust-1", name="Ana Cruz")
        make_order("order-1")
        make_order("order-2", payment_method="GCash", payment_status="pending")

        response = client.get("/api/orders/tracking")

        assert response.status_code == 200
        body = response.get_json()
        assert body["count"] == 1
        order = body["orders"][0]
        assert order["id"] == "order-1"
        assert order["customer_name"] == "Ana Cruz"
        assert order["created_at"].endswith("Z")
        assert order["display"]["short_id"] == "#order-"
        assert order["display"]["status_badge"] == "bg-purple-100 text-purple-800"
        assert order["display"]["created_on"] == "October 1, 2026"

    def test_search_query(self, client, db_session, make_customer, make_order):
        make_customer("cust-1", name="Ana Cruz")
        make_customer("cust-2", name="Ben Santos")
        make_order("aaa111", user_id="cust-1")
        make_order("bbb222", user_id="cust-2")

        body = client.get("/api/orders/tracking?q=santos").get_json()
        assert [o["id"] for o in body["orders"]] == ["bbb222"]

        body = client.get("/api/orders/tracking?q=AAA").get_json()
        assert [o["id"] for o in body["orders"]] == ["aaa111"]

    def test_stream_emits_orders_event(self, client, db_session, make_order):
        make_order("order-1")

        response = client.get("/api/orders/tracking/stream")
        try:
            assert response.status_code == 200
            assert response.mimetype == "text/event-stream"
            chunk = next(iter(response.response))
        finally:
            response.close()

        text = chunk.decode() if isinstance(chunk, bytes) else chunk
        event, data = text.strip().split("\n")
        assert event == "event: orders"
        payload = json.loads(data[len("data: "):])
        assert payload["degraded"] is False
        assert [o["id"] for o in payload["orders"]] == ["order-1"]


class TestStatusRoute:

    def test_ready_for_pickup(self, client, db_session, make_order, make_stock):
        stock = make_stock("Large", ["Ube"], 5)
        make_order("order-1", items=[("Large", ["Ube"], 3, 25000)])

        response = client.post("/api/orders/order-1/status", json={"status": "Ready for Pickup", "actor": "Jane"})

        assert response.status_code == 200
        body = response.get_json()
        assert body["order"]["status"] == "Ready for Pickup"
        assert body["changed"] is True
        assert body["message"] == "Order status updated successfully!"
        assert db_session.get(Stock, stock.id).quantity == 2

    def test_completed_message(self, client, db_session, make_order):
        make_order("order-1", status="Ready for Pickup")

        response = client.post("/api/orders/order-1/status", json={"status": "Completed"})

        assert response.status_code == 200
        assert response.get_json()["message"] == "Order completed and sales updated successfully!"
        assert db_session.query(SalesRecord).count() == 1

    def test_repeat_status_reports_no_change(self, client, db_session, make_order):
        make_order("order-1", status="Ready for Pickup")
        client.post("/api/orders/order-1/status", json={"status": "Completed"})

        response = client.post("/api/orders/order-1/status", json={"status": "Completed"})

        assert response.status_code == 200
        body = response.get_json()
        assert body["changed"] is False
        assert body["message"] == "Order is already Completed."
        assert db_session.query(SalesRecord).count() == 1

    def test_insufficient_stock_is_400(self, client, db_session, make_order, make_stock):
        make_stock("Large", ["Ube"], 2)
        make_order("order-1", items=[("Large", ["Ube"], 3, 25000)])

        response = client.post("/api/orders/order-1/status", json={"status": "Ready for Pickup"})

        assert response.status_code == 400
        body = response.get_json()
        assert body["error"] == "Insufficient stock for Large with varieties Ube"
        assert body["details"]["kind"] == "insufficient_stock"
        assert db_session.get(Order, "order-1").status == "Order Confirmed"

    def test_no_stock_is_400(self, client, db_session, make_order):
        make_order("order-1")

        response = client.post("/api/orders/order-1/status", json={"status": "Ready for Pickup"})

        assert response.status_code == 400
        assert response.get_json()["error"] == "No stock found for Large with varieties Ube"

    def test_missing_status_is_400(self, client, db_session, make_order):
        make_order("order-1")

        response = client.post("/api/orders/order-1/status", json={})

        assert response.status_code == 400
        assert response.get_json()["error"] == "status required"

    def test_unknown_order_is_404(self, client, db_session):
        response = client.post("/api/orders/missing/status", json={"status": "Completed"})

        assert response.status_code == 404
        assert response.get_json()["error"] == "Order not found"

    def test_unexpected_failure_is_500(self, client, db_session, make_order, monkeypatch):
        from orderdesk.services import order_status_service

        make_order("order-1")

        def _boom(*args, **kwargs):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr(order_status_service, "apply_status", _boom)

        response = client.post("/api/orders/order-1/status", json={"status": "Cancelled"})

        assert response.status_code == 500
        assert response.get_json()["error"] == "Failed to update order status."


def test_health(client, db_session, make_order):
    make_order("order-1")

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "healthy"
    assert body["database"]["details"]["orders"] == 1
    assert body["checked_at"].endswith("Z")
