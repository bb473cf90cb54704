"""Unit tests for order API endpoints."""
from decimal import Decimal

from tabletap.services.realtime.notifier import OrderChangeNotifier


async def _place(client, table_number=4):
    await client.post(
        "/api/cart/staff-test/items",
        json={"menu_item_id": "burger", "quantity": 2, "add_on_ids": ["extra-cheese"]},
    )
    await client.post("/api/cart/staff-test/items", json={"menu_item_id": "fries"})
    response = await client.post("/api/cart/staff-test/checkout", json={"table_number": table_number})
    assert response.status_code == 201
    return response.json()


class TestPlaceOrderAPI:
    """Test POST /api/orders."""

    async def test_place_order_with_items(self, client, tables):
        response = await client.post(
            "/api/orders",
            json={
                "table_number": 2,
                "items": [
                    {"menu_item_id": "burger", "quantity": 2, "add_on_ids": ["extra-cheese"]},
                    {"menu_item_id": "fries"},
                ],
                "subtotal": "27.00",
                "tax": "2.70",
                "total": "29.70",
            },
        )

        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert order["items"][0]["menu_item"]["price"] == "10.00"

    async def test_prices_come_from_the_catalog(self, client, tables):
        """A price sent with the line is ignored; totals disagreeing with the menu fail."""
        response = await client.post(
            "/api/orders",
            json={
                "table_number": 2,
                "items": [{"menu_item_id": "burger", "quantity": 3, "menu_item": {"price": "0.01"}}],
            },
        )
        assert response.status_code == 201
        assert Decimal(response.json()["subtotal"]) == Decimal("30.00")

        response = await client.post(
            "/api/orders",
            json={
                "table_number": 2,
                "items": [{"menu_item_id": "burger", "quantity": 3}],
                "subtotal": "0.03",
            },
        )
        assert response.status_code == 422

    async def test_unknown_or_unavailable_items_rejected(self, client, tables):
        for line in (
            {"menu_item_id": "does-not-exist"},
            {"menu_item_id": "milkshake"},
            {"menu_item_id": "fries", "add_on_ids": ["bacon"]},
        ):
            response = await client.post("/api/orders", json={"table_number": 2, "items": [line]})

            assert response.status_code == 422
            assert response.json()["error"] == "ValidationError"

        assert (await client.get("/api/orders")).json() == []

    async def test_empty_order_rejected(self, client, tables):
        response = await client.post("/api/orders", json={"table_number": 2, "items": []})

        assert response.status_code == 422


class TestStatusAPI:
    """Test status changes over HTTP."""

    async def test_end_to_end(self, client, tables):
        order = await _place(client)

        for status in ("accepted", "preparing", "ready", "served"):
            response = await client.patch(
                f"/api/orders/{order['id']}/status", json={"status": status}
            )
            assert response.status_code == 200
            assert response.json()["status"] == status

        response = await client.get(f"/api/orders/{order['id']}")
        assert response.json()["status"] == "served"
        assert Decimal(response.json()["total"]) == Decimal("29.70")

    async def test_skip_rejected_with_conflict(self, client, tables):
        order = await _place(client)

        response = await client.patch(f"/api/orders/{order['id']}/status", json={"status": "ready"})

        assert response.status_code == 409
        assert response.json()["error"] == "InvalidTransitionError"

    async def test_double_accept(self, client, tables):
        order = await _place(client)
        url = f"/api/orders/{order['id']}/status"

        assert (await client.patch(url, json={"status": "accepted"})).status_code == 200
        assert (await client.patch(url, json={"status": "accepted"})).status_code == 409

    async def test_unknown_order(self, client, tables):
        response = await client.patch("/api/orders/nope/status", json={"status": "accepted"})

        assert response.status_code == 404

    async def test_advance(self, client, tables):
        order = await _place(client)

        response = await client.post(f"/api/orders/{order['id']}/advance")

        assert response.json()["status"] == "accepted"

    async def test_status_change_notifies(self, client, tables, notifier: OrderChangeNotifier):
        order = await _place(client)
        events = []
        notifier.on_change(events.append)

        await client.post(f"/api/orders/{order['id']}/advance")

        assert [(e.event, e.order_id) for e in events] == [("UPDATE", order["id"])]


class TestOrderViewsAPI:
    """Test kitchen and dashboard listings."""

    async def test_kitchen_and_dashboard(self, client, tables):
        waiting = await _place(client, table_number=1)
        cooking = await _place(client, table_number=2)
        await client.post(f"/api/orders/{cooking['id']}/advance")

        kitchen = (await client.get("/api/orders/kitchen")).json()
        dashboard = (await client.get("/api/orders/dashboard")).json()

        assert [o["id"] for o in kitchen] == [cooking["id"]]
        assert [o["id"] for o in dashboard["columns"]["pending"]] == [waiting["id"]]
        assert [o["id"] for o in dashboard["columns"]["in_progress"]] == [cooking["id"]]
        assert dashboard["actions"]["pending"] == "Accept"

    async def test_list_filters(self, client, tables):
        first = await _place(client, table_number=1)
        await _place(client, table_number=2)
        await client.post(f"/api/orders/{first['id']}/advance")

        accepted = (await client.get("/api/orders", params={"status": "accepted"})).json()
        table_two = (await client.get("/api/orders", params={"table_number": 2})).json()

        assert [o["id"] for o in accepted] == [first["id"]]
        assert [o["table_number"] for o in table_two] == [2]
