"""Unit tests for menu, table and health API endpoints."""


class TestMenuAPI:
    """Test menu API endpoints."""

    async def test_get_menu(self, client):
        """GET /api/menu returns available items and categories."""
        response = await client.get("/api/menu")

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data["categories"]] == ["mains", "sides", "drinks"]
        assert [i["id"] for i in data["items"]] == ["burger", "fries", "soda"]

        burger = data["items"][0]
        assert burger["price"] == "10.00"
        assert [a["id"] for a in burger["add_ons"]] == ["extra-cheese", "bacon"]

    async def test_get_items_by_category(self, client):
        response = await client.get("/api/menu/items", params={"category": "drinks"})

        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == ["soda"]

    async def test_get_veg_items(self, client):
        response = await client.get("/api/menu/items", params={"veg_only": "true"})

        assert {i["id"] for i in response.json()} == {"fries", "soda"}

    async def test_get_unknown_item(self, client):
        response = await client.get("/api/menu/items/pizza")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFoundError"


class TestTablesAPI:
    """Test table registration."""

    async def test_create_and_list_tables(self, client):
        for number in (2, 1):
            response = await client.post("/api/tables", json={"table_number": number})
            assert response.status_code == 201

        response = await client.get("/api/tables")

        assert [t["table_number"] for t in response.json()] == [1, 2]

    async def test_duplicate_table(self, client):
        await client.post("/api/tables", json={"table_number": 1})

        response = await client.post("/api/tables", json={"table_number": 1})

        assert response.status_code == 422
        assert response.json()["error"] == "ValidationError"


class TestHealthAPI:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
