"""
HTTP surface tests.

Exercise the JSON envelopes end to end through the FastAPI app: camelCase
keys, 2-decimal money, the two POST /sales body shapes and the
{ok: false, error} responses.
"""

import asyncio

import pytest
from sqlalchemy.exc import OperationalError


TOMATOES = {"id": "p1", "name": "Tomatoes", "stock": 100, "cost": 1.50, "price": 3.00}


async def post_product(client, owner_id="u1", **overrides):
    product = {**TOMATOES, **overrides}
    return await client.post("/products", json={"ownerId": owner_id, "product": product})


class TestTomatoesScenario:
    async def test_upsert_then_sale_then_sync(self, client):
        response = await post_product(client)

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        product = body["product"]
        assert product["id"] == "p1"
        assert product["ownerId"] == "u1"
        assert product["name"] == "Tomatoes"
        assert product["stock"] == 100
        assert product["cost"] == 1.5
        assert product["price"] == 3.0
        assert product["createdAt"] == product["updatedAt"]
        assert product["createdAt"].endswith("Z")

        response = await client.post(
            "/sales", json={"ownerId": "u1", "productId": "p1", "quantity": 10, "price": 3.00}
        )

        assert response.status_code == 200
        sale = response.json()["sale"]
        assert sale["productId"] == "p1"
        assert sale["productName"] == "Tomatoes"
        assert sale["productCost"] == 1.5
        assert sale["quantity"] == 10
        assert sale["price"] == 3.0

        response = await client.get("/sync", params={"ownerId": "u1"})

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["products"][0]["stock"] == 90
        assert [s["id"] for s in body["sales"]] == [sale["id"]]


class TestProductsEndpoint:
    async def test_repeat_post_is_idempotent(self, client):
        first = (await post_product(client)).json()["product"]
        second = (await post_product(client)).json()["product"]

        assert first["createdAt"] == second["createdAt"]
        products = (await client.get("/products", params={"ownerId": "u1"})).json()["products"]
        assert len(products) == 1

    async def test_created_at_stable_across_upserts(self, client, clock):
        first = (await post_product(client)).json()["product"]
        second = (await post_product(client, stock=80)).json()["product"]
        third = (await post_product(client, name="Roma", stock=60)).json()["product"]

        assert first["createdAt"] == second["createdAt"] == third["createdAt"]
        assert len({first["updatedAt"], second["updatedAt"], third["updatedAt"]}) == 3

    async def test_integer_id_round_trips_as_string(self, client):
        response = await post_product(client, id=42)

        assert response.json()["product"]["id"] == "42"

    async def test_ids_keep_surrounding_whitespace(self, client):
        response = await post_product(client, owner_id=" u1 ", id=" p1 ")

        product = response.json()["product"]
        assert product["id"] == " p1 "
        assert product["ownerId"] == " u1 "
        synced = (await client.get("/sync", params={"ownerId": " u1 "})).json()["products"]
        assert [p["id"] for p in synced] == [" p1 "]
        assert (await client.get("/sync", params={"ownerId": "u1"})).json()["products"] == []

    async def test_partial_update_keeps_omitted_fields(self, client):
        await post_product(client, stock=50)

        response = await client.post(
            "/products", json={"ownerId": "u1", "product": {"id": "p1", "name": "Roma"}}
        )

        product = response.json()["product"]
        assert product["name"] == "Roma"
        assert product["stock"] == 50
        assert product["cost"] == 1.5
        assert product["price"] == 3.0

    async def test_money_is_rounded_to_two_places(self, client):
        response = await post_product(client, cost=1.234, price=2.999)

        product = response.json()["product"]
        assert product["cost"] == 1.23
        assert product["price"] == 3.0

    @pytest.mark.parametrize(
        "payload",
        [
            {"product": TOMATOES},
            {"ownerId": "", "product": TOMATOES},
            {"ownerId": "u1"},
            {"ownerId": "u1", "product": {**TOMATOES, "id": ""}},
            {"ownerId": "u1", "product": {k: v for k, v in TOMATOES.items() if k != "id"}},
            {"ownerId": "u1", "product": {**TOMATOES, "stock": 2.5}},
        ],
    )
    async def test_invalid_payload_returns_400(self, client, payload):
        response = await client.post("/products", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert body["error"]

    async def test_list_requires_owner(self, client):
        response = await client.get("/products")

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "ownerId is required"}

    async def test_list_is_scoped_to_owner(self, client):
        await post_product(client, owner_id="A")
        await post_product(client, owner_id="B", name="Squash")

        products = (await client.get("/products", params={"ownerId": "B"})).json()["products"]

        assert [p["name"] for p in products] == ["Squash"]

    async def test_delete_product(self, client):
        await post_product(client)

        response = await client.delete("/products/p1", params={"ownerId": "u1"})

        assert response.status_code == 200
        assert response.json()["ok"] is True
        products = (await client.get("/products", params={"ownerId": "u1"})).json()["products"]
        assert products == []

    async def test_delete_other_owners_product_is_not_found(self, client):
        await post_product(client, owner_id="A")

        response = await client.delete("/products/p1", params={"ownerId": "B"})

        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Product not found"}

    async def test_storage_fault_hides_driver_detail(self, client, monkeypatch):
        async def failing_upsert(*args, **kwargs):
            raise OperationalError("INSERT INTO products", {}, Exception("password authentication failed"))

        monkeypatch.setattr("farmsync.domain.sync.service.upsert_product", failing_upsert)

        response = await post_product(client)

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "Failed to save product"}


class TestSalesEndpoint:
    async def test_upsert_shape_accepts_qty_and_client_timestamp(self, client):
        await post_product(client)

        response = await client.post(
            "/sales",
            json={
                "ownerId": "u1",
                "sale": {"id": "s1", "productId": "p1", "qty": 3, "price": 2.75, "createdAt": "2025-12-24T08:15:00Z"},
            },
        )

        assert response.status_code == 200
        sale = response.json()["sale"]
        assert sale["id"] == "s1"
        assert sale["quantity"] == 3
        assert sale["price"] == 2.75
        assert sale["createdAt"] == "2025-12-24T08:15:00Z"
        # The replay path does not touch stock.
        sync = (await client.get("/sync", params={"ownerId": "u1"})).json()
        assert sync["products"][0]["stock"] == 100

    async def test_upsert_shape_accepts_epoch_milliseconds(self, client):
        response = await client.post(
            "/sales",
            json={"ownerId": "u1", "sale": {"id": "s1", "productId": "p1", "qty": 1, "price": 1, "createdAt": 1766564100000}},
        )

        assert response.json()["sale"]["createdAt"] == "2025-12-24T08:15:00Z"

    async def test_resent_sale_is_not_duplicated(self, client):
        payload = {"ownerId": "u1", "sale": {"id": "s1", "productId": "p1", "qty": 1, "price": 1.0}}

        await client.post("/sales", json=payload)
        await client.post("/sales", json=payload)

        sales = (await client.get("/sales", params={"ownerId": "u1"})).json()["sales"]
        assert len(sales) == 1

    async def test_concurrent_sales_drive_stock_negative(self, client):
        await post_product(client, stock=2)
        payload = {"ownerId": "u1", "productId": "p1", "quantity": 2, "price": 3.0}

        responses = await asyncio.gather(
            client.post("/sales", json=payload),
            client.post("/sales", json=payload),
        )

        assert [r.status_code for r in responses] == [200, 200]
        sync = (await client.get("/sync", params={"ownerId": "u1"})).json()
        assert sync["products"][0]["stock"] == -2
        assert len(sync["sales"]) == 2

    async def test_failed_transaction_returns_500_and_leaves_no_sale(self, client, monkeypatch):
        await post_product(client)

        async def failing_decrement(*args, **kwargs):
            raise OperationalError("UPDATE products", {}, Exception("could not serialize access"))

        monkeypatch.setattr("farmsync.domain.sales.service.decrement_stock", failing_decrement)

        response = await client.post(
            "/sales", json={"ownerId": "u1", "productId": "p1", "quantity": 10, "price": 3.0}
        )

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "Failed to record sale"}
        sync = (await client.get("/sync", params={"ownerId": "u1"})).json()
        assert sync["sales"] == []
        assert sync["products"][0]["stock"] == 100

    @pytest.mark.parametrize(
        "payload",
        [
            {"productId": "p1", "quantity": 1, "price": 3.0},
            {"ownerId": "u1", "quantity": 1, "price": 3.0},
            {"ownerId": "u1", "productId": "p1", "price": 3.0},
            {"ownerId": "u1", "productId": "p1", "quantity": 1},
            {"ownerId": "u1", "productId": "p1", "quantity": 0, "price": 3.0},
            {"ownerId": "u1", "productId": "p1", "quantity": 1, "price": -1},
            {"ownerId": "u1", "sale": {"productId": "p1", "qty": 1, "price": 1.0}},
        ],
    )
    async def test_missing_fields_return_400(self, client, payload):
        response = await client.post("/sales", json=payload)

        assert response.status_code == 400
        assert response.json()["ok"] is False

    @pytest.mark.parametrize(
        "payload",
        [
            {"ownerId": "u1", "productId": "p1", "quantity": True, "price": 3.0},
            {"ownerId": "u1", "sale": {"id": "s1", "productId": "p1", "qty": True, "price": 3.0}},
            {"ownerId": "u1", "sale": {"id": "s1", "productId": "p1", "quantity": True, "price": 3.0}},
        ],
    )
    async def test_boolean_quantity_returns_400(self, client, payload):
        await post_product(client)

        response = await client.post("/sales", json=payload)

        assert response.status_code == 400
        sync = (await client.get("/sync", params={"ownerId": "u1"})).json()
        assert sync["sales"] == []
        assert sync["products"][0]["stock"] == 100

    async def test_list_requires_owner(self, client):
        response = await client.get("/sales")

        assert response.status_code == 400
        assert response.json()["ok"] is False


class TestSyncEndpoint:
    async def test_requires_owner(self, client):
        response = await client.get("/sync")

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "ownerId is required"}

    async def test_empty_owner(self, client):
        response = await client.get("/sync", params={"ownerId": "nobody"})

        assert response.json() == {"ok": True, "products": [], "sales": []}

    async def test_newest_first(self, client, clock):
        await post_product(client, id="old")
        await post_product(client, id="new")

        products = (await client.get("/sync", params={"ownerId": "u1"})).json()["products"]

        assert [p["id"] for p in products] == ["new", "old"]

    async def test_orphan_sale_has_null_product_name(self, client):
        await client.post(
            "/sales", json={"ownerId": "u1", "sale": {"id": "s1", "productId": "gone", "qty": 1, "price": 1.0}}
        )

        sales = (await client.get("/sync", params={"ownerId": "u1"})).json()["sales"]

        assert sales[0]["productId"] == "gone"
        assert sales[0]["productName"] is None
        assert sales[0]["productCost"] is None


class TestServiceEndpoints:
    async def test_health(self, client):
        response = await client.get("/health")

        body = response.json()
        assert body["ok"] is True
        assert body["now"].endswith("Z")

    async def test_status_reports_database(self, client):
        response = await client.get("/status")

        body = response.json()
        assert body["ok"] is True
        assert body["database"]["connected"] is True
        assert body["database"]["dialect"] == "sqlite"
        assert body["database"]["version"].startswith("3.")
        assert body["server"]["uptime"] >= 0

    async def test_unknown_route(self, client):
        response = await client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Endpoint not found"}
