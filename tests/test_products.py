import pytest


def _product_payload(category_id, **overrides):
    payload = {
        "name": "Claw Hammer",
        "sku": "HAM-100",
        "categoryId": category_id,
        "price": "24.99",
        "description": "16oz steel hammer",
    }
    payload.update(overrides)
    return payload


async def test_create_product_starts_at_zero_quantity(client, admin_headers, category):
    response = await client.post("/products", json=_product_payload(category.id), headers=admin_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["quantity"] == 0
    assert data["sku"] == "HAM-100"
    assert data["categoryId"] == category.id
    assert data["categoryName"] == "Hardware"
    assert data["lowStockThreshold"] == 10
    assert data["active"] is True
    assert data["deletedAt"] is None
    assert "createdAt" in data


async def test_create_product_keeps_numeric_sku_as_string(client, admin_headers, category):
    response = await client.post(
        "/products", json=_product_payload(category.id, sku="000123"), headers=admin_headers
    )

    assert response.status_code == 201
    assert response.json()["data"]["sku"] == "000123"


async def test_create_product_rejects_quantity(client, admin_headers, category):
    response = await client.post(
        "/products", json=_product_payload(category.id, quantity=50), headers=admin_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert body["details"][0]["field"] == "quantity"


async def test_create_product_with_unknown_category(client, admin_headers, category):
    response = await client.post(
        "/products", json=_product_payload(category.id + 99), headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_CATEGORY"


async def test_duplicate_sku_is_conflict(client, admin_headers, category, make_product):
    await make_product(sku="HAM-100")

    response = await client.post("/products", json=_product_payload(category.id), headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["error_code"] == "PRODUCT_SKU_EXISTS"


@pytest.mark.parametrize("price", ["0", "-1.00", "1.999"])
async def test_create_product_rejects_bad_price(client, admin_headers, category, price):
    response = await client.post(
        "/products", json=_product_payload(category.id, price=price), headers=admin_headers
    )

    assert response.status_code == 400


async def test_update_product_fields(client, admin_headers, make_product):
    product = await make_product(quantity=3, sku="OLD-1")

    response = await client.put(
        f"/products/{product.id}",
        json={"name": "Framing Hammer", "price": "31.00", "lowStockThreshold": 2, "active": False},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Framing Hammer"
    assert data["price"] in ("31.00", 31.0)
    assert data["lowStockThreshold"] == 2
    assert data["active"] is False
    assert data["quantity"] == 3
    assert data["sku"] == "OLD-1"


async def test_update_product_rejects_quantity_and_empty_payload(client, admin_headers, make_product):
    product = await make_product(quantity=3)

    response = await client.put(f"/products/{product.id}", json={"quantity": 99}, headers=admin_headers)
    assert response.status_code == 400

    response = await client.put(f"/products/{product.id}", json={}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


async def test_update_product_duplicate_sku_and_bad_category(client, admin_headers, make_product, category):
    await make_product(name="Taken", sku="TAKEN-1")
    product = await make_product(name="Mine", sku="MINE-1")

    response = await client.put(f"/products/{product.id}", json={"sku": "TAKEN-1"}, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "PRODUCT_SKU_EXISTS"

    response = await client.put(
        f"/products/{product.id}", json={"categoryId": category.id + 50}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_CATEGORY"


async def test_soft_deleted_product_hidden_from_list_but_retrievable(client, admin_headers, make_product):
    keep = await make_product(name="Keep me")
    gone = await make_product(name="Remove me")

    response = await client.delete(f"/products/{gone.id}", headers=admin_headers)
    assert response.status_code == 200

    listed = (await client.get("/products", headers=admin_headers)).json()["data"]
    assert [p["id"] for p in listed["products"]] == [keep.id]
    assert listed["pagination"]["total"] == 1

    response = await client.get(f"/products/{gone.id}", headers=admin_headers)
    assert response.status_code == 404

    response = await client.get(f"/products/{gone.id}?includeDeleted=true", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["deletedAt"] is not None

    listed = (await client.get("/products?includeDeleted=true", headers=admin_headers)).json()["data"]
    assert {p["id"] for p in listed["products"]} == {keep.id, gone.id}

    # deleting again is a miss
    response = await client.delete(f"/products/{gone.id}", headers=admin_headers)
    assert response.status_code == 404


async def test_list_filters_combine(client, admin_headers, make_product):
    await make_product(name="Steel nails", quantity=0, price="3.00", description="box of 100")
    await make_product(name="Brass screws", quantity=5, price="7.50", threshold=10)
    await make_product(name="Power drill", quantity=40, price="129.00", description="cordless steel chuck")
    await make_product(name="Retired sander", quantity=8, price="60.00", active=False)

    async def names(query):
        response = await client.get(f"/products?{query}", headers=admin_headers)
        assert response.status_code == 200
        return sorted(p["name"] for p in response.json()["data"]["products"])

    assert await names("search=STEEL") == ["Power drill", "Steel nails"]
    assert await names("inStock=false") == ["Steel nails"]
    assert await names("inStock=true&lowStock=true") == ["Brass screws", "Retired sander"]
    assert await names("lowStock=false") == ["Power drill"]
    assert await names("minPrice=5&maxPrice=100") == ["Brass screws", "Retired sander"]
    assert await names("active=false") == ["Retired sander"]
    assert await names("active=true&minPrice=100") == ["Power drill"]


async def test_list_pagination_newest_first(client, admin_headers, make_product):
    created = [await make_product(name=f"Item {i}") for i in range(5)]

    response = await client.get("/products?page=2&limit=2", headers=admin_headers)

    data = response.json()["data"]
    assert data["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}
    assert [p["id"] for p in data["products"]] == [created[2].id, created[1].id]


async def test_list_limit_is_capped(client, admin_headers):
    response = await client.get("/products?limit=101", headers=admin_headers)
    assert response.status_code == 400


async def test_low_and_out_of_stock_lists(client, admin_headers, make_product):
    await make_product(name="Empty", quantity=0, threshold=5)
    await make_product(name="Low", quantity=3, threshold=5)
    await make_product(name="Plenty", quantity=50, threshold=5)

    low = (await client.get("/products/low-stock", headers=admin_headers)).json()["data"]
    assert low["count"] == 2
    assert [p["name"] for p in low["products"]] == ["Empty", "Low"]

    low = (await client.get("/products/low-stock?threshold=1", headers=admin_headers)).json()["data"]
    assert [p["name"] for p in low["products"]] == ["Empty"]

    out = (await client.get("/products/out-of-stock", headers=admin_headers)).json()["data"]
    assert out["count"] == 1
    assert out["products"][0]["name"] == "Empty"


async def test_inventory_summary(client, admin_headers, make_product):
    await make_product(name="Empty", quantity=0, price="10.00", threshold=5)
    await make_product(name="Low", quantity=3, price="2.50", threshold=5)
    await make_product(name="Plenty", quantity=10, price="1.00", threshold=5, active=False)

    response = await client.get("/products/inventory/summary", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalProducts"] == 3
    assert data["outOfStock"] == 1
    assert data["lowStock"] == 1
    assert data["activeProducts"] == 2
    assert float(data["totalValue"]) == 17.5
