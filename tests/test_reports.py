from inventory_api.models.catalog.category_models import Category
from inventory_api.services.reports.report_service import stock_status


def test_stock_status_boundaries():
    assert stock_status(0, 5) == "Out of Stock"
    assert stock_status(5, 5) == "Low Stock"
    assert stock_status(6, 5) == "In Stock"
    assert stock_status(0, 0) == "Out of Stock"


async def test_stock_levels_report(client, staff_headers, make_product):
    await make_product(name="Bolts", quantity=50, price="0.20", threshold=20)
    await make_product(name="Anchors", quantity=4, price="1.50", threshold=5)
    await make_product(name="Hinges", quantity=0, price="3.00", threshold=5)

    response = await client.get("/reports/stock-levels", headers=staff_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert [p["name"] for p in data["products"]] == ["Hinges", "Anchors", "Bolts"]
    assert [p["stockStatus"] for p in data["products"]] == ["Out of Stock", "Low Stock", "In Stock"]
    assert float(data["products"][1]["totalValue"]) == 6.0

    summary = data["summary"]
    assert summary["totalProducts"] == 3
    assert (summary["outOfStock"], summary["lowStock"], summary["inStock"]) == (1, 1, 1)
    assert float(summary["totalValue"]) == 16.0


async def test_inventory_value_by_category(client, admin_headers, staff_headers, database, category, make_product):
    async with database.session() as session:
        session.add(Category(name="Empty shelf"))
        await session.commit()

    await make_product(name="Saw", quantity=2, price="20.00", threshold=1)
    await make_product(name="Level", quantity=0, price="10.00")
    await make_product(name="Router", quantity=100, price="99.00")
    retired = await make_product(name="Retired", quantity=100, price="99.00")

    response = await client.delete(f"/products/{retired.id}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get("/reports/inventory-value", headers=staff_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    by_name = {c["categoryName"]: c for c in data["categories"]}
    assert set(by_name) == {"Hardware", "Empty shelf"}

    hardware = by_name["Hardware"]
    assert hardware["productCount"] == 3
    assert hardware["totalQuantity"] == 102
    assert float(hardware["totalValue"]) == 9940.0
    assert float(hardware["averagePrice"]) == 43.0
    assert hardware["outOfStockCount"] == 1
    assert hardware["lowStockCount"] == 0

    assert by_name["Empty shelf"]["productCount"] == 0
    assert float(by_name["Empty shelf"]["totalValue"]) == 0

    overall = data["overallSummary"]
    assert overall["totalCategories"] == 2
    assert overall["totalProducts"] == 3
    assert float(overall["averageValuePerCategory"]) == 4970.0


async def test_quantity_history_report(client, admin_headers, make_product):
    product = await make_product(name="Drill bits", quantity=0)

    for change, reason in [(12, "purchase"), (-2, "damage")]:
        await client.patch(
            f"/products/{product.id}/quantity",
            json={"quantityChange": change, "reasonCode": reason},
            headers=admin_headers,
        )

    response = await client.get(f"/reports/products/{product.id}/quantity-history", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["pagination"]["total"] == 2
    latest = data["history"][0]
    assert latest["change"] == -2
    assert latest["reason"] == "damage"
    assert latest["previousQuantity"] == 12
    assert latest["newQuantity"] == 10
    assert latest["productName"] == "Drill bits"
    assert latest["userEmail"] == "admin@inventory.io"


async def test_quantity_history_unknown_product(client, admin_headers):
    response = await client.get("/reports/products/404/quantity-history", headers=admin_headers)
    assert response.status_code == 404
