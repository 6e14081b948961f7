import uuid

import pytest

from inventory_api.constants.roles import Capability
from inventory_api.core.security import create_access_token, create_refresh_token
from inventory_api.utils.check_roles import is_allowed


@pytest.mark.parametrize(
    "role, capability, allowed",
    [
        ("admin", Capability.READ, True),
        ("admin", Capability.WRITE, True),
        ("admin", Capability.MANAGE_USERS, True),
        ("user", Capability.READ, True),
        ("user", Capability.WRITE, False),
        ("user", Capability.MANAGE_USERS, False),
        ("ADMIN", Capability.WRITE, True),
        ("auditor", Capability.READ, False),
    ],
)
def test_policy_table(role, capability, allowed):
    assert is_allowed(role, capability) is allowed


async def test_user_role_can_read(client, staff_headers, make_product, category):
    product = await make_product()

    for path in (
        "/products",
        f"/products/{product.id}",
        "/products/low-stock",
        "/products/out-of-stock",
        "/products/inventory/summary",
        f"/products/{product.id}/transactions",
        "/categories",
        f"/categories/{category.id}",
        "/reports/stock-levels",
        "/reports/inventory-value",
        f"/reports/products/{product.id}/quantity-history",
    ):
        response = await client.get(path, headers=staff_headers)
        assert response.status_code == 200, path


async def test_user_role_is_forbidden_to_write(client, staff_headers, make_product, category):
    product = await make_product(quantity=5)

    calls = [
        ("post", "/products", {"name": "Mallet", "categoryId": category.id, "price": "9.00"}),
        ("put", f"/products/{product.id}", {"name": "Renamed"}),
        ("delete", f"/products/{product.id}", None),
        ("patch", f"/products/{product.id}/quantity", {"quantityChange": -1, "reasonCode": "sale"}),
        ("post", "/categories", {"name": "Electrical"}),
        ("put", f"/categories/{category.id}", {"name": "Tools"}),
        ("delete", f"/categories/{category.id}", None),
        ("get", "/users", None),
        ("post", "/users", {"email": "x@inventory.io", "password": "Abcdef12"}),
    ]

    for method, path, body in calls:
        kwargs = {"headers": staff_headers}
        if body is not None:
            kwargs["json"] = body
        response = await client.request(method.upper(), path, **kwargs)
        assert response.status_code == 403, (method, path)
        assert response.json()["error_code"] == "PERMISSION_DENIED"


async def test_missing_or_bad_token_is_401(client):
    for headers in ({}, {"Authorization": "Bearer nonsense"}, {"Authorization": "Token abc"}):
        response = await client.get("/products", headers=headers)
        assert response.status_code == 401
        assert response.json()["success"] is False


async def test_refresh_token_cannot_be_used_as_access_token(client, staff):
    refresh, _ = create_refresh_token(str(staff.id))
    response = await client.get("/products", headers={"Authorization": f"Bearer {refresh}"})

    assert response.status_code == 401


async def test_token_for_deleted_user_is_401(client, database):
    token = create_access_token(str(uuid.uuid4()), "admin")
    response = await client.get("/products", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


async def test_health_check_is_public(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
