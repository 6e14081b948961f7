from sqlalchemy import func, select

from inventory_api.models.users.user_models import RefreshToken
from inventory_api.services.inventory.ledger_service import adjust_quantity

from conftest import PASSWORD


async def test_admin_creates_and_lists_users(client, admin_headers, admin):
    response = await client.post(
        "/users",
        json={
            "firstName": "Grace",
            "lastName": "Hopper",
            "email": "grace@inventory.io",
            "password": "Cobol1959",
            "role": "admin",
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    created = response.json()["data"]
    assert created["role"] == "admin"
    assert "passwordHash" not in created and "password_hash" not in created

    response = await client.get("/users?search=grace", headers=admin_headers)
    data = response.json()["data"]
    assert data["pagination"]["total"] == 1
    assert data["users"][0]["email"] == "grace@inventory.io"

    response = await client.get("/users?role=admin", headers=admin_headers)
    emails = {u["email"] for u in response.json()["data"]["users"]}
    assert emails == {"grace@inventory.io", admin.email}


async def test_create_user_duplicate_email(client, admin_headers, staff):
    response = await client.post(
        "/users",
        json={"email": staff.email.upper(), "password": "Cobol1959"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "USER_EMAIL_EXISTS"


async def test_get_update_user(client, admin_headers, staff):
    response = await client.get(f"/users/{staff.id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["email"] == staff.email

    response = await client.put(
        f"/users/{staff.id}",
        json={"role": "admin", "phone": "+1-555-0100"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["role"] == "admin"
    assert data["phone"] == "+1-555-0100"


async def test_unknown_user_is_404(client, admin_headers):
    response = await client.get("/users/00000000-0000-0000-0000-000000000000", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error_code"] == "USER_NOT_FOUND"


async def test_delete_user_removes_refresh_tokens(client, admin_headers, staff, database):
    response = await client.post("/auth/login", json={"email": staff.email, "password": PASSWORD})
    assert response.status_code == 200

    response = await client.delete(f"/users/{staff.id}", headers=admin_headers)
    assert response.status_code == 200

    async with database.session() as session:
        remaining = await session.scalar(
            select(func.count()).select_from(RefreshToken).where(RefreshToken.user_id == staff.id)
        )
    assert remaining == 0

    response = await client.get(f"/users/{staff.id}", headers=admin_headers)
    assert response.status_code == 404


async def test_admin_cannot_delete_self(client, admin_headers, admin):
    response = await client.delete(f"/users/{admin.id}", headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["error_code"] == "USER_SELF_DELETE"


async def test_deleted_actor_keeps_audit_rows(client, admin_headers, database, make_product, staff):
    product = await make_product(quantity=5)
    await adjust_quantity(
        database,
        product_id=product.id,
        quantity_change=2,
        reason_code="purchase",
        reason_description=None,
        actor_id=staff.id,
    )

    response = await client.delete(f"/users/{staff.id}", headers=admin_headers)
    assert response.status_code == 200

    response = await client.get(f"/products/{product.id}/transactions", headers=admin_headers)
    txn = response.json()["data"]["transactions"][0]
    assert txn["newQuantity"] == 7
    assert txn["createdBy"] is None
    assert txn["createdByEmail"] is None


async def test_profile_read_and_update(client, staff_headers, staff):
    response = await client.get("/users/profile", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["data"]["email"] == staff.email

    response = await client.put(
        "/users/profile",
        json={"firstName": "Renamed", "phone": "555"},
        headers=staff_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["firstName"] == "Renamed"
    assert data["role"] == "user"

    # role is not a profile field
    response = await client.put("/users/profile", json={"role": "admin"}, headers=staff_headers)
    assert response.status_code == 400


async def test_change_password(client, staff_headers, staff):
    response = await client.put(
        "/users/profile/password",
        json={"currentPassword": "Nope1234", "newPassword": "Fresh2024"},
        headers=staff_headers,
    )
    assert response.status_code == 400

    response = await client.put(
        "/users/profile/password",
        json={"currentPassword": PASSWORD, "newPassword": "Fresh2024"},
        headers=staff_headers,
    )
    assert response.status_code == 200

    response = await client.post("/auth/login", json={"email": staff.email, "password": "Fresh2024"})
    assert response.status_code == 200
