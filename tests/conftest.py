import os

# settings are read at import time
os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ.setdefault("JWT_ACCESS_SECRET_KEY", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET_KEY", "test-refresh-secret")

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from inventory_api.core.db import Database
from inventory_api.core.security import create_access_token, hash_password
from inventory_api.models.catalog.category_models import Category
from inventory_api.models.catalog.ledger_models import ProductTransaction, QuantityHistory
from inventory_api.models.catalog.product_models import Product
from inventory_api.models.users.user_models import User
from main import create_app

PASSWORD = "Secret123"


@pytest.fixture
async def database(tmp_path):
    url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'inventory_test.db'}"
    db = Database(url, pool_timeout=10)
    if not db.is_sqlite:
        await db.drop_all()
    await db.create_all()

    yield db

    if not db.is_sqlite:
        await db.drop_all()
    await db.dispose()


@pytest.fixture
def app(database):
    return create_app(database)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# USERS
# ---------------------------------------------------------------------------
async def make_user(database: Database, email: str, role: str, password: str = PASSWORD) -> User:
    async with database.session() as session:
        user = User(
            first_name=email.split("@")[0].title(),
            last_name="Tester",
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


@pytest.fixture
async def admin(database):
    return await make_user(database, "admin@inventory.io", "admin")


@pytest.fixture
async def staff(database):
    return await make_user(database, "clerk@inventory.io", "user")


@pytest.fixture
def admin_headers(admin):
    return bearer(admin)


@pytest.fixture
def staff_headers(staff):
    return bearer(staff)


# ---------------------------------------------------------------------------
# CATALOG
# ---------------------------------------------------------------------------
@pytest.fixture
async def category(database):
    async with database.session() as session:
        category = Category(name="Hardware", description="Nuts, bolts and tools")
        session.add(category)
        await session.commit()
        await session.refresh(category)
        return category


@pytest.fixture
def make_product(database, category):
    """Seeds a product row directly, bypassing the ledger."""

    async def _make(name="Hammer", quantity=0, sku=None, price="12.50", threshold=10, **fields):
        async with database.session() as session:
            product = Product(
                name=name,
                sku=sku,
                category_id=fields.pop("category_id", category.id),
                quantity=quantity,
                price=Decimal(price),
                low_stock_threshold=threshold,
                **fields,
            )
            session.add(product)
            await session.commit()
            await session.refresh(product)
            return product

    return _make


# ---------------------------------------------------------------------------
# INSPECTION
# ---------------------------------------------------------------------------
async def current_quantity(database: Database, product_id: int) -> int:
    async with database.session() as session:
        return await session.scalar(select(Product.quantity).where(Product.id == product_id))


async def audit_counts(database: Database, product_id: int) -> tuple[int, int]:
    async with database.session() as session:
        transactions = await session.scalar(
            select(func.count(ProductTransaction.id)).where(ProductTransaction.product_id == product_id)
        )
        history = await session.scalar(
            select(func.count(QuantityHistory.id)).where(QuantityHistory.product_id == product_id)
        )
    return transactions, history
