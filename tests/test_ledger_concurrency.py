import asyncio
import os
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from inventory_api.core.db import Database
from inventory_api.core.exceptions import InsufficientStock
from inventory_api.models.catalog.product_models import Product
from inventory_api.services.inventory.ledger_service import adjust_quantity
from main import create_app

from conftest import audit_counts, bearer, current_quantity, make_user

requires_postgres = pytest.mark.skipif(
    not os.getenv("TEST_DATABASE_URL", "").startswith("postgresql"),
    reason="row-level lock behaviour needs TEST_DATABASE_URL pointing at PostgreSQL",
)


def _adjust(database, product_id, change, actor_id, reason="sale"):
    return adjust_quantity(
        database,
        product_id=product_id,
        quantity_change=change,
        reason_code=reason,
        reason_description=None,
        actor_id=actor_id,
    )


async def test_concurrent_opposite_adjustments_serialize(database, admin, make_product):
    product = await make_product(quantity=5)

    results = await asyncio.gather(
        _adjust(database, product.id, -3, admin.id),
        _adjust(database, product.id, 3, admin.id, reason="purchase"),
    )

    assert await current_quantity(database, product.id) == 5
    assert await audit_counts(database, product.id) == (2, 2)
    assert sorted(r.new_quantity for r in results) in ([2, 5], [5, 8])


async def test_concurrent_decrements_never_oversell(database, admin, make_product):
    product = await make_product(quantity=10)

    outcomes = await asyncio.gather(
        *(_adjust(database, product.id, -1, admin.id) for _ in range(20)),
        return_exceptions=True,
    )

    succeeded = [o for o in outcomes if not isinstance(o, Exception)]
    rejected = [o for o in outcomes if isinstance(o, InsufficientStock)]

    assert len(succeeded) == 10
    assert len(rejected) == 10
    assert sorted(r.new_quantity for r in succeeded) == list(range(10))
    assert await current_quantity(database, product.id) == 0
    assert await audit_counts(database, product.id) == (10, 10)


@requires_postgres
async def test_adjustment_waits_for_lock_on_same_product(database, admin, make_product):
    product = await make_product(quantity=5)

    async with database.session() as holder:
        async with holder.begin():
            await holder.execute(
                select(Product.id).where(Product.id == product.id).with_for_update()
            )

            task = asyncio.create_task(_adjust(database, product.id, -2, admin.id))
            await asyncio.sleep(0.5)
            assert not task.done()

        # lock released on commit
        result = await asyncio.wait_for(task, timeout=5)

    assert result.new_quantity == 3


@requires_postgres
async def test_lock_on_one_product_does_not_block_another(database, admin, make_product):
    locked = await make_product(name="Locked", quantity=5)
    other = await make_product(name="Free", quantity=5)

    async with database.session() as holder:
        async with holder.begin():
            await holder.execute(
                select(Product.id).where(Product.id == locked.id).with_for_update()
            )

            result = await asyncio.wait_for(
                _adjust(database, other.id, -1, admin.id), timeout=2
            )

    assert result.new_quantity == 4
    assert await current_quantity(database, locked.id) == 5


@pytest.fixture
async def small_pool(tmp_path):
    db = Database(
        f"sqlite+aiosqlite:///{tmp_path / 'small_pool.db'}",
        pool_size=2,
        max_overflow=0,
        pool_timeout=2,
    )
    await db.create_all()
    yield db
    await db.dispose()


async def test_concurrent_quantity_requests_fit_in_a_small_pool(small_pool):
    admin = await make_user(small_pool, "pool-admin@inventory.io", "admin")
    async with small_pool.session() as session:
        product = Product(name="Washer", quantity=10, price=Decimal("0.10"), low_stock_threshold=2)
        session.add(product)
        await session.commit()
        await session.refresh(product)

    transport = ASGITransport(app=create_app(small_pool), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        responses = await asyncio.gather(
            *(
                client.patch(
                    f"/products/{product.id}/quantity",
                    json={"quantityChange": -1, "reasonCode": "sale"},
                    headers=bearer(admin),
                )
                for _ in range(4)
            )
        )

    assert [r.status_code for r in responses] == [200] * 4
    assert sorted(r.json()["data"]["newQuantity"] for r in responses) == [6, 7, 8, 9]
    assert await current_quantity(small_pool, product.id) == 6
    assert await audit_counts(small_pool, product.id) == (4, 4)
