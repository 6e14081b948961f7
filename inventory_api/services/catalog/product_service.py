# inventory_api/services/catalog/product_service.py

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError

from inventory_api.models.catalog.category_models import Category
from inventory_api.models.catalog.product_models import Product
from inventory_api.schemas.catalog.product_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductOut,
    ProductListData,
    ProductFilters,
    StockListData,
)
from inventory_api.schemas.common import Pagination, page_offset
from inventory_api.core.exceptions import (
    DuplicateSKU,
    InvalidCategory,
    NotFound,
    ValidationFailed,
)
from inventory_api.constants.error_codes import ErrorCode
from inventory_api.utils.logger import get_logger

logger = get_logger(__name__)

# Columns a PUT may not clear
NON_NULLABLE_UPDATE_FIELDS = {"name", "category_id", "price", "low_stock_threshold", "active"}


def _map_product(product: Product, category_name: str | None) -> ProductOut:
    return ProductOut(
        id=product.id,
        name=product.name,
        sku=product.sku,
        category_id=product.category_id,
        category_name=category_name,
        quantity=product.quantity,
        price=product.price,
        low_stock_threshold=product.low_stock_threshold,
        description=product.description,
        active=product.active,
        deleted_at=product.deleted_at,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _product_with_category():
    return select(Product, Category.name).outerjoin(
        Category, Product.category_id == Category.id
    )


async def _load_product(
    db: AsyncSession,
    product_id: int,
    include_deleted: bool = False,
) -> ProductOut:
    stmt = (
        _product_with_category()
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    if not include_deleted:
        stmt = stmt.where(Product.deleted_at.is_(None))

    row = (await db.execute(stmt)).first()
    if not row:
        raise NotFound("Product not found", ErrorCode.PRODUCT_NOT_FOUND)

    product, category_name = row
    return _map_product(product, category_name)


async def _ensure_category(db: AsyncSession, category_id: int) -> None:
    exists = await db.scalar(select(Category.id).where(Category.id == category_id))
    if not exists:
        raise InvalidCategory()


async def _ensure_sku_free(db: AsyncSession, sku: str, exclude_id: int | None = None) -> None:
    stmt = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)

    if await db.scalar(stmt):
        raise DuplicateSKU()


async def _write_conflict(db: AsyncSession, category_id: int | None):
    """Roll back a failed flush and name the constraint it lost on."""
    await db.rollback()

    # category deleted between the check and the write
    if category_id is not None and not await db.scalar(
        select(Category.id).where(Category.id == category_id)
    ):
        return InvalidCategory()
    return DuplicateSKU()


# ---------------- CREATE ----------------
async def create_product(db: AsyncSession, payload: ProductCreate, user) -> ProductOut:
    await _ensure_category(db, payload.category_id)

    if payload.sku:
        await _ensure_sku_free(db, payload.sku)

    product = Product(**payload.model_dump(), quantity=0)
    db.add(product)

    try:
        await db.flush()
    except IntegrityError:
        raise await _write_conflict(db, payload.category_id)

    await db.commit()

    logger.info(
        "Product created",
        extra={"product_id": product.id, "sku": product.sku, "user_id": str(user.id)},
    )
    return await _load_product(db, product.id)


# ---------------- GET ----------------
async def get_product(
    db: AsyncSession,
    product_id: int,
    include_deleted: bool = False,
) -> ProductOut:
    return await _load_product(db, product_id, include_deleted)


# ---------------- LIST ----------------
def _build_filters(filters: ProductFilters) -> list:
    conditions = []

    if not filters.include_deleted:
        conditions.append(Product.deleted_at.is_(None))

    if filters.category_id is not None:
        conditions.append(Product.category_id == filters.category_id)

    if filters.search:
        pattern = f"%{filters.search}%"
        conditions.append(
            or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )

    if filters.active is not None:
        conditions.append(Product.active == filters.active)

    if filters.min_price is not None:
        conditions.append(Product.price >= filters.min_price)

    if filters.max_price is not None:
        conditions.append(Product.price <= filters.max_price)

    if filters.in_stock is True:
        conditions.append(Product.quantity > 0)
    elif filters.in_stock is False:
        conditions.append(Product.quantity == 0)

    if filters.low_stock is True:
        conditions.append(Product.quantity <= Product.low_stock_threshold)
    elif filters.low_stock is False:
        conditions.append(Product.quantity > Product.low_stock_threshold)

    return conditions


async def list_products(
    db: AsyncSession,
    filters: ProductFilters,
    page: int,
    limit: int,
) -> ProductListData:
    if (
        filters.min_price is not None
        and filters.max_price is not None
        and filters.min_price > filters.max_price
    ):
        raise ValidationFailed(
            "Invalid price range",
            [{"field": "minPrice", "message": "minPrice must not exceed maxPrice"}],
        )

    conditions = _build_filters(filters)

    # =========================
    # DATA QUERY
    # =========================
    rows = (
        await db.execute(
            _product_with_category()
            .where(*conditions)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit)
        )
    ).all()

    # =========================
    # COUNT QUERY
    # =========================
    total = await db.scalar(
        select(func.count()).select_from(
            select(Product.id).where(*conditions).subquery()
        )
    )

    return ProductListData(
        products=[_map_product(product, category_name) for product, category_name in rows],
        pagination=Pagination.build(page, limit, total or 0),
    )


# ---------------- UPDATE ----------------
async def update_product(
    db: AsyncSession,
    product_id: int,
    payload: ProductUpdate,
    user,
) -> ProductOut:
    product = await db.scalar(
        select(Product).where(
            Product.id == product_id,
            Product.deleted_at.is_(None),
        )
    )
    if not product:
        raise NotFound("Product not found", ErrorCode.PRODUCT_NOT_FOUND)

    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("No changes detected")

    cleared = sorted(k for k, v in updates.items() if v is None and k in NON_NULLABLE_UPDATE_FIELDS)
    if cleared:
        raise ValidationFailed(
            "Invalid product update",
            [{"field": field, "message": "Field cannot be null"} for field in cleared],
        )

    # -------------------------------------------------
    # REFERENCE + UNIQUENESS CHECKS
    # -------------------------------------------------
    if "category_id" in updates and updates["category_id"] != product.category_id:
        await _ensure_category(db, updates["category_id"])

    if updates.get("sku") and updates["sku"] != product.sku:
        await _ensure_sku_free(db, updates["sku"], exclude_id=product_id)

    for field, value in updates.items():
        setattr(product, field, value)

    try:
        await db.flush()
    except IntegrityError:
        raise await _write_conflict(db, updates.get("category_id"))

    await db.commit()

    logger.info(
        "Product updated",
        extra={"product_id": product_id, "fields": ",".join(sorted(updates)), "user_id": str(user.id)},
    )
    return await _load_product(db, product_id)


# ---------------- SOFT DELETE ----------------
async def delete_product(db: AsyncSession, product_id: int, user) -> None:
    product = await db.scalar(
        select(Product).where(
            Product.id == product_id,
            Product.deleted_at.is_(None),
        )
    )
    if not product:
        raise NotFound("Product not found", ErrorCode.PRODUCT_NOT_FOUND)

    product.deleted_at = datetime.now(timezone.utc)
    await db.commit()

    logger.info(
        "Product soft-deleted",
        extra={"product_id": product_id, "user_id": str(user.id)},
    )


# ---------------- STOCK LISTS ----------------
async def list_low_stock(db: AsyncSession, threshold: int | None = None) -> StockListData:
    stmt = _product_with_category().where(
        Product.deleted_at.is_(None),
        Product.quantity <= Product.low_stock_threshold,
    )
    if threshold is not None:
        stmt = stmt.where(Product.quantity <= threshold)

    rows = (
        await db.execute(stmt.order_by(Product.quantity.asc(), Product.name.asc()))
    ).all()

    products = [_map_product(product, category_name) for product, category_name in rows]
    return StockListData(count=len(products), products=products)


async def list_out_of_stock(db: AsyncSession) -> StockListData:
    rows = (
        await db.execute(
            _product_with_category()
            .where(
                Product.deleted_at.is_(None),
                Product.quantity == 0,
            )
            .order_by(Product.name.asc())
        )
    ).all()

    products = [_map_product(product, category_name) for product, category_name in rows]
    return StockListData(count=len(products), products=products)
