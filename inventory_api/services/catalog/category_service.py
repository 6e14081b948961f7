# inventory_api/services/catalog/category_service.py

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError

from inventory_api.models.catalog.category_models import Category
from inventory_api.models.catalog.product_models import Product
from inventory_api.schemas.catalog.category_schemas import (
    CategoryCreate,
    CategoryUpdate,
    CategoryOut,
    CategoryListData,
)
from inventory_api.schemas.common import Pagination, page_offset
from inventory_api.core.exceptions import (
    CategoryInUse,
    DuplicateName,
    NotFound,
    ValidationFailed,
)
from inventory_api.constants.error_codes import ErrorCode
from inventory_api.utils.logger import get_logger

logger = get_logger(__name__)


def _live_product_count():
    """Correlated count of non-deleted products in the outer category."""
    return (
        select(func.count(Product.id))
        .where(
            Product.category_id == Category.id,
            Product.deleted_at.is_(None),
        )
        .correlate(Category)
        .scalar_subquery()
    )


def _map_category(category: Category, product_count: int) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        description=category.description,
        product_count=product_count or 0,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


async def _load_category(db: AsyncSession, category_id: int) -> CategoryOut:
    row = (
        await db.execute(
            select(Category, _live_product_count())
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
    ).first()

    if not row:
        raise NotFound("Category not found", ErrorCode.CATEGORY_NOT_FOUND)

    category, product_count = row
    return _map_category(category, product_count)


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Category.id).where(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)

    if await db.scalar(stmt):
        raise DuplicateName("Category name already exists", ErrorCode.CATEGORY_NAME_EXISTS)


# =========================
# CREATE
# =========================
async def create_category(db: AsyncSession, payload: CategoryCreate, user) -> CategoryOut:
    await _ensure_name_free(db, payload.name)

    category = Category(**payload.model_dump())
    db.add(category)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateName("Category name already exists", ErrorCode.CATEGORY_NAME_EXISTS)

    await db.commit()

    logger.info(
        "Category created",
        extra={"category_id": category.id, "user_id": str(user.id)},
    )
    return await _load_category(db, category.id)


# =========================
# GET
# =========================
async def get_category(db: AsyncSession, category_id: int) -> CategoryOut:
    return await _load_category(db, category_id)


# =========================
# LIST
# =========================
async def list_categories(
    db: AsyncSession,
    search: str | None,
    page: int,
    limit: int,
) -> CategoryListData:
    filters = []
    if search:
        filters.append(Category.name.ilike(f"%{search}%"))

    rows = (
        await db.execute(
            select(Category, _live_product_count())
            .where(*filters)
            .order_by(Category.created_at.desc(), Category.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit)
        )
    ).all()

    total = await db.scalar(
        select(func.count()).select_from(
            select(Category.id).where(*filters).subquery()
        )
    )

    return CategoryListData(
        categories=[_map_category(category, count) for category, count in rows],
        pagination=Pagination.build(page, limit, total or 0),
    )


# =========================
# UPDATE
# =========================
async def update_category(
    db: AsyncSession,
    category_id: int,
    payload: CategoryUpdate,
    user,
) -> CategoryOut:
    category = await db.get(Category, category_id)
    if not category:
        raise NotFound("Category not found", ErrorCode.CATEGORY_NOT_FOUND)

    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("No changes detected")

    if "name" in updates:
        if updates["name"] is None:
            raise ValidationFailed(
                "Invalid category update",
                [{"field": "name", "message": "Field cannot be null"}],
            )
        if updates["name"].lower() != category.name.lower():
            await _ensure_name_free(db, updates["name"], exclude_id=category_id)

    for field, value in updates.items():
        setattr(category, field, value)

    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise DuplicateName("Category name already exists", ErrorCode.CATEGORY_NAME_EXISTS)

    await db.commit()

    logger.info(
        "Category updated",
        extra={"category_id": category_id, "user_id": str(user.id)},
    )
    return await _load_category(db, category_id)


# =========================
# DELETE
# =========================
async def delete_category(db: AsyncSession, category_id: int, user) -> None:
    # held until commit: product writes referencing this row wait on it
    exists = await db.scalar(
        select(Category.id).where(Category.id == category_id).with_for_update()
    )
    if not exists:
        raise NotFound("Category not found", ErrorCode.CATEGORY_NOT_FOUND)

    live_products = await db.scalar(
        select(func.count(Product.id)).where(
            Product.category_id == category_id,
            Product.deleted_at.is_(None),
        )
    )
    if live_products:
        raise CategoryInUse(live_products)

    await db.execute(delete(Category).where(Category.id == category_id))
    await db.commit()

    logger.info(
        "Category deleted",
        extra={"category_id": category_id, "user_id": str(user.id)},
    )
