# inventory_api/services/reports/report_service.py

from decimal import Decimal

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.models.catalog.category_models import Category
from inventory_api.models.catalog.product_models import Product
from inventory_api.schemas.reports.report_schemas import (
    InventorySummary,
    StockLevelItem,
    StockLevelsSummary,
    StockLevelsReport,
    CategoryValueItem,
    InventoryValueSummary,
    InventoryValueReport,
)
from inventory_api.utils.logger import get_logger

logger = get_logger(__name__)

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"

CENTS = Decimal("0.01")

_live = Product.deleted_at.is_(None)
_is_out = Product.quantity == 0
_is_low = (Product.quantity > 0) & (Product.quantity <= Product.low_stock_threshold)


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENTS)


def stock_status(quantity: int, threshold: int) -> str:
    if quantity == 0:
        return OUT_OF_STOCK
    if quantity <= threshold:
        return LOW_STOCK
    return IN_STOCK


# =========================
# INVENTORY SUMMARY
# =========================
async def inventory_summary(db: AsyncSession) -> InventorySummary:
    row = (
        await db.execute(
            select(
                func.count(Product.id).label("total"),
                func.coalesce(func.sum(case((_is_out, 1), else_=0)), 0).label("out_of_stock"),
                func.coalesce(func.sum(case((_is_low, 1), else_=0)), 0).label("low_stock"),
                func.coalesce(func.sum(case((Product.active.is_(True), 1), else_=0)), 0).label("active"),
                func.coalesce(func.sum(Product.quantity * Product.price), 0).label("value"),
            ).where(_live)
        )
    ).one()

    return InventorySummary(
        total_products=row.total,
        out_of_stock=row.out_of_stock,
        low_stock=row.low_stock,
        active_products=row.active,
        total_value=_money(row.value),
    )


# =========================
# STOCK LEVELS
# =========================
async def stock_levels(db: AsyncSession) -> StockLevelsReport:
    rows = (
        await db.execute(
            select(
                Product.id,
                Product.name,
                Category.name.label("category_name"),
                Product.quantity,
                Product.low_stock_threshold,
                Product.price,
            )
            .outerjoin(Category, Product.category_id == Category.id)
            .where(_live)
            .order_by(Product.quantity.asc(), Product.name.asc())
        )
    ).all()

    items = [
        StockLevelItem(
            id=r.id,
            name=r.name,
            category_name=r.category_name,
            quantity=r.quantity,
            low_stock_threshold=r.low_stock_threshold,
            price=_money(r.price),
            total_value=_money(r.quantity * Decimal(r.price)),
            stock_status=stock_status(r.quantity, r.low_stock_threshold),
        )
        for r in rows
    ]

    statuses = [item.stock_status for item in items]
    summary = StockLevelsSummary(
        total_products=len(items),
        out_of_stock=statuses.count(OUT_OF_STOCK),
        low_stock=statuses.count(LOW_STOCK),
        in_stock=statuses.count(IN_STOCK),
        total_value=_money(sum((item.total_value for item in items), Decimal("0"))),
    )

    return StockLevelsReport(summary=summary, products=items)


# =========================
# INVENTORY VALUE BY CATEGORY
# =========================
async def inventory_value_by_category(db: AsyncSession) -> InventoryValueReport:
    # live products only; categories with none still appear with zeros
    rows = (
        await db.execute(
            select(
                Category.id,
                Category.name,
                func.count(Product.id).label("product_count"),
                func.coalesce(func.sum(Product.quantity), 0).label("total_quantity"),
                func.coalesce(func.sum(Product.quantity * Product.price), 0).label("total_value"),
                func.coalesce(func.avg(Product.price), 0).label("average_price"),
                func.coalesce(func.sum(case((_is_out, 1), else_=0)), 0).label("out_of_stock"),
                func.coalesce(func.sum(case((_is_low, 1), else_=0)), 0).label("low_stock"),
            )
            .outerjoin(Product, (Product.category_id == Category.id) & _live)
            .group_by(Category.id, Category.name)
            .order_by(func.coalesce(func.sum(Product.quantity * Product.price), 0).desc(), Category.name.asc())
        )
    ).all()

    categories = [
        CategoryValueItem(
            category_id=r.id,
            category_name=r.name,
            product_count=r.product_count,
            total_quantity=r.total_quantity,
            total_value=_money(r.total_value),
            average_price=_money(r.average_price),
            out_of_stock_count=r.out_of_stock,
            low_stock_count=r.low_stock,
        )
        for r in rows
    ]

    total_value = sum((c.total_value for c in categories), Decimal("0"))
    overall = InventoryValueSummary(
        total_categories=len(categories),
        total_products=sum(c.product_count for c in categories),
        total_quantity=sum(c.total_quantity for c in categories),
        total_value=_money(total_value),
        average_value_per_category=_money(total_value / len(categories)) if categories else _money(0),
    )

    logger.debug("Inventory value report built", extra={"categories": len(categories)})
    return InventoryValueReport(overall_summary=overall, categories=categories)
