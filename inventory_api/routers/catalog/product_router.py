# inventory_api/routers/catalog/product_router.py

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.constants.roles import Capability
from inventory_api.core.db import Database, get_database, get_db
from inventory_api.schemas.catalog.ledger_schemas import (
    QuantityAdjustRequest,
    QuantityAdjustResult,
    TransactionListData,
)
from inventory_api.schemas.catalog.product_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductOut,
    ProductListData,
    ProductFilters,
    StockListData,
)
from inventory_api.schemas.common import APIResponse, success_response
from inventory_api.schemas.reports.report_schemas import InventorySummary
from inventory_api.services.catalog.product_service import (
    create_product,
    list_products,
    get_product,
    update_product,
    delete_product,
    list_low_stock,
    list_out_of_stock,
)
from inventory_api.services.inventory.ledger_service import (
    adjust_quantity,
    list_product_transactions,
)
from inventory_api.services.reports.report_service import inventory_summary
from inventory_api.utils.check_roles import require_capability
from inventory_api.utils.logger import get_logger

router = APIRouter(prefix="/products", tags=["Products"])
logger = get_logger(__name__)


@router.post("", response_model=APIResponse[ProductOut], status_code=status.HTTP_201_CREATED)
async def create_product_api(
    payload: ProductCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.WRITE)),
):
    logger.info("Create product", extra={"sku": payload.sku})
    product = await create_product(db, payload, user)
    return success_response("Product created successfully", product)


@router.get("", response_model=APIResponse[ProductListData])
async def list_products_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
    category_id: int | None = Query(None, alias="categoryId"),
    search: str | None = Query(None, description="Search by name or description"),
    active: bool | None = Query(None),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    in_stock: bool | None = Query(None, alias="inStock"),
    low_stock: bool | None = Query(None, alias="lowStock"),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    filters = ProductFilters(
        category_id=category_id,
        search=search,
        active=active,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        low_stock=low_stock,
        include_deleted=include_deleted,
    )
    data = await list_products(db, filters, page, limit)
    return success_response("Products fetched successfully", data)


# static paths must be declared before /{product_id}
@router.get("/low-stock", response_model=APIResponse[StockListData])
async def low_stock_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
    threshold: int | None = Query(None, ge=0),
):
    data = await list_low_stock(db, threshold)
    return success_response("Low stock products fetched successfully", data)


@router.get("/out-of-stock", response_model=APIResponse[StockListData])
async def out_of_stock_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
):
    data = await list_out_of_stock(db)
    return success_response("Out of stock products fetched successfully", data)


@router.get("/inventory/summary", response_model=APIResponse[InventorySummary])
async def inventory_summary_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
):
    data = await inventory_summary(db)
    return success_response("Inventory summary fetched successfully", data)


@router.get("/{product_id}", response_model=APIResponse[ProductOut])
async def get_product_api(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
    include_deleted: bool = Query(False, alias="includeDeleted"),
):
    product = await get_product(db, product_id, include_deleted)
    return success_response("Product fetched successfully", product)


@router.put("/{product_id}", response_model=APIResponse[ProductOut])
async def update_product_api(
    product_id: int,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.WRITE)),
):
    product = await update_product(db, product_id, payload, user)
    return success_response("Product updated successfully", product)


@router.delete("/{product_id}", response_model=APIResponse[None])
async def delete_product_api(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.WRITE)),
):
    await delete_product(db, product_id, user)
    return success_response("Product deleted successfully")


@router.patch("/{product_id}/quantity", response_model=APIResponse[QuantityAdjustResult])
async def adjust_quantity_api(
    product_id: int,
    payload: QuantityAdjustRequest,
    database: Database = Depends(get_database),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.WRITE)),
):
    logger.info(
        "Adjust quantity",
        extra={"product_id": product_id, "quantity_change": payload.quantity_change},
    )
    result = await adjust_quantity(
        database,
        product_id=product_id,
        quantity_change=payload.quantity_change,
        reason_code=payload.reason_code,
        reason_description=payload.reason_description,
        actor_id=user.id,
    )

    # request session has no open transaction here, so this read starts after the commit
    product = await get_product(db, product_id)

    return success_response(
        "Product quantity updated successfully",
        QuantityAdjustResult(
            product=product,
            product_id=result.product_id,
            new_quantity=result.new_quantity,
            quantity_change=payload.quantity_change,
            reason_code=payload.reason_code,
        ),
    )


@router.get("/{product_id}/transactions", response_model=APIResponse[TransactionListData])
async def list_transactions_api(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    data = await list_product_transactions(db, product_id, page, limit)
    return success_response("Product transactions fetched successfully", data)
