from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.constants.roles import Capability
from inventory_api.core.db import get_db
from inventory_api.schemas.catalog.ledger_schemas import QuantityHistoryListData
from inventory_api.schemas.common import APIResponse, success_response
from inventory_api.schemas.reports.report_schemas import InventoryValueReport, StockLevelsReport
from inventory_api.services.inventory.ledger_service import list_quantity_history
from inventory_api.services.reports.report_service import (
    inventory_value_by_category,
    stock_levels,
)
from inventory_api.utils.check_roles import require_capability

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/stock-levels", response_model=APIResponse[StockLevelsReport])
async def stock_levels_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
):
    data = await stock_levels(db)
    return success_response("Stock levels report generated", data)


@router.get("/inventory-value", response_model=APIResponse[InventoryValueReport])
async def inventory_value_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
):
    data = await inventory_value_by_category(db)
    return success_response("Inventory value report generated", data)


@router.get("/products/{product_id}/quantity-history", response_model=APIResponse[QuantityHistoryListData])
async def quantity_history_api(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    data = await list_quantity_history(db, product_id, page, limit)
    return success_response("Quantity history fetched successfully", data)
