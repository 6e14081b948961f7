# inventory_api/routers/catalog/category_router.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.constants.roles import Capability
from inventory_api.core.db import get_db
from inventory_api.schemas.catalog.category_schemas import (
    CategoryCreate,
    CategoryUpdate,
    CategoryOut,
    CategoryListData,
)
from inventory_api.schemas.common import APIResponse, success_response
from inventory_api.services.catalog.category_service import (
    create_category,
    list_categories,
    get_category,
    update_category,
    delete_category,
)
from inventory_api.utils.check_roles import require_capability
from inventory_api.utils.logger import get_logger

router = APIRouter(prefix="/categories", tags=["Categories"])
logger = get_logger(__name__)


@router.post("", response_model=APIResponse[CategoryOut], status_code=status.HTTP_201_CREATED)
async def create_category_api(
    payload: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.WRITE)),
):
    logger.info("Create category", extra={"category_name": payload.name})
    category = await create_category(db, payload, user)
    return success_response("Category created successfully", category)


@router.get("", response_model=APIResponse[CategoryListData])
async def list_categories_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
    search: str | None = Query(None, description="Search by name"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    data = await list_categories(db, search, page, limit)
    return success_response("Categories fetched successfully", data)


@router.get("/{category_id}", response_model=APIResponse[CategoryOut])
async def get_category_api(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.READ)),
):
    category = await get_category(db, category_id)
    return success_response("Category fetched successfully", category)


@router.put("/{category_id}", response_model=APIResponse[CategoryOut])
async def update_category_api(
    category_id: int,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.WRITE)),
):
    category = await update_category(db, category_id, payload, user)
    return success_response("Category updated successfully", category)


@router.delete("/{category_id}", response_model=APIResponse[None])
async def delete_category_api(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_capability(Capability.WRITE)),
):
    await delete_category(db, category_id, user)
    return success_response("Category deleted successfully")
