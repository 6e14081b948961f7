# inventory_api/schemas/catalog/product_schemas.py

from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from decimal import Decimal
from datetime import datetime

from inventory_api.models.catalog.product_models import DEFAULT_LOW_STOCK_THRESHOLD
from inventory_api.schemas.common import Pagination


class ProductCreate(BaseModel):
    # quantity is not a field here: stock only moves through quantity adjustments
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=255)
    sku: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category_id: int = Field(alias="categoryId", gt=0)
    price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    low_stock_threshold: int = Field(
        default=DEFAULT_LOW_STOCK_THRESHOLD, alias="lowStockThreshold", ge=0
    )
    description: Optional[str] = Field(default=None, max_length=1000)
    active: bool = True


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=2, max_length=255)
    sku: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category_id: Optional[int] = Field(default=None, alias="categoryId", gt=0)
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    low_stock_threshold: Optional[int] = Field(default=None, alias="lowStockThreshold", ge=0)
    description: Optional[str] = Field(default=None, max_length=1000)
    active: Optional[bool] = None


class ProductOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    sku: Optional[str]
    category_id: Optional[int] = Field(alias="categoryId")
    category_name: Optional[str] = Field(alias="categoryName")
    quantity: int
    price: Decimal
    low_stock_threshold: int = Field(alias="lowStockThreshold")
    description: Optional[str]
    active: bool
    deleted_at: Optional[datetime] = Field(alias="deletedAt")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(alias="updatedAt")


class ProductListData(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class StockListData(BaseModel):
    count: int
    products: List[ProductOut]


@dataclass
class ProductFilters:
    category_id: Optional[int] = None
    search: Optional[str] = None
    active: Optional[bool] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    in_stock: Optional[bool] = None
    low_stock: Optional[bool] = None
    include_deleted: bool = False
