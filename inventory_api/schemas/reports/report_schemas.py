# inventory_api/schemas/reports/report_schemas.py

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from decimal import Decimal


class InventorySummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_products: int = Field(alias="totalProducts")
    out_of_stock: int = Field(alias="outOfStock")
    low_stock: int = Field(alias="lowStock")
    active_products: int = Field(alias="activeProducts")
    total_value: Decimal = Field(alias="totalValue")


class StockLevelItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    category_name: Optional[str] = Field(alias="categoryName")
    quantity: int
    low_stock_threshold: int = Field(alias="lowStockThreshold")
    price: Decimal
    total_value: Decimal = Field(alias="totalValue")
    stock_status: str = Field(alias="stockStatus")


class StockLevelsSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_products: int = Field(alias="totalProducts")
    out_of_stock: int = Field(alias="outOfStock")
    low_stock: int = Field(alias="lowStock")
    in_stock: int = Field(alias="inStock")
    total_value: Decimal = Field(alias="totalValue")


class StockLevelsReport(BaseModel):
    summary: StockLevelsSummary
    products: List[StockLevelItem]


class CategoryValueItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    category_id: int = Field(alias="categoryId")
    category_name: str = Field(alias="categoryName")
    product_count: int = Field(alias="productCount")
    total_quantity: int = Field(alias="totalQuantity")
    total_value: Decimal = Field(alias="totalValue")
    average_price: Decimal = Field(alias="averagePrice")
    out_of_stock_count: int = Field(alias="outOfStockCount")
    low_stock_count: int = Field(alias="lowStockCount")


class InventoryValueSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_categories: int = Field(alias="totalCategories")
    total_products: int = Field(alias="totalProducts")
    total_quantity: int = Field(alias="totalQuantity")
    total_value: Decimal = Field(alias="totalValue")
    average_value_per_category: Decimal = Field(alias="averageValuePerCategory")


class InventoryValueReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    overall_summary: InventoryValueSummary = Field(alias="overallSummary")
    categories: List[CategoryValueItem]
