# inventory_api/schemas/catalog/ledger_schemas.py

import uuid
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from inventory_api.constants.reason_codes import ReasonCode
from inventory_api.schemas.catalog.product_schemas import ProductOut
from inventory_api.schemas.common import Pagination


class QuantityAdjustRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    quantity_change: int = Field(alias="quantityChange", strict=True)
    reason_code: ReasonCode = Field(alias="reasonCode")
    reason_description: Optional[str] = Field(
        default=None, alias="reasonDescription", max_length=500
    )

    @field_validator("quantity_change")
    @classmethod
    def _non_zero(cls, value: int) -> int:
        if value == 0:
            raise ValueError("Quantity change must not be zero")
        return value


class QuantityAdjustResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product: ProductOut
    product_id: int = Field(alias="productId")
    new_quantity: int = Field(alias="newQuantity")
    quantity_change: int = Field(alias="quantityChange")
    reason_code: ReasonCode = Field(alias="reasonCode")


class ProductTransactionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    product_id: int = Field(alias="productId")
    quantity_change: int = Field(alias="quantityChange")
    reason_code: str = Field(alias="reasonCode")
    reason_description: Optional[str] = Field(alias="reasonDescription")
    previous_quantity: int = Field(alias="previousQuantity")
    new_quantity: int = Field(alias="newQuantity")
    created_by: Optional[uuid.UUID] = Field(alias="createdBy")
    created_by_email: Optional[str] = Field(alias="createdByEmail")
    created_at: datetime = Field(alias="createdAt")


class TransactionListData(BaseModel):
    transactions: List[ProductTransactionOut]
    pagination: Pagination


class QuantityHistoryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    product_id: int = Field(alias="productId")
    product_name: Optional[str] = Field(alias="productName")
    user_id: Optional[uuid.UUID] = Field(alias="userId")
    user_email: Optional[str] = Field(alias="userEmail")
    change: int
    reason: Optional[str]
    previous_quantity: int = Field(alias="previousQuantity")
    new_quantity: int = Field(alias="newQuantity")
    timestamp: datetime


class QuantityHistoryListData(BaseModel):
    history: List[QuantityHistoryOut]
    pagination: Pagination
