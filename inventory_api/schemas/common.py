# inventory_api/schemas/common.py

import math
from typing import TypeVar, Generic, Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


# =========================
# ENVELOPE
# =========================
class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": data,
    }


# =========================
# PAGINATION
# =========================
class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if limit else 0,
        )


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit
