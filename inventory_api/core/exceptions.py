from fastapi import HTTPException
from inventory_api.constants.error_codes import ErrorCode


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | list | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    @property
    def message(self) -> str:
        return self.detail


# -------------------------
# DOMAIN OUTCOMES
# -------------------------
class NotFound(AppException):
    def __init__(self, message: str = "Resource not found", error_code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(404, message, error_code)


class InsufficientStock(AppException):
    def __init__(self, current_quantity: int, quantity_change: int):
        super().__init__(
            400,
            "Cannot reduce quantity below zero",
            ErrorCode.INSUFFICIENT_STOCK,
            {"currentQuantity": current_quantity, "quantityChange": quantity_change},
        )


class DuplicateSKU(AppException):
    def __init__(self, message: str = "SKU already exists"):
        super().__init__(409, message, ErrorCode.PRODUCT_SKU_EXISTS)


class DuplicateName(AppException):
    def __init__(self, message: str, error_code: ErrorCode):
        super().__init__(409, message, error_code)


class InvalidCategory(AppException):
    def __init__(self, message: str = "Category does not exist"):
        super().__init__(400, message, ErrorCode.INVALID_CATEGORY)


class CategoryInUse(AppException):
    def __init__(self, product_count: int):
        super().__init__(
            409,
            "Cannot delete category with existing products",
            ErrorCode.CATEGORY_IN_USE,
            {"productCount": product_count},
        )


class ValidationFailed(AppException):
    def __init__(self, message: str, details: list | None = None):
        super().__init__(400, message, ErrorCode.VALIDATION_ERROR, details)


# -------------------------
# AUTH
# -------------------------
class Unauthenticated(AppException):
    def __init__(self, message: str = "Authentication required", error_code: ErrorCode = ErrorCode.UNAUTHORIZED):
        super().__init__(401, message, error_code)


class Forbidden(AppException):
    def __init__(self, message: str = "Permission denied"):
        super().__init__(403, message, ErrorCode.PERMISSION_DENIED)


# -------------------------
# STORE
# -------------------------
class TransientStoreFailure(AppException):
    def __init__(self, message: str = "Storage temporarily unavailable. Please try again."):
        super().__init__(503, message, ErrorCode.TRANSIENT_STORE_FAILURE)
