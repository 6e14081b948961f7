# inventory_api/services/inventory/ledger_service.py

import uuid
from dataclasses import dataclass

from sqlalchemy import select, update, func
from sqlalchemy.exc import DBAPIError, TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.constants.error_codes import ErrorCode
from inventory_api.constants.reason_codes import ReasonCode, REASON_CODE_VALUES
from inventory_api.core.db import Database
from inventory_api.core.exceptions import (
    InsufficientStock,
    NotFound,
    TransientStoreFailure,
    ValidationFailed,
)
from inventory_api.models.catalog.ledger_models import ProductTransaction, QuantityHistory
from inventory_api.models.catalog.product_models import Product
from inventory_api.models.users.user_models import User
from inventory_api.schemas.catalog.ledger_schemas import (
    ProductTransactionOut,
    QuantityHistoryOut,
    QuantityHistoryListData,
    TransactionListData,
)
from inventory_api.schemas.common import Pagination, page_offset
from inventory_api.utils.logger import get_logger

logger = get_logger(__name__)

MAX_REASON_DESCRIPTION = 500


@dataclass(frozen=True)
class AdjustmentResult:
    product_id: int
    previous_quantity: int
    new_quantity: int


# =====================================================
# INPUT CHECKS (run before touching the store)
# =====================================================
def _validate_adjustment(
    quantity_change,
    reason_code,
    reason_description,
) -> ReasonCode:
    if isinstance(quantity_change, bool) or not isinstance(quantity_change, int) or quantity_change == 0:
        raise ValidationFailed(
            "Invalid quantity adjustment",
            [{"field": "quantityChange", "message": "Quantity change must be a non-zero integer"}],
        )

    try:
        code = ReasonCode(reason_code)
    except ValueError:
        raise ValidationFailed(
            "Invalid quantity adjustment",
            [{
                "field": "reasonCode",
                "message": f"Reason code must be one of: {', '.join(REASON_CODE_VALUES)}",
            }],
        )

    if reason_description is not None and len(reason_description) > MAX_REASON_DESCRIPTION:
        raise ValidationFailed(
            "Invalid quantity adjustment",
            [{
                "field": "reasonDescription",
                "message": f"Reason description must not exceed {MAX_REASON_DESCRIPTION} characters",
            }],
        )

    return code


# =====================================================
# AUDIT RECORDS
# =====================================================
def _transaction_entry(
    product_id: int,
    quantity_change: int,
    reason_code: ReasonCode,
    reason_description: str | None,
    previous_quantity: int,
    new_quantity: int,
    actor_id: uuid.UUID,
) -> ProductTransaction:
    return ProductTransaction(
        product_id=product_id,
        quantity_change=quantity_change,
        reason_code=reason_code.value,
        reason_description=reason_description,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
        created_by=actor_id,
    )


def _history_entry(
    product_id: int,
    quantity_change: int,
    reason_code: ReasonCode,
    previous_quantity: int,
    new_quantity: int,
    actor_id: uuid.UUID,
) -> QuantityHistory:
    return QuantityHistory(
        product_id=product_id,
        user_id=actor_id,
        change=quantity_change,
        reason=reason_code.value,
        previous_quantity=previous_quantity,
        new_quantity=new_quantity,
    )


# =====================================================
# ADJUST QUANTITY
# =====================================================
async def adjust_quantity(
    database: Database,
    *,
    product_id: int,
    quantity_change: int,
    reason_code: ReasonCode | str,
    reason_description: str | None,
    actor_id: uuid.UUID,
) -> AdjustmentResult:
    """Apply a signed stock change and write both audit records atomically.

    Runs in its own transaction: the product row is locked (``FOR UPDATE``
    on PostgreSQL, ``BEGIN IMMEDIATE`` on SQLite) so adjustments of the same
    product serialize. Either the quantity update and both audit rows commit
    together or nothing does.

    Raises ``ValidationFailed`` for bad input (before any I/O), ``NotFound``
    for an absent or soft-deleted product, ``InsufficientStock`` when the
    result would be negative and ``TransientStoreFailure`` for storage
    faults. Never retries.
    """
    code = _validate_adjustment(quantity_change, reason_code, reason_description)

    try:
        async with database.write_transaction() as session:
            # ------------------------------------
            # 1. Lock the product row
            # ------------------------------------
            current_quantity = await session.scalar(
                select(Product.quantity)
                .where(
                    Product.id == product_id,
                    Product.deleted_at.is_(None),
                )
                .with_for_update()
            )

            if current_quantity is None:
                raise NotFound("Product not found", ErrorCode.PRODUCT_NOT_FOUND)

            # ------------------------------------
            # 2. Validate non-negative stock
            # ------------------------------------
            new_quantity = current_quantity + quantity_change
            if new_quantity < 0:
                logger.warning(
                    "Insufficient stock",
                    extra={
                        "product_id": product_id,
                        "current_quantity": current_quantity,
                        "quantity_change": quantity_change,
                    },
                )
                raise InsufficientStock(current_quantity, quantity_change)

            # ------------------------------------
            # 3. Write the new quantity
            # ------------------------------------
            await session.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(quantity=new_quantity, updated_at=func.now())
            )

            # ------------------------------------
            # 4. Ledger + history (same transaction)
            # ------------------------------------
            session.add(
                _transaction_entry(
                    product_id,
                    quantity_change,
                    code,
                    reason_description,
                    current_quantity,
                    new_quantity,
                    actor_id,
                )
            )
            await session.flush()

            session.add(
                _history_entry(
                    product_id,
                    quantity_change,
                    code,
                    current_quantity,
                    new_quantity,
                    actor_id,
                )
            )

            await session.flush()

    except (DBAPIError, PoolTimeoutError) as exc:
        logger.error(
            "Quantity adjustment rolled back",
            extra={"product_id": product_id, "error": type(exc).__name__},
        )
        raise TransientStoreFailure() from exc

    logger.info(
        "Quantity adjusted",
        extra={
            "product_id": product_id,
            "previous_quantity": current_quantity,
            "new_quantity": new_quantity,
            "reason_code": code.value,
            "actor_id": str(actor_id),
        },
    )

    return AdjustmentResult(
        product_id=product_id,
        previous_quantity=current_quantity,
        new_quantity=new_quantity,
    )


# =====================================================
# LEDGER READS
# =====================================================
async def _ensure_product_exists(db: AsyncSession, product_id: int) -> None:
    exists = await db.scalar(select(Product.id).where(Product.id == product_id))
    if not exists:
        raise NotFound("Product not found", ErrorCode.PRODUCT_NOT_FOUND)


async def list_product_transactions(
    db: AsyncSession,
    product_id: int,
    page: int,
    limit: int,
) -> TransactionListData:
    await _ensure_product_exists(db, product_id)

    total = await db.scalar(
        select(func.count(ProductTransaction.id)).where(
            ProductTransaction.product_id == product_id
        )
    )

    rows = (
        await db.execute(
            select(ProductTransaction, User.email)
            .outerjoin(User, ProductTransaction.created_by == User.id)
            .where(ProductTransaction.product_id == product_id)
            .order_by(ProductTransaction.created_at.desc(), ProductTransaction.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit)
        )
    ).all()

    return TransactionListData(
        transactions=[
            ProductTransactionOut(
                id=txn.id,
                product_id=txn.product_id,
                quantity_change=txn.quantity_change,
                reason_code=txn.reason_code,
                reason_description=txn.reason_description,
                previous_quantity=txn.previous_quantity,
                new_quantity=txn.new_quantity,
                created_by=txn.created_by,
                created_by_email=email,
                created_at=txn.created_at,
            )
            for txn, email in rows
        ],
        pagination=Pagination.build(page, limit, total or 0),
    )


async def list_quantity_history(
    db: AsyncSession,
    product_id: int,
    page: int,
    limit: int,
) -> QuantityHistoryListData:
    await _ensure_product_exists(db, product_id)

    total = await db.scalar(
        select(func.count(QuantityHistory.id)).where(
            QuantityHistory.product_id == product_id
        )
    )

    rows = (
        await db.execute(
            select(QuantityHistory, User.email, Product.name)
            .outerjoin(User, QuantityHistory.user_id == User.id)
            .outerjoin(Product, QuantityHistory.product_id == Product.id)
            .where(QuantityHistory.product_id == product_id)
            .order_by(QuantityHistory.timestamp.desc(), QuantityHistory.id.desc())
            .offset(page_offset(page, limit))
            .limit(limit)
        )
    ).all()

    return QuantityHistoryListData(
        history=[
            QuantityHistoryOut(
                id=entry.id,
                product_id=entry.product_id,
                product_name=product_name,
                user_id=entry.user_id,
                user_email=email,
                change=entry.change,
                reason=entry.reason,
                previous_quantity=entry.previous_quantity,
                new_quantity=entry.new_quantity,
                timestamp=entry.timestamp,
            )
            for entry, email, product_name in rows
        ],
        pagination=Pagination.build(page, limit, total or 0),
    )
