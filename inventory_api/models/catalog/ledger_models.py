from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.sql import func
from inventory_api.core.db import Base
from inventory_api.constants.reason_codes import REASON_CODE_VALUES

_REASON_CODE_LIST = ", ".join(f"'{code}'" for code in REASON_CODE_VALUES)


class ProductTransaction(Base):
    """Write-once ledger entry for one quantity change."""

    __tablename__ = "product_transactions"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity_change = Column(Integer, nullable=False)
    reason_code = Column(String(20), nullable=False)
    reason_description = Column(String(500), nullable=True)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    created_by = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("quantity_change <> 0", name="ck_product_transaction_change_non_zero"),
        CheckConstraint(f"reason_code IN ({_REASON_CODE_LIST})", name="ck_product_transaction_reason_code"),
        CheckConstraint("new_quantity >= 0", name="ck_product_transaction_new_quantity_non_negative"),
        Index("ix_product_transaction_product_created", "product_id", "created_at"),
    )

    def __repr__(self):
        return (
            f"<ProductTransaction id={self.id} product_id={self.product_id} "
            f"change={self.quantity_change} {self.previous_quantity}->{self.new_quantity}>"
        )


class QuantityHistory(Base):
    """Reporting-side record of the same quantity change."""

    __tablename__ = "quantity_history"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    change = Column(Integer, nullable=False)
    reason = Column(String(100), nullable=True)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_quantity_history_product_timestamp", "product_id", "timestamp"),
    )

    def __repr__(self):
        return f"<QuantityHistory id={self.id} product_id={self.product_id} change={self.change}>"
