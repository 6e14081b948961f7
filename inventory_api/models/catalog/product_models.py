from sqlalchemy import Column, Integer, String, Numeric, Boolean, ForeignKey, CheckConstraint, Index
from inventory_api.core.db import Base
from inventory_api.models.base.mixins import TimestampMixin, SoftDeleteMixin

DEFAULT_LOW_STOCK_THRESHOLD = 10


class Product(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, index=True)
    sku = Column(String(100), nullable=True, unique=True, index=True)
    # SET NULL only ever detaches soft-deleted products; live ones block category deletes
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(12, 2), nullable=False)
    low_stock_threshold = Column(Integer, nullable=False, default=DEFAULT_LOW_STOCK_THRESHOLD)
    description = Column(String(1000), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_quantity_non_negative"),
        CheckConstraint("price > 0", name="ck_product_price_positive"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_product_threshold_non_negative"),
        Index("ix_product_created_at_id", "created_at", "id"),
    )

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku} name={self.name} qty={self.quantity}>"
