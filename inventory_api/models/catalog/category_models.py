from sqlalchemy import Column, Integer, String
from inventory_api.core.db import Base
from inventory_api.models.base.mixins import TimestampMixin


class Category(Base, TimestampMixin):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(String(500), nullable=True)

    def __repr__(self):
        return f"<Category id={self.id} name={self.name}>"
