"""
Product and product-category link models.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from catalog_api.database import Base

# Single source of truth for product/category membership
product_category = Table(
    "product_category",
    Base.metadata,
    Column(
        "product_id",
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Product(Base):
    """Catalog product with a free-form attribute bag."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(12, 2), nullable=True)
    is_contact_for_price = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=False)
    machine_data = Column(JSON, nullable=False, default=dict)
    show_in_hero = Column(Boolean, nullable=False, default=False)
    hero_index = Column(Integer, nullable=False, default=0)

    # Relationships. selectin resolves the categories of every product in a
    # result set with one extra IN query.
    categories = relationship(
        "Category",
        secondary=product_category,
        back_populates="products",
        lazy="selectin",
        order_by="Category.id",
    )
