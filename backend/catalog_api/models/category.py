"""
Category database model.
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from catalog_api.database import Base


class Category(Base):
    """Category model for product categorization."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(300), nullable=False)
    image_url = Column(String, nullable=True)

    # Relationships
    products = relationship(
        "Product", secondary="product_category", back_populates="categories"
    )
