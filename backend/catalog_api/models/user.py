"""
User database model.
"""

from sqlalchemy import Column, Integer, String, Text

from catalog_api.database import Base


class User(Base):
    """Catalog administrator able to obtain an access token."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(Text, nullable=False)
