"""
Persistence gateway: typed table access on top of a SQLAlchemy session.

Repositories commit per operation and roll the session back on failure.
Integrity errors raised by unique constraints surface as
``UniqueConstraintViolation``; everything else as ``PersistenceError``.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterable, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_api.core.exceptions import PersistenceError, UniqueConstraintViolation
from catalog_api.models import Category, Product, User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


def _is_unique_violation(exc: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed", postgres: "duplicate key value violates unique constraint"
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate key" in message


class Repository(Generic[ModelT]):
    """CRUD access for one mapped table."""

    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.db.rollback()
            if _is_unique_violation(exc):
                raise UniqueConstraintViolation(str(exc.orig)) from exc
            raise PersistenceError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Database error on {self.model.__tablename__}: {exc}")
            raise PersistenceError(str(exc)) from exc

    def insert(self, **values: Any) -> ModelT:
        with self._guard():
            obj = self.model(**values)
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        return obj

    def select_by_id(self, id: int) -> Optional[ModelT]:
        with self._guard():
            return self.db.get(self.model, id)

    def select_all(self) -> List[ModelT]:
        with self._guard():
            return self.db.query(self.model).order_by(self.model.id).all()

    def select_where(self, *criteria: Any) -> List[ModelT]:
        with self._guard():
            return (
                self.db.query(self.model)
                .filter(*criteria)
                .order_by(self.model.id)
                .all()
            )

    def select_where_id_in(self, ids: Iterable[int]) -> List[ModelT]:
        ids = list(dict.fromkeys(ids))
        if not ids:
            return []
        with self._guard():
            return (
                self.db.query(self.model)
                .filter(self.model.id.in_(ids))
                .order_by(self.model.id)
                .all()
            )

    def update(self, id: int, values: Dict[str, Any]) -> Optional[ModelT]:
        with self._guard():
            obj = self.db.get(self.model, id)
            if obj is None:
                return None
            for key, value in values.items():
                setattr(obj, key, value)
            self.db.commit()
            self.db.refresh(obj)
        return obj

    def delete(self, id: int) -> bool:
        with self._guard():
            obj = self.db.get(self.model, id)
            if obj is None:
                return False
            self.db.delete(obj)
            self.db.commit()
        return True


class UserRepository(Repository[User]):
    model = User

    def select_by_username(self, username: str) -> Optional[User]:
        with self._guard():
            return self.db.query(User).filter(User.username == username).first()


class CategoryRepository(Repository[Category]):
    model = Category

    def select_by_name(self, name: str) -> Optional[Category]:
        with self._guard():
            return self.db.query(Category).filter(Category.name == name).first()


class ProductRepository(Repository[Product]):
    model = Product

    def select_featured(self) -> List[Product]:
        with self._guard():
            return (
                self.db.query(Product)
                .filter(Product.show_in_hero.is_(True))
                .order_by(Product.hero_index, Product.id)
                .all()
            )

    def set_categories(self, product: Product, categories: List[Category]) -> Product:
        with self._guard():
            product.categories = list(categories)
            self.db.commit()
            self.db.refresh(product)
        return product

    def link(self, product: Product, category: Category) -> Product:
        if category in product.categories:
            return product
        with self._guard():
            product.categories.append(category)
            self.db.commit()
            self.db.refresh(product)
        return product

    def unlink(self, product: Product, category: Category) -> Product:
        if category not in product.categories:
            return product
        with self._guard():
            product.categories.remove(category)
            self.db.commit()
            self.db.refresh(product)
        return product
