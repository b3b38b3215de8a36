"""
Category service: validation, image handling and persistence for categories.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from catalog_api.core.exceptions import Conflict, NotFound, UniqueConstraintViolation
from catalog_api.models.category import Category
from catalog_api.repositories import CategoryRepository
from catalog_api.schemas import CategoryCreate, CategoryUpdate
from catalog_api.services.media_store import CATEGORIES, IncomingFile, MediaStore
from catalog_api.validation import validate_payload

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db: Session, media: MediaStore, base_url: Optional[str] = None):
        self.media = media
        self.categories = CategoryRepository(db)
        # Absolute image URLs on this host count as stored files
        self.base_url = base_url

    def _discard_image(self, url: Optional[str]) -> None:
        self.media.delete(url, owner_kind=CATEGORIES, base_url=self.base_url)

    def create(
        self, payload: Mapping[str, Any], image: Optional[IncomingFile] = None
    ) -> Category:
        """
        Create a category, storing its image first when one is uploaded.

        An uploaded file takes precedence over an ``imageUrl`` field. If the
        insert fails the stored file is removed again.
        """
        data = validate_payload(CategoryCreate, payload)

        if self.categories.select_by_name(data.name):
            raise Conflict("Category already exists")

        stored_url = None
        image_url = data.image_url
        if image is not None:
            stored_url = image_url = self.media.store(CATEGORIES, image)

        try:
            category = self.categories.insert(
                name=data.name,
                description=data.description,
                image_url=image_url,
            )
        except UniqueConstraintViolation:
            # Lost a race against a concurrent create with the same name
            self.media.delete(stored_url)
            raise Conflict("Category already exists")
        except Exception:
            self.media.delete(stored_url)
            raise

        logger.info(f"Created category {category.id} ({category.name})")
        return category

    def list(self) -> List[Category]:
        return self.categories.select_all()

    def get(self, category_id: int) -> Category:
        category = self.categories.select_by_id(category_id)
        if category is None:
            raise NotFound("Category not found")
        return category

    def _write(self, category_id: int, values: Dict[str, Any]) -> Category:
        try:
            return self.categories.update(category_id, values)
        except UniqueConstraintViolation:
            raise Conflict("Category already exists")

    def update(
        self,
        category_id: int,
        payload: Mapping[str, Any],
        image: Optional[IncomingFile] = None,
    ) -> Category:
        """
        Partial update. A new image is stored before the row is written; the
        previous file is removed only after the write succeeds.
        """
        data = validate_payload(CategoryUpdate, payload)
        category = self.get(category_id)

        values: Dict[str, Any] = data.model_dump(exclude_none=True)
        if "name" in values and values["name"] != category.name:
            if self.categories.select_by_name(values["name"]):
                raise Conflict("Category already exists")

        old_url = category.image_url
        if image is not None:
            with self.media.replace(
                old_url, image, CATEGORIES, base_url=self.base_url
            ) as stored_url:
                values["image_url"] = stored_url
                category = self._write(category_id, values)
        else:
            category = self._write(category_id, values)
            if "image_url" in values and values["image_url"] != old_url:
                # Image swapped for an already uploaded URL
                self._discard_image(old_url)

        logger.info(f"Updated category {category_id}")
        return category

    def delete(self, category_id: int) -> Dict[str, Any]:
        category = self.get(category_id)
        name = category.name
        image_url = category.image_url

        self.categories.delete(category_id)
        if image_url:
            self._discard_image(image_url)
        logger.info(f"Deleted category {category_id} ({name})")
        return {"success": True, "message": f"Successfully deleted '{name}'"}
