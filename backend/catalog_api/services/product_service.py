"""
Product service.

Category membership is stored in the ``product_category`` join table only.
Clients may still send it as ``categoryIds`` or inside the attribute bag as
``machineData.categories``; either way it is written to the join table and
never kept in the stored bag.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from catalog_api.core.exceptions import NotFound, ValidationError
from catalog_api.models.category import Category
from catalog_api.models.product import Product
from catalog_api.repositories import CategoryRepository, ProductRepository
from catalog_api.schemas import ProductCreate, ProductUpdate
from catalog_api.services.media_store import PRODUCTS, IncomingFile, MediaStore
from catalog_api.validation import parse_id_list, validate_payload

logger = logging.getLogger(__name__)

SIMPLE_FIELDS = (
    "name",
    "description",
    "price",
    "is_contact_for_price",
    "show_in_hero",
    "hero_index",
)


class ProductService:
    def __init__(self, db: Session, media: MediaStore):
        self.media = media
        self.products = ProductRepository(db)
        self.categories = CategoryRepository(db)

    # --- Helpers ---

    def _requested_category_ids(
        self, category_ids: Optional[List[int]], bag: Dict[str, Any]
    ) -> Optional[List[int]]:
        """``categoryIds`` wins over ``machineData.categories``; pops the bag key."""
        from_bag = bag.pop("categories", None)
        if category_ids is not None:
            return category_ids
        if from_bag is None:
            return None
        try:
            return parse_id_list(from_bag)
        except ValueError as e:
            raise ValidationError.single("machineData.categories", str(e))

    @staticmethod
    def _check_images(bag: Mapping[str, Any]) -> None:
        images = bag.get("images")
        if images is None:
            return
        if not isinstance(images, list) or not all(isinstance(u, str) for u in images):
            raise ValidationError.single(
                "machineData.images", "Images must be a list of URLs"
            )

    def _resolve_categories(self, ids: List[int]) -> List[Category]:
        """Load the categories for ``ids`` in one query, failing on unknown IDs."""
        found = self.categories.select_where_id_in(ids)
        missing = sorted(set(ids) - {c.id for c in found})
        if missing:
            raise ValidationError.single(
                "categoryIds",
                f"Unknown category IDs: {', '.join(str(i) for i in missing)}",
            )
        return found

    # --- Operations ---

    def create(
        self, payload: Mapping[str, Any], images: Sequence[IncomingFile] = ()
    ) -> Product:
        data = validate_payload(ProductCreate, payload)

        bag = dict(data.machine_data)
        ids = self._requested_category_ids(data.category_ids, bag)
        categories = self._resolve_categories(ids or [])

        urls = self.media.store_many(PRODUCTS, images)
        bag["images"] = urls

        try:
            product = self.products.insert(
                name=data.name,
                description=data.description,
                price=data.price,
                is_contact_for_price=data.is_contact_for_price,
                machine_data=bag,
                show_in_hero=data.show_in_hero,
                hero_index=data.hero_index,
                categories=categories,
            )
        except Exception:
            self.media.delete_many(urls)
            raise

        logger.info(
            f"Created product {product.id} ({product.name}) with {len(urls)} images"
        )
        return product

    def list(self, featured: bool = False) -> List[Product]:
        """All products (or the hero products ordered by heroIndex), categories resolved."""
        if featured:
            return self.products.select_featured()
        return self.products.select_all()

    def get(self, product_id: int) -> Product:
        product = self.products.select_by_id(product_id)
        if product is None:
            raise NotFound("Product not found")
        return product

    def update(
        self,
        product_id: int,
        payload: Mapping[str, Any],
        images: Sequence[IncomingFile] = (),
    ) -> Product:
        """
        Partial update.

        The attribute bag is shallow-merged: keys in the update overwrite,
        all other keys persist. New uploads are appended to ``images``.
        """
        data = validate_payload(ProductUpdate, payload)
        product = self.get(product_id)
        sent = data.model_fields_set

        values: Dict[str, Any] = {}
        for field in SIMPLE_FIELDS:
            value = getattr(data, field)
            if field in ("name", "description") and value is None:
                continue
            if field in sent:
                values[field] = value

        touches_bag = (
            data.machine_data is not None
            or data.category_ids is not None
            or len(images) > 0
        )
        bag = None
        if touches_bag:
            bag = {**(product.machine_data or {}), **(data.machine_data or {})}
            # Only the update may name categories; drop whatever the stored bag holds
            if data.machine_data is None or "categories" not in data.machine_data:
                bag.pop("categories", None)
            self._check_images(bag)
            ids = self._requested_category_ids(data.category_ids, bag)
            if ids is not None:
                values["categories"] = self._resolve_categories(ids)

        new_urls: List[str] = []
        try:
            if bag is not None:
                new_urls = self.media.store_many(PRODUCTS, images)
                if new_urls:
                    bag["images"] = list(bag.get("images") or []) + new_urls
                values["machine_data"] = bag
            product = self.products.update(product_id, values)
        except Exception:
            self.media.delete_many(new_urls)
            raise

        logger.info(f"Updated product {product_id}")
        return product

    def delete(self, product_id: int) -> Dict[str, Any]:
        # Image files stay on disk; only the row and its category links go
        product = self.get(product_id)
        name = product.name
        self.products.delete(product_id)
        logger.info(f"Deleted product {product_id} ({name})")
        return {"success": True, "message": f"Successfully deleted '{name}'"}

    def link_category(self, product_id: int, category_id: int) -> Product:
        product = self.get(product_id)
        category = self.categories.select_by_id(category_id)
        if category is None:
            raise NotFound("Category not found")
        return self.products.link(product, category)

    def unlink_category(self, product_id: int, category_id: int) -> Product:
        product = self.get(product_id)
        category = self.categories.select_by_id(category_id)
        if category is None:
            raise NotFound("Category not found")
        return self.products.unlink(product, category)
