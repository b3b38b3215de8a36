"""
API endpoints for product management.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status

from catalog_api.dependencies import (
    form_payload,
    get_product_service,
    product_id_param,
    read_uploads,
    require_writer,
)
from catalog_api.schemas import DeleteResponse, ProductResponse
from catalog_api.services.product_service import ProductService
from catalog_api.validation import parse_identifier

router = APIRouter()


def linked_category_id(category_id: str = Path(..., alias="categoryId")) -> int:
    return parse_identifier(category_id, "category")


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_writer)],
)
def create_product(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    is_contact_for_price: Optional[str] = Form(None, alias="isContactForPrice"),
    machine_data: Optional[str] = Form(None, alias="machineData"),
    show_in_hero: Optional[str] = Form(None, alias="showInHero"),
    hero_index: Optional[str] = Form(None, alias="heroIndex"),
    category_ids: Optional[List[str]] = Form(None, alias="categoryIds"),
    images: Optional[List[UploadFile]] = File(None),
    service: ProductService = Depends(get_product_service),
):
    """Create a product from multipart fields and up to 10 ``images``."""
    payload = form_payload(
        name=name,
        description=description,
        price=price,
        isContactForPrice=is_contact_for_price,
        machineData=machine_data,
        showInHero=show_in_hero,
        heroIndex=hero_index,
        categoryIds=category_ids,
    )
    return service.create(payload, read_uploads(images))


@router.get("", response_model=List[ProductResponse])
def list_products(
    featured: bool = Query(False, alias="showInHero"),
    service: ProductService = Depends(get_product_service),
):
    """List products with their categories; ``?showInHero=true`` for the hero list."""
    return service.list(featured=featured)


@router.get("/{id}", response_model=ProductResponse)
def get_product(
    product_id: int = Depends(product_id_param),
    service: ProductService = Depends(get_product_service),
):
    return service.get(product_id)


@router.put(
    "/{id}",
    response_model=ProductResponse,
    dependencies=[Depends(require_writer)],
)
def update_product(
    product_id: int = Depends(product_id_param),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    is_contact_for_price: Optional[str] = Form(None, alias="isContactForPrice"),
    machine_data: Optional[str] = Form(None, alias="machineData"),
    show_in_hero: Optional[str] = Form(None, alias="showInHero"),
    hero_index: Optional[str] = Form(None, alias="heroIndex"),
    category_ids: Optional[List[str]] = Form(None, alias="categoryIds"),
    images: Optional[List[UploadFile]] = File(None),
    service: ProductService = Depends(get_product_service),
):
    """
    Partially update a product.

    ``machineData`` is merged onto the stored attribute bag; to replace the
    image list send the full desired ``images`` list inside it.
    """
    payload = form_payload(
        name=name,
        description=description,
        price=price,
        isContactForPrice=is_contact_for_price,
        machineData=machine_data,
        showInHero=show_in_hero,
        heroIndex=hero_index,
        categoryIds=category_ids,
    )
    return service.update(product_id, payload, read_uploads(images))


@router.delete(
    "/{id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_writer)],
)
def delete_product(
    product_id: int = Depends(product_id_param),
    service: ProductService = Depends(get_product_service),
):
    return service.delete(product_id)


@router.post(
    "/{id}/categories/{categoryId}",
    response_model=ProductResponse,
    dependencies=[Depends(require_writer)],
)
def link_category(
    product_id: int = Depends(product_id_param),
    category_id: int = Depends(linked_category_id),
    service: ProductService = Depends(get_product_service),
):
    """Add a product to a category."""
    return service.link_category(product_id, category_id)


@router.delete(
    "/{id}/categories/{categoryId}",
    response_model=ProductResponse,
    dependencies=[Depends(require_writer)],
)
def unlink_category(
    product_id: int = Depends(product_id_param),
    category_id: int = Depends(linked_category_id),
    service: ProductService = Depends(get_product_service),
):
    """Remove a product from a category."""
    return service.unlink_category(product_id, category_id)
