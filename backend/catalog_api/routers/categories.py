"""
API endpoints for category management.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from catalog_api.dependencies import (
    category_id_param,
    form_payload,
    get_category_service,
    read_upload,
    require_writer,
)
from catalog_api.schemas import CategoryResponse, DeleteResponse
from catalog_api.services.category_service import CategoryService

router = APIRouter()


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_writer)],
)
def create_category(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    image: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service),
):
    """Create a category (multipart form, optional ``image`` file)."""
    payload = form_payload(name=name, description=description, imageUrl=image_url)
    return service.create(payload, read_upload(image))


@router.get("", response_model=List[CategoryResponse])
def list_categories(service: CategoryService = Depends(get_category_service)):
    """List all categories."""
    return service.list()


@router.get("/{id}", response_model=CategoryResponse)
def get_category(
    category_id: int = Depends(category_id_param),
    service: CategoryService = Depends(get_category_service),
):
    return service.get(category_id)


@router.put(
    "/{id}",
    response_model=CategoryResponse,
    dependencies=[Depends(require_writer)],
)
def update_category(
    category_id: int = Depends(category_id_param),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    image: Optional[UploadFile] = File(None),
    service: CategoryService = Depends(get_category_service),
):
    """Partially update a category; a new ``image`` replaces the stored one."""
    payload = form_payload(name=name, description=description, imageUrl=image_url)
    return service.update(category_id, payload, read_upload(image))


@router.delete(
    "/{id}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_writer)],
)
def delete_category(
    category_id: int = Depends(category_id_param),
    service: CategoryService = Depends(get_category_service),
):
    """Delete a category and its image."""
    return service.delete(category_id)
