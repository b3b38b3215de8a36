"""
Standalone image upload helper.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from catalog_api.core.exceptions import BadRequest
from catalog_api.dependencies import get_media_store, read_upload, require_writer
from catalog_api.schemas import UploadResponse
from catalog_api.services.media_store import CATEGORIES, MediaStore

router = APIRouter()


@router.post(
    "/categories",
    response_model=UploadResponse,
    dependencies=[Depends(require_writer)],
)
def upload_category_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    media: MediaStore = Depends(get_media_store),
):
    """
    Store a category image and return its absolute URL, for clients that
    upload first and send ``imageUrl`` with the category afterwards.
    """
    incoming = read_upload(image)
    if incoming is None:
        raise BadRequest("No file received")

    url = media.store(CATEGORIES, incoming)
    return {"success": True, "fileUrl": media.absolute_url(str(request.base_url), url)}
