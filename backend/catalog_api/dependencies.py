"""
Shared API dependencies.

Route dependencies are the request interceptors: they authenticate and parse
identifiers before a handler calls into a service.
"""

from typing import Any, Dict, List, Optional

from fastapi import Depends, Path, Request, UploadFile
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from catalog_api.config import Settings
from catalog_api.core.exceptions import Unauthorized
from catalog_api.database import get_db
from catalog_api.services.auth_service import AuthService
from catalog_api.services.category_service import CategoryService
from catalog_api.services.media_store import IncomingFile, MediaStore
from catalog_api.services.product_service import ProductService
from catalog_api.validation import parse_identifier

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_media_store(request: Request) -> MediaStore:
    return request.app.state.media


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


def get_category_service(
    request: Request,
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
) -> CategoryService:
    return CategoryService(db, media, base_url=str(request.base_url))


def get_product_service(
    db: Session = Depends(get_db), media: MediaStore = Depends(get_media_store)
) -> ProductService:
    return ProductService(db, media)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    Validate the bearer token and return ``{"userId", "username"}``.

    Missing or malformed Authorization header -> 401, bad token -> 403.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Authentication required")
    return auth.verify(credentials.credentials)


async def require_writer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Optional[Dict[str, Any]]:
    """Gate for mutating routes; a no-op unless REQUIRE_AUTH_FOR_WRITES is set."""
    if not settings.REQUIRE_AUTH_FOR_WRITES:
        return None
    return await get_current_user(credentials, auth)


def category_id_param(id: str = Path(..., description="Numeric category id")) -> int:
    return parse_identifier(id, "category")


def product_id_param(id: str = Path(..., description="Numeric product id")) -> int:
    return parse_identifier(id, "product")


def read_upload(file: Optional[UploadFile]) -> Optional[IncomingFile]:
    """Read an UploadFile into memory; empty file inputs count as no file."""
    if file is None or not file.filename:
        return None
    data = file.file.read()
    return IncomingFile(filename=file.filename, content_type=file.content_type, data=data)


def read_uploads(files: Optional[List[UploadFile]]) -> List[IncomingFile]:
    incoming = []
    for file in files or []:
        item = read_upload(file)
        if item is not None:
            incoming.append(item)
    return incoming


def form_payload(**fields: Any) -> Dict[str, Any]:
    """Drop form fields the client did not send."""
    return {key: value for key, value in fields.items() if value is not None}
