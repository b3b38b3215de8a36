"""
Authentication API endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from catalog_api.config import Settings
from catalog_api.core.exceptions import NotFound
from catalog_api.core.rate_limit import limiter, login_rate_limit
from catalog_api.database import get_db
from catalog_api.dependencies import get_auth_service, get_current_user, get_settings
from catalog_api.schemas import LoginRequest, LoginResponse, TokenUser, UserResponse
from catalog_api.services.auth_service import AuthService

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
@limiter.limit(login_rate_limit)
def login(
    request: Request,
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
) -> Any:
    """
    Exchange username and password for a bearer token valid for 24 hours.
    """
    return auth.login(db, credentials.username, credentials.password)


@router.post(
    "/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
def register(
    user_in: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
) -> Any:
    """
    Register a new user. Disabled unless REGISTRATION_ENABLED is set.
    """
    if not settings.REGISTRATION_ENABLED:
        raise NotFound("Not found")
    return auth.create_user(db, user_in.username, user_in.password)


@router.get("/me", response_model=TokenUser)
def read_current_user(
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Any:
    """
    Get the user embedded in the bearer token.
    """
    return current_user
