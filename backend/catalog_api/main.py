"""
FastAPI application entry point for the Catalog API.

``create_app`` wires settings, logging, the database and the media store
into an application; the module-level ``app`` is the default instance used
by uvicorn.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_api import __version__
from catalog_api.config import Settings, settings as default_settings
from catalog_api.core.exceptions import CatalogError, PersistenceError, Unauthorized
from catalog_api.core.logging_config import setup_logging
from catalog_api.core.rate_limit import configure_limiter
from catalog_api.database import Database
from catalog_api.routers import auth, categories, products, uploads
from catalog_api.services.auth_service import AuthService
from catalog_api.services.media_store import URL_PREFIX, MediaStore
from catalog_api.validation import format_errors

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Initializing database...")
    app.state.db.open()
    app.state.media.ensure_directories()
    logger.info("Catalog API ready")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    app.state.db.close()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code, content=exc.to_dict(), headers=headers
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation error", "details": format_errors(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RateLimitExceeded)
    async def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": "Rate limit exceeded. Please try again later."},
        )

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError):
        logger.error(f"Database error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Global exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build an application bound to ``settings`` (defaults to the environment)."""
    settings = settings or default_settings
    setup_logging(settings)

    app = FastAPI(
        title="Catalog API",
        description="Products, categories and their images",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = Database.from_settings(settings)
    app.state.media = MediaStore.from_settings(settings)
    app.state.auth = AuthService(settings)
    app.state.limiter = configure_limiter(settings)

    register_exception_handlers(app)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Register routers
    app.include_router(categories.router, prefix="/categories", tags=["categories"])
    app.include_router(products.router, prefix="/products", tags=["products"])
    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(uploads.router, prefix="/upload", tags=["uploads"])

    # Stored images; the directories are created on startup
    app.mount(
        URL_PREFIX,
        StaticFiles(directory=str(app.state.media.root), check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalog_api.main:app",
        host="0.0.0.0",
        port=3000,
        reload=True,
        log_level="info",
    )
