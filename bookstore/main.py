from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from bookstore.core.config import Settings, get_settings
from bookstore.core.errors import register_exception_handlers
from bookstore.core.logging import get_logger, setup_logging
from bookstore.core.middleware import RequestContextMiddleware
from bookstore.core.security import build_token_verifier
from bookstore.db.session import Database
from bookstore.services.cover_store import CoverStore

# Routers
from bookstore.api.routes.auth import router as auth_router
from bookstore.api.routes.books import router as books_router
from bookstore.api.routes.genres import router as genres_router
from bookstore.api.routes.transactions import router as transactions_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the storage handle at startup, dispose it at shutdown."""
    settings: Settings = app.state.settings
    logger = get_logger(__name__)

    database = Database.from_settings(settings)
    if settings.AUTO_CREATE_TABLES:
        database.create_all()
    app.state.db = database
    app.state.cover_store.ensure_directory()
    logger.info("Storage opened (%s)", database.engine.url.render_as_string(hide_password=True))
    try:
        yield
    finally:
        database.dispose()
        logger.info("Storage closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Bookstore API - genres, books, accounts and checkout transactions.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_verifier = build_token_verifier(settings)
    app.state.cover_store = CoverStore(settings.UPLOAD_DIR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    # Root endpoint
    @app.get("/")
    async def root():
        """API root endpoint with basic information."""
        return {
            "success": True,
            "message": "Server is up and running",
            "version": "1.0.0",
            "docs_url": "/docs",
            "endpoints": {
                "auth": "/auth",
                "genres": "/genres",
                "books": "/books",
                "transactions": "/transactions",
            },
            "authentication": {
                "type": "Bearer token",
                "obtain": "POST /auth/login",
            },
        }

    register_exception_handlers(app)

    # Mount routers
    api = APIRouter()
    api.include_router(auth_router)
    api.include_router(genres_router)
    api.include_router(books_router)
    api.include_router(transactions_router)
    app.include_router(api)

    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    return app


app = create_app()
