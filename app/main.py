"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, settings
from app.database import database
from app.errors import register_error_handlers
from app.logging_config import get_logger, setup_logging
from app.routers import auth, kicks
from app.utils.auth import TokenService


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    app_settings: Settings = app.state.settings
    # Startup
    await database.connect(app_settings.mongodb_url, app_settings.mongodb_db_name)
    yield
    # Shutdown
    await database.disconnect()


def create_app(app_settings: Settings = settings) -> FastAPI:
    """
    Build the application from a settings object.

    The settings and the token service are attached to ``app.state`` and
    reach handlers only through dependencies.
    """
    app = FastAPI(
        title="KickIt API",
        description="Backend API for the KickIt bucket-list tracker",
        version="0.1.0",
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.token_service = TokenService(
        secret=app_settings.jwt_secret,
        algorithm=app_settings.jwt_algorithm,
        expiration_minutes=app_settings.jwt_expiration_minutes,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Include routers
    app.include_router(auth.router)
    app.include_router(kicks.router)

    @app.get("/")
    async def root():
        """Root endpoint - health check."""
        return {"status": "ok", "message": "KickIt API"}

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


setup_logging(log_level=settings.log_level)
app = create_app()
