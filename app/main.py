import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import auth, reports, routes, sharing, vitals
from app.config import Settings, settings
from app.database import Database
from app.errors import HealthWalletError
from app.services.auth import LocalAuthProvider
from app.services.file_service import FileService

logger = logging.getLogger(__name__)


def configure_logging(app_settings: Settings) -> None:
    """Configure application-wide logging."""
    logging.basicConfig(
        level=getattr(logging, app_settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    The database, file store and auth provider are created in the lifespan
    handler and hung off ``app.state``; nothing touches the database at
    import time.
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s %s", app_settings.app_name, app_settings.app_version)
        app.state.settings = app_settings
        database = Database(app_settings.database_url)
        database.create_all()
        app.state.database = database
        app.state.file_service = FileService(
            upload_dir=app_settings.upload_dir,
            max_upload_bytes=app_settings.max_upload_bytes,
        )
        app.state.auth_provider = LocalAuthProvider(app_settings)
        yield
        database.dispose()
        logger.info("Shut down %s", app_settings.app_name)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.info(
            "%s %s -> %s (%sms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    register_exception_handlers(app)

    for module in (routes, auth, reports, vitals, sharing):
        app.include_router(module.router, prefix=app_settings.api_prefix)

    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain and framework errors to ``{"error": ...}`` responses."""

    @app.exception_handler(HealthWalletError)
    async def domain_error_handler(request: Request, exc: HealthWalletError):
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Invalid request",
                # Raw input is dropped; it may hold values JSON cannot encode (NaN)
                "details": jsonable_encoder(
                    [{k: v for k, v in error.items() if k != "input"} for error in exc.errors()]
                ),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Something went wrong!"},
        )


app = create_app()
