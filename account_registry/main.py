import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from account_registry.config import Settings, get_settings
from account_registry.database import create_db_engine, init_db, make_session_factory
from account_registry.errors import AppError, Errors
from account_registry.routers import accounts_router, audit_router, export_router, system_router
from account_registry.services import AccountStore
from account_registry.utils.rate_limit import limiter, rate_limit_exceeded_handler, set_rate_limiting

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Keep SQLAlchemy quiet unless SQL_ECHO is on
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all API requests and responses"""

    async def dispatch(self, request: Request, call_next) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        logger.info(f">>> {request.method} {request.url.path} | IP: {client_ip}")
        try:
            response = await call_next(request)
            logger.info(
                f"<<< {request.method} {request.url.path} | Status: {response.status_code}"
            )
            return response
        except Exception as e:
            logger.error(f"!!! {request.method} {request.url.path} | Error: {str(e)}")
            raise


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Render every AppError as the error envelope."""
        log = logger.error if exc.status >= 500 else logger.warning
        log(
            f"AppError: code={exc.code} status={exc.status} "
            f"request_id={exc.request_id} message={exc.message}"
        )
        return JSONResponse(
            status_code=exc.status,
            content=exc.to_dict(is_production=settings.is_production),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """
        Report body / query validation failures as 400 bad-request.
        Input values are stripped from the details.
        """
        safe_details = [
            {k: v for k, v in err.items() if k in ("loc", "msg", "type")}
            for err in exc.errors()
        ]
        first = safe_details[0] if safe_details else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid input")

        error = Errors.validation(message, safe_details)
        logger.warning(
            f"ValidationError: request_id={error.request_id} path={request.url.path} "
            f"errors={len(safe_details)}"
        )
        return JSONResponse(
            status_code=error.status,
            content=error.to_dict(is_production=settings.is_production),
        )

    # Catch-all for unhandled exceptions (prevent stack trace leaks in production)
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        request_id = str(uuid4())
        logger.error(
            f"UnhandledException: request_id={request_id} path={request.url.path} "
            f"error={type(exc).__name__}: {exc}",
            exc_info=True,
        )
        error = AppError(request_id=request_id)
        return JSONResponse(status_code=500, content=error.to_dict(is_production=True))


def create_app(settings: Optional[Settings] = None, store: Optional[AccountStore] = None) -> FastAPI:
    """
    Build the application around one AccountStore.

    Run with: python -m account_registry.main
    or: uvicorn account_registry.main:create_app --factory
    """
    settings = settings or get_settings()
    configure_logging(settings)

    engine = None
    if store is None:
        engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        init_db(engine)
        store = AccountStore(make_session_factory(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{settings.SERVICE_NAME} {settings.SERVICE_VERSION} started ({settings.ENVIRONMENT})")
        yield
        if engine is not None:
            engine.dispose()
        logger.info(f"{settings.SERVICE_NAME} stopped")

    # Disable docs and OpenAPI schema in production
    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        openapi_url=None if settings.is_production else "/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    # Register rate limiter with app state (the limiter is shared process-wide)
    set_rate_limiting(settings.RATE_LIMIT_ENABLED)
    app.state.limiter = limiter

    _register_exception_handlers(app, settings)

    app.add_middleware(RequestLoggingMiddleware)

    # In production a wildcard origin is dropped rather than trusted.
    if settings.is_production and "*" in settings.ALLOWED_ORIGINS:
        logger.warning("CORS: Production wildcard overridden to empty")
        cors_origins: list = []
    else:
        cors_origins = settings.ALLOWED_ORIGINS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins and len(cors_origins) > 0,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Admin-API-Key", "X-Operator", "X-Request-ID"],
    )

    app.include_router(system_router)
    app.include_router(accounts_router)
    app.include_router(audit_router)
    app.include_router(export_router)

    return app


def run(settings: Optional[Settings] = None) -> None:
    """Serve the application with uvicorn on HOST:PORT."""
    settings = settings or get_settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
