"""FastAPI application entrypoint. No business logic; only wiring, lifecycle and error mapping."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogai.api.v1 import router as v1_router
from blogai.core.config import Settings, get_settings
from blogai.core.context import AppContext
from blogai.core.errors import AppError, Unauthenticated, UpstreamFailure
from blogai.services.accounts import bootstrap_admin_if_needed

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    message: str,
    headers: dict[str, str] | None = None,
    **extra: object,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, **extra},
        headers=headers,
    )


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    headers = None
    if isinstance(exc, Unauthenticated):
        headers = {"WWW-Authenticate": "Bearer"}
    extra: dict[str, object] = {}
    if isinstance(exc, UpstreamFailure):
        extra["requires_retry"] = True
        logger.warning(
            "Upstream failure",
            extra={"path": request.url.path, "reason": exc.message},
        )
    return _error_response(exc.status_code, exc.message, headers=headers, **extra)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{loc}: {first.get('msg', 'invalid')}" if loc else str(first.get("msg"))
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"path": request.url.path, "method": request.method},
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def create_app(
    settings: Settings | None = None,
    context: AppContext | None = None,
) -> FastAPI:
    """
    Build the FastAPI app. The AppContext is created at startup (or the one passed
    in is used) and closed at shutdown.
    """
    settings = settings or (context.settings if context else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        ctx = context or AppContext.build(settings)
        app.state.context = ctx
        admin_password = settings.BOOTSTRAP_ADMIN_PASSWORD
        if settings.BOOTSTRAP_ADMIN_EMAIL and admin_password:
            db = ctx.session_factory()
            try:
                bootstrap_admin_if_needed(
                    db,
                    ctx.issuer,
                    settings.BOOTSTRAP_ADMIN_EMAIL,
                    admin_password.get_secret_value(),
                )
            finally:
                db.close()
        try:
            yield
        finally:
            ctx.close()

    app = FastAPI(
        title="BlogAI API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "BlogAI API"}

    return app


app = create_app()
