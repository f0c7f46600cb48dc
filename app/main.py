"""
Main FastAPI application for the Diacritice Fix API.
Serves submit/verify/download, the Stripe webhook, health, cleanup and metrics.
"""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.api.routes import artifacts, cleanup, health, webhooks
from app.artifacts.lifecycle import LifecycleController
from app.artifacts.store import ArtifactStore
from app.core.config import settings
from app.core.errors import InternalInvariantError, MalformedRequest, ServiceError
from app.core.logging import configure_logging
from app.services.cleanup.service import CleanupService
from app.services.payments.base import PaymentGateway
from app.services.payments.stripe_gateway import StripeGateway
from app.services.processing.base import DocumentProcessor
from app.services.processing.pdfco import PdfCoProcessor
from app.utils.metrics import router as metrics_router

logger = logging.getLogger(__name__)

HTTP_ERROR_KINDS = {401: "Unauthorized", 404: "NotFound", 405: "MethodNotAllowed"}


def _error_body(kind: str, message: str) -> dict:
    return {"success": False, "kind": kind, "message": message}


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    if settings.sweep_interval_seconds > 0:
        service = CleanupService(app.state.controller)
        sweeper = asyncio.create_task(service.run_periodic(settings.sweep_interval_seconds))
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper


def create_app(
    store: ArtifactStore | None = None,
    processor: DocumentProcessor | None = None,
    gateway: PaymentGateway | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Diacritice Fix API",
        description="Paid, single-use delivery of PDFs with repaired Romanian diacritics",
        version="1.0.0",
        lifespan=lifespan,
    )

    # empty ArtifactStore is falsy
    if store is None:
        store = ArtifactStore(ttl_seconds=settings.artifact_ttl_seconds)
    if gateway is None:
        gateway = StripeGateway()
    if processor is None:
        processor = PdfCoProcessor({
            "api_key": settings.pdfco_api_key,
            "api_url": settings.pdfco_api_url,
            "timeout": settings.processor_timeout_seconds,
        })
    app.state.processor = processor
    app.state.gateway = gateway
    app.state.controller = LifecycleController(store, gateway)

    # CORS
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", settings.request_id_header],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if isinstance(exc, InternalInvariantError):
            logger.error(
                "internal_invariant_violated",
                exc_info=exc,
                extra={"kind": exc.kind, "error": exc.message, "path": request.url.path},
            )
            return JSONResponse(
                status_code=exc.status_code,
                content=_error_body(exc.kind, "Internal server error"),
            )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.kind, exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        kind = HTTP_ERROR_KINDS.get(exc.status_code, "HTTPError")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(kind, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        err = MalformedRequest()
        return JSONResponse(status_code=err.status_code, content=_error_body(err.kind, err.message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content=_error_body("InternalError", "Server error"))

    # Routers
    app.include_router(health.router, tags=["health"])
    app.include_router(artifacts.router)
    app.include_router(webhooks.router)
    app.include_router(cleanup.router)
    app.include_router(metrics_router)
    return app


configure_logging()
app = create_app()
