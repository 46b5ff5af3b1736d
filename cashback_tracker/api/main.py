"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from cashback_tracker.api.middleware import RequestIDMiddleware, MetricsMiddleware
from cashback_tracker.api.v1 import categories, dashboard, export, monthly, prices, settings as settings_api, transactions
from cashback_tracker.domain.models import LivePriceCache
from cashback_tracker.infrastructure.observability.logging import setup_logging
from cashback_tracker.infrastructure.storage.repositories import bootstrap_data_dir
from cashback_tracker.config import settings

PACKAGE_STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    bootstrap_data_dir(Path(settings.data_dir))
    logging.info("Data directory ready", extra={"data_dir": settings.data_dir})
    yield


def _validation_message(exc: RequestValidationError) -> str:
    """First error as 'field: message', e.g. 'amount: Input should be greater than 0'"""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    message = first.get("msg", "invalid value")
    return f"{field}: {message}" if field else message


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Cashback Tracker",
        description="Purchase log with cashback, simulated SOL staking and monthly dashboard",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.live_price_cache = LivePriceCache()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": _validation_message(exc)})

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/api", tags=["transactions"])
    app.include_router(monthly.router, prefix="/api", tags=["reports"])
    app.include_router(dashboard.router, prefix="/api", tags=["reports"])
    app.include_router(prices.router, prefix="/api", tags=["prices"])
    app.include_router(settings_api.router, prefix="/api", tags=["settings"])
    app.include_router(categories.router, prefix="/api", tags=["categories"])
    app.include_router(export.router, prefix="/api", tags=["export"])

    # Frontend, mounted last so API routes take precedence
    static_dir = Path(settings.static_dir) if settings.static_dir else PACKAGE_STATIC_DIR
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")

    return app


app = create_app()
