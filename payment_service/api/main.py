"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.orm import Session
from starlette.responses import Response

from payment_service.api.errors import register_exception_handlers
from payment_service.api.middleware import RequestIDMiddleware, MetricsMiddleware
from payment_service.api.v1 import payment
from payment_service.infrastructure.database.session import get_db, init_db
from payment_service.infrastructure.observability.logging import setup_logging
from payment_service.infrastructure.observability.metrics import request_duration_histogram
from payment_service.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Payment API",
        description="Pay, cancel, refund and search transactions across banks",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware, histogram=request_duration_histogram)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Liveness: process is up
    @app.get("/health/live")
    def health_live():
        return {"status": "ok", "service": settings.service_name}

    # Readiness: database reachable
    @app.get("/health/ready")
    def health_ready(db: Session = Depends(get_db)):
        db.execute(text("SELECT 1"))
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(payment.router, prefix="/api/payment", tags=["payment"])

    return app


app = create_app()
