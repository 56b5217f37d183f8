"""Report API - transaction reports served from the payment service"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from prometheus_client import CollectorRegistry, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from payment_service.api.errors import register_exception_handlers
from payment_service.api.middleware import MetricsMiddleware, RequestIDMiddleware
from payment_service.api.v1.schemas import ReportRowSchema, SearchQuery
from payment_service.domain.models import TransactionStatus
from payment_service.infrastructure.observability.logging import setup_logging
from payment_service.utils.date_utils import as_utc
from report_service.client import PaymentServiceClient
from report_service.config import settings
from report_service.exceptions import PaymentServiceError

setup_logging(settings.log_level, settings.service_name)

# Report series only; payment_* series live in the default registry
report_metrics_registry = CollectorRegistry()

report_request_duration_histogram = Histogram(
    "report_http_request_duration_seconds",
    "Report service HTTP request latency",
    ["method", "endpoint", "status"],
    registry=report_metrics_registry,
)


def get_payment_client() -> PaymentServiceClient:
    """Provide Payment service client instance"""
    return PaymentServiceClient()


def create_app() -> FastAPI:
    """Create and configure the report FastAPI application"""
    app = FastAPI(title="Report API", description="Transaction reports", version="0.1.0")

    app.add_middleware(MetricsMiddleware, histogram=report_request_duration_histogram)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.get("/health/live")
    def health_live():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/health/ready")
    def health_ready():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(report_metrics_registry), media_type=CONTENT_TYPE_LATEST)

    @app.get("/api/report", response_model=List[ReportRowSchema])
    async def get_report(
        request: Request,
        bank_id: Optional[str] = Query(None, alias="bankId"),
        status: Optional[TransactionStatus] = Query(None),
        order_reference: Optional[str] = Query(None, alias="orderReference"),
        start_date: Optional[datetime] = Query(None, alias="startDate"),
        end_date: Optional[datetime] = Query(None, alias="endDate"),
        client: PaymentServiceClient = Depends(get_payment_client),
    ):
        """Report of transactions matching the filters, as returned by the payment service"""
        query = SearchQuery(
            bank_id=bank_id,
            status=status,
            order_reference=order_reference,
            start_date=as_utc(start_date),
            end_date=as_utc(end_date),
        )
        request_id = getattr(request.state, "request_id", None)

        try:
            return await client.search_transactions(query, request_id=request_id)
        except PaymentServiceError as e:
            logging.error(f"Payment service error: {e}", extra={"request_id": request_id})
            raise HTTPException(status_code=502, detail="Payment service unavailable")

    return app


app = create_app()
