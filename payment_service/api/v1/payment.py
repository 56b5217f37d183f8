"""POST /api/payment/{pay,cancel,refund} and GET /api/payment/search endpoints"""

import time
import uuid
import logging
from datetime import datetime
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from sqlalchemy.orm import Session

from payment_service.api.v1.schemas import PayRequest, ReportRowSchema, SearchQuery, TransactionResult
from payment_service.api.dependencies import (
    get_payment_orchestrator,
    get_request_id,
    get_search_projector,
    get_time_zone_converter,
)
from payment_service.infrastructure.database.session import get_db
from payment_service.domain.payments import PaymentOrchestrator
from payment_service.domain.banks import canonical_bank_id
from payment_service.domain.search import SearchProjector
from payment_service.domain.models import CancelCommand, PayCommand, RefundCommand, SearchFilter, Transaction, TransactionStatus
from payment_service.domain.exceptions import BankNotFoundError, BusinessRuleViolation, TransactionNotFoundError
from payment_service.infrastructure.observability.metrics import (
    record_operation,
    search_result_size_histogram,
    transaction_amount_histogram,
)
from payment_service.infrastructure.observability.logging import log_transaction_event
from payment_service.utils.date_utils import TimeZoneConverter, as_utc

router = APIRouter()


def _execute(
    operation: str,
    action: Callable[[], Transaction],
    db: Session,
    request_id: str,
    converter: TimeZoneConverter,
    bank_label: str = "unknown",
) -> TransactionResult:
    """
    Run a lifecycle operation inside the request's unit of work.

    Commits on success, rolls back on any failure and maps domain errors
    to client responses.
    """
    start_time = time.time()

    try:
        transaction = action()
        db.commit()

    except BusinessRuleViolation as e:
        db.rollback()
        record_operation(operation, e.bank_id or bank_label, "rejected")
        logging.warning(f"Business rule violation: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except BankNotFoundError as e:
        db.rollback()
        record_operation(operation, "unknown", "invalid_bank")
        logging.warning(f"Unknown bank: {e.bank_id!r}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except TransactionNotFoundError as e:
        db.rollback()
        record_operation(operation, "unknown", "not_found")
        logging.warning(f"Transaction not found: {e.transaction_id}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        db.rollback()
        record_operation(operation, bank_label, "error")
        logging.exception(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_operation(operation, transaction.bank_id, "success")
    log_transaction_event(
        request_id, operation, str(transaction.id), transaction.bank_id, str(transaction.net_amount), duration_ms
    )

    result = TransactionResult.from_domain(transaction)
    result.transaction_date = converter.utc_to_local(transaction.transaction_date)
    return result


def _require_id(transaction_id: uuid.UUID) -> uuid.UUID:
    if transaction_id.int == 0:
        raise HTTPException(status_code=400, detail="A valid transaction ID must be provided.")
    return transaction_id


@router.post("/pay", response_model=TransactionResult)
def pay(
    request_body: PayRequest,
    request: Request,
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
    converter: TimeZoneConverter = Depends(get_time_zone_converter),
):
    """
    Charge a new payment through the requested bank.

    Returns:
        Created transaction with net amount equal to the total
    """
    command = PayCommand(
        bank_id=request_body.bank_id,
        total_amount=request_body.total_amount,
        order_reference=request_body.order_reference,
    )
    bank_label = canonical_bank_id(request_body.bank_id) or "unknown"
    result = _execute("pay", lambda: orchestrator.pay(command), db, get_request_id(request), converter, bank_label)
    transaction_amount_histogram.observe(float(result.total_amount))
    return result


@router.post("/cancel/{transactionId}", response_model=TransactionResult)
def cancel(
    request: Request,
    transaction_id: uuid.UUID = Path(..., alias="transactionId"),
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
    converter: TimeZoneConverter = Depends(get_time_zone_converter),
):
    """Cancel a transaction on the same day it was made"""
    command = CancelCommand(transaction_id=_require_id(transaction_id))
    return _execute("cancel", lambda: orchestrator.cancel(command), db, get_request_id(request), converter)


@router.post("/refund/{transactionId}", response_model=TransactionResult)
def refund(
    request: Request,
    transaction_id: uuid.UUID = Path(..., alias="transactionId"),
    db: Session = Depends(get_db),
    orchestrator: PaymentOrchestrator = Depends(get_payment_orchestrator),
    converter: TimeZoneConverter = Depends(get_time_zone_converter),
):
    """Refund a transaction at least one day after it was made"""
    command = RefundCommand(transaction_id=_require_id(transaction_id))
    return _execute("refund", lambda: orchestrator.refund(command), db, get_request_id(request), converter)


@router.get("/search", response_model=List[ReportRowSchema])
def search(
    request: Request,
    bank_id: Optional[str] = Query(None, alias="bankId"),
    status: Optional[TransactionStatus] = Query(None),
    order_reference: Optional[str] = Query(None, alias="orderReference"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    projector: SearchProjector = Depends(get_search_projector),
    converter: TimeZoneConverter = Depends(get_time_zone_converter),
):
    """
    Search transactions with their detail records.

    Filter dates are taken as UTC; transaction dates in the response are
    rendered in the display time zone.
    """
    query = SearchQuery(
        bank_id=bank_id,
        status=status,
        order_reference=order_reference,
        start_date=as_utc(start_date),
        end_date=as_utc(end_date),
    )

    try:
        rows = projector.search(
            SearchFilter(
                bank_id=query.bank_id,
                status=query.status,
                order_reference=query.order_reference,
                start_date=query.start_date,
                end_date=query.end_date,
            )
        )
    except Exception as e:
        logging.exception(f"Search failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail="Internal server error")

    search_result_size_histogram.observe(len(rows))

    response = []
    for row in rows:
        schema = ReportRowSchema.from_domain(row)
        schema.transaction_date = converter.utc_to_local(row.transaction_date)
        response.append(schema)
    return response
