"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from payment_service.config import settings
from payment_service.domain.banks import BankRegistry
from payment_service.domain.payments import PaymentOrchestrator
from payment_service.domain.search import SearchProjector
from payment_service.infrastructure.database.repositories import TransactionDetailRepository, TransactionRepository
from payment_service.infrastructure.database.session import get_db
from payment_service.utils.date_utils import TimeZoneConverter, utc_now


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clock():
    """Current UTC time source, overridable in tests"""
    return utc_now


def get_time_zone_converter() -> TimeZoneConverter:
    """Converter for the configured display time zone"""
    return TimeZoneConverter(settings.display_timezone)


def get_payment_orchestrator(db: Session = Depends(get_db), clock=Depends(get_clock)) -> PaymentOrchestrator:
    """Orchestrator bound to the request's database session"""
    transactions = TransactionRepository(db)
    registry = BankRegistry.default(transactions, TransactionDetailRepository(db), clock)
    return PaymentOrchestrator(registry, transactions)


def get_search_projector(db: Session = Depends(get_db)) -> SearchProjector:
    """Search projector bound to the request's database session"""
    return SearchProjector(TransactionRepository(db), TransactionDetailRepository(db))
