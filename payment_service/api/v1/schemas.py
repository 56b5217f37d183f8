"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from payment_service.domain.models import ReportRow, Transaction, TransactionStatus, TransactionType


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PayRequest(CamelModel):
    """Request body for POST /api/payment/pay"""

    bank_id: str = Field(..., max_length=50, description="Bank identifier, e.g. akbank")
    total_amount: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2, description="Amount to charge")
    order_reference: str = Field(..., max_length=100, description="Caller order reference")

    @field_validator("bank_id", "order_reference")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class TransactionResult(CamelModel):
    """Response for pay, cancel and refund"""

    id: uuid.UUID
    bank_id: str
    total_amount: Decimal
    net_amount: Decimal
    status: TransactionStatus
    order_reference: str
    transaction_date: datetime

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionResult":
        return cls(
            id=transaction.id,
            bank_id=transaction.bank_id,
            total_amount=transaction.total_amount,
            net_amount=transaction.net_amount,
            status=transaction.status,
            order_reference=transaction.order_reference,
            transaction_date=transaction.transaction_date,
        )


class SearchQuery(CamelModel):
    """Query parameters for GET /api/payment/search"""

    bank_id: Optional[str] = None
    status: Optional[TransactionStatus] = None
    order_reference: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @model_validator(mode="after")
    def check_date_range(self) -> "SearchQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("StartDate must be less than or equal to EndDate.")
        return self


class ReportDetailSchema(CamelModel):
    detail_id: uuid.UUID
    transaction_type: TransactionType
    status: TransactionStatus
    amount: Decimal


class ReportRowSchema(CamelModel):
    """Transaction with its detail records"""

    transaction_id: uuid.UUID
    bank_id: str
    total_amount: Decimal
    net_amount: Decimal
    status: TransactionStatus
    order_reference: str
    transaction_date: datetime
    details: List[ReportDetailSchema] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, row: ReportRow) -> "ReportRowSchema":
        return cls(
            transaction_id=row.transaction_id,
            bank_id=row.bank_id,
            total_amount=row.total_amount,
            net_amount=row.net_amount,
            status=row.status,
            order_reference=row.order_reference,
            transaction_date=row.transaction_date,
            details=[
                ReportDetailSchema(
                    detail_id=d.detail_id,
                    transaction_type=d.transaction_type,
                    status=d.status,
                    amount=d.amount,
                )
                for d in row.details
            ],
        )
