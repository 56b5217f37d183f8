"""Domain models - immutable dataclasses representing payment entities"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class TransactionStatus(str, Enum):
    """Outcome of a transaction or of a single lifecycle event"""

    SUCCESS = "Success"
    FAIL = "Fail"  # defined for bank failures, not produced yet


class TransactionType(str, Enum):
    """Lifecycle event recorded as a transaction detail"""

    SALE = "Sale"
    CANCEL = "Cancel"
    REFUND = "Refund"


@dataclass(frozen=True)
class Transaction:
    """Single payment and its running net amount"""

    id: uuid.UUID
    bank_id: str
    total_amount: Decimal
    net_amount: Decimal
    status: TransactionStatus
    order_reference: str
    transaction_date: datetime  # always UTC

    @property
    def is_reversed(self) -> bool:
        """True once a cancel or refund has been applied"""
        return self.net_amount != self.total_amount


@dataclass(frozen=True)
class TransactionDetail:
    """Append-only event record belonging to a transaction"""

    id: uuid.UUID
    transaction_id: uuid.UUID
    transaction_type: TransactionType
    status: TransactionStatus
    amount: Decimal


@dataclass(frozen=True)
class PayCommand:
    bank_id: str
    total_amount: Decimal
    order_reference: str


@dataclass(frozen=True)
class CancelCommand:
    transaction_id: uuid.UUID


@dataclass(frozen=True)
class RefundCommand:
    transaction_id: uuid.UUID


@dataclass(frozen=True)
class SearchFilter:
    """Optional search criteria, combined with AND"""

    bank_id: Optional[str] = None
    status: Optional[TransactionStatus] = None
    order_reference: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass(frozen=True)
class ReportDetail:
    detail_id: uuid.UUID
    transaction_type: TransactionType
    status: TransactionStatus
    amount: Decimal


@dataclass(frozen=True)
class ReportRow:
    """Transaction joined with its detail records"""

    transaction_id: uuid.UUID
    bank_id: str
    total_amount: Decimal
    net_amount: Decimal
    status: TransactionStatus
    order_reference: str
    transaction_date: datetime
    details: List[ReportDetail] = field(default_factory=list)
