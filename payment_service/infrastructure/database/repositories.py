"""Data access layer for transactions and transaction details"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session
from payment_service.infrastructure.database.models import TransactionRecord, TransactionDetailRecord
from payment_service.domain.models import (
    SearchFilter,
    Transaction,
    TransactionDetail,
    TransactionStatus,
    TransactionType,
)


def _utc(value: datetime) -> datetime:
    # SQLite drops the offset; PostgreSQL returns the session time zone
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_transaction(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        bank_id=record.bank_id,
        total_amount=Decimal(record.total_amount),
        net_amount=Decimal(record.net_amount),
        status=TransactionStatus(record.status),
        order_reference=record.order_reference,
        transaction_date=_utc(record.transaction_date),
    )


def _to_detail(record: TransactionDetailRecord) -> TransactionDetail:
    return TransactionDetail(
        id=record.id,
        transaction_id=record.transaction_id,
        transaction_type=TransactionType(record.transaction_type),
        status=TransactionStatus(record.status),
        amount=Decimal(record.amount),
    )


class TransactionRepository:
    """Repository for payment transactions"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, transaction: Transaction) -> None:
        """Persist a new transaction"""
        self.db.add(
            TransactionRecord(
                id=transaction.id,
                bank_id=transaction.bank_id,
                total_amount=transaction.total_amount,
                net_amount=transaction.net_amount,
                status=transaction.status.value,
                order_reference=transaction.order_reference,
                transaction_date=transaction.transaction_date,
            )
        )
        self.db.flush()  # Surface constraint errors without committing

    def get_by_id(self, transaction_id: uuid.UUID) -> Optional[Transaction]:
        record = self.db.get(TransactionRecord, transaction_id)
        return _to_transaction(record) if record else None

    def update(self, transaction: Transaction, expected_net_amount: Decimal) -> bool:
        """
        Compare-and-swap on net_amount.

        A single conditional UPDATE, so two concurrent reversals cannot both
        match the same expected value.
        """
        result = self.db.execute(
            update(TransactionRecord)
            .where(TransactionRecord.id == transaction.id)
            .where(TransactionRecord.net_amount == expected_net_amount)
            .values(net_amount=transaction.net_amount, status=transaction.status.value)
            .execution_options(synchronize_session=False)
        )
        # Identity map may still hold the pre-update row
        self.db.expire_all()
        return result.rowcount == 1

    def query_by_filter(self, search_filter: SearchFilter) -> List[Transaction]:
        """Fetch transactions matching every supplied criterion"""
        query = self.db.query(TransactionRecord)

        if search_filter.bank_id:
            query = query.filter(TransactionRecord.bank_id == search_filter.bank_id)
        if search_filter.status is not None:
            query = query.filter(TransactionRecord.status == search_filter.status.value)
        if search_filter.order_reference:
            query = query.filter(TransactionRecord.order_reference == search_filter.order_reference)
        if search_filter.start_date is not None:
            query = query.filter(TransactionRecord.transaction_date >= search_filter.start_date)
        if search_filter.end_date is not None:
            query = query.filter(TransactionRecord.transaction_date <= search_filter.end_date)

        return [_to_transaction(record) for record in query.all()]


class TransactionDetailRepository:
    """Repository for transaction detail records"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, detail: TransactionDetail) -> None:
        self.db.add(
            TransactionDetailRecord(
                id=detail.id,
                transaction_id=detail.transaction_id,
                transaction_type=detail.transaction_type.value,
                status=detail.status.value,
                amount=detail.amount,
            )
        )
        self.db.flush()

    def get_by_id(self, detail_id: uuid.UUID) -> Optional[TransactionDetail]:
        record = self.db.get(TransactionDetailRecord, detail_id)
        return _to_detail(record) if record else None

    def update(self, detail: TransactionDetail) -> None:
        record = self.db.get(TransactionDetailRecord, detail.id)
        if record is None:
            raise LookupError(f"Transaction detail {detail.id} does not exist")
        record.transaction_type = detail.transaction_type.value
        record.status = detail.status.value
        record.amount = detail.amount
        self.db.flush()

    def get_by_transaction_ids(self, transaction_ids: Iterable[uuid.UUID]) -> List[TransactionDetail]:
        """Fetch details for many transactions in one query"""
        ids = list(transaction_ids)
        if not ids:
            return []
        records = (
            self.db.query(TransactionDetailRecord)
            .filter(TransactionDetailRecord.transaction_id.in_(ids))
            .all()
        )
        return [_to_detail(record) for record in records]
