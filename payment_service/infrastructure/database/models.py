"""SQLAlchemy ORM models for transactions and their detail records"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class TransactionRecord(Base):
    """Payment transaction with running net amount"""

    __tablename__ = "transactions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bank_id = Column(String(50), nullable=False, index=True)
    total_amount = Column(Numeric(18, 2), nullable=False)
    net_amount = Column(Numeric(18, 2), nullable=False)
    status = Column(String(16), nullable=False, index=True)
    order_reference = Column(String(100), nullable=False, index=True)
    transaction_date = Column(DateTime(timezone=True), nullable=False, index=True)

    details = relationship("TransactionDetailRecord", back_populates="transaction", cascade="all, delete-orphan")


class TransactionDetailRecord(Base):
    """Sale/Cancel/Refund event belonging to a transaction"""

    __tablename__ = "transaction_details"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(
        Uuid(as_uuid=True), ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    transaction_type = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)

    transaction = relationship("TransactionRecord", back_populates="details")
