"""Bank processors and the registry that dispatches bank ids to them"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from payment_service.domain.exceptions import BankNotFoundError, BusinessRuleViolation
from payment_service.domain.models import (
    PayCommand,
    Transaction,
    TransactionDetail,
    TransactionStatus,
    TransactionType,
)
from payment_service.domain.stores import TransactionDetailStore, TransactionStore
from payment_service.utils.date_utils import utc_now

CANCEL_RULE_MESSAGE = "Cancel operation is only allowed on the same day"
REFUND_RULE_MESSAGE = "Refund operation is allowed only after one day"
ALREADY_REVERSED_MESSAGE = "Transaction has already been cancelled or refunded"

REFUND_WAITING_PERIOD = timedelta(days=1)

# Normalized input -> canonical bank id. One processor per canonical id.
BANK_ALIASES: Dict[str, str] = {
    "akbank": "akbank",
    "garanti": "garanti",
    "yapikredi": "yapikredi",
    "yapıkredi": "yapikredi",
}

Clock = Callable[[], datetime]
ReversalRule = Callable[[Transaction, datetime], bool]


def is_same_day(transaction: Transaction, now: datetime) -> bool:
    """Cancel window: same UTC calendar date as the sale"""
    return transaction.transaction_date.date() == now.date()


def is_past_waiting_period(transaction: Transaction, now: datetime) -> bool:
    """Refund window: at least one full day since the sale"""
    return now - transaction.transaction_date >= REFUND_WAITING_PERIOD


class BankProcessor:
    """
    Executes pay/cancel/refund for a single bank.

    Every bank currently shares the same rules; the processor is keyed by
    bank_id so a bank can get its own rules without touching callers.
    """

    def __init__(
        self,
        bank_id: str,
        transactions: TransactionStore,
        details: TransactionDetailStore,
        clock: Clock = utc_now,
    ):
        self.bank_id = bank_id
        self.transactions = transactions
        self.details = details
        self.clock = clock

    def pay(self, command: PayCommand) -> Transaction:
        """Create a successful transaction and its Sale detail"""
        transaction = Transaction(
            id=uuid.uuid4(),
            bank_id=self.bank_id,
            total_amount=command.total_amount,
            net_amount=command.total_amount,
            status=TransactionStatus.SUCCESS,
            order_reference=command.order_reference,
            transaction_date=self.clock(),
        )
        self.transactions.add(transaction)
        self._append_detail(transaction, TransactionType.SALE)
        return transaction

    def cancel(self, transaction: Transaction) -> Transaction:
        return self._reverse(transaction, TransactionType.CANCEL, is_same_day, CANCEL_RULE_MESSAGE)

    def refund(self, transaction: Transaction) -> Transaction:
        return self._reverse(transaction, TransactionType.REFUND, is_past_waiting_period, REFUND_RULE_MESSAGE)

    def _reverse(
        self,
        transaction: Transaction,
        transaction_type: TransactionType,
        rule: ReversalRule,
        violation_message: str,
    ) -> Transaction:
        """
        Apply a cancel or refund.

        The time-window rule is checked first, then the at-most-once guard.
        The store update is conditional on the net amount we read, so a
        concurrent reversal makes this one fail instead of decrementing twice.
        """
        if not rule(transaction, self.clock()):
            raise BusinessRuleViolation(violation_message, bank_id=self.bank_id)

        if transaction.is_reversed:
            raise BusinessRuleViolation(ALREADY_REVERSED_MESSAGE, bank_id=self.bank_id)

        updated = replace(
            transaction,
            net_amount=transaction.net_amount - transaction.total_amount,
            status=TransactionStatus.SUCCESS,
        )
        if not self.transactions.update(updated, expected_net_amount=transaction.net_amount):
            raise BusinessRuleViolation(ALREADY_REVERSED_MESSAGE, bank_id=self.bank_id)

        self._append_detail(updated, transaction_type)
        return updated

    def _append_detail(self, transaction: Transaction, transaction_type: TransactionType) -> TransactionDetail:
        detail = TransactionDetail(
            id=uuid.uuid4(),
            transaction_id=transaction.id,
            transaction_type=transaction_type,
            status=TransactionStatus.SUCCESS,
            amount=transaction.total_amount,
        )
        self.details.add(detail)
        return detail


def normalize_bank_id(bank_id: str) -> str:
    """Trim and case-fold a caller supplied bank id"""
    return bank_id.strip().casefold()


def canonical_bank_id(bank_id: Optional[str], aliases: Dict[str, str] = BANK_ALIASES) -> Optional[str]:
    """Canonical id for a known bank or alias, None otherwise"""
    return aliases.get(normalize_bank_id(bank_id or ""))


class BankRegistry:
    """Resolves bank identifiers to processors"""

    def __init__(self, processors: Dict[str, BankProcessor], aliases: Dict[str, str] | None = None):
        self.processors = processors
        self.aliases = aliases if aliases is not None else BANK_ALIASES

    @classmethod
    def default(
        cls,
        transactions: TransactionStore,
        details: TransactionDetailStore,
        clock: Clock = utc_now,
    ) -> "BankRegistry":
        """Registry with one processor per known bank sharing the given stores"""
        processors = {
            bank_id: BankProcessor(bank_id, transactions, details, clock)
            for bank_id in sorted(set(BANK_ALIASES.values()))
        }
        return cls(processors)

    def known_banks(self) -> List[str]:
        return sorted(self.processors)

    def resolve(self, bank_id: str) -> BankProcessor:
        """
        Raises:
            BankNotFoundError: When the id is not a known bank or alias
        """
        canonical = canonical_bank_id(bank_id, self.aliases)
        if canonical is None or canonical not in self.processors:
            raise BankNotFoundError(bank_id)
        return self.processors[canonical]
