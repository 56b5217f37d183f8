"""Payment use cases - entry point for pay, cancel and refund"""

import uuid

from payment_service.domain.banks import BankRegistry
from payment_service.domain.exceptions import TransactionNotFoundError
from payment_service.domain.models import CancelCommand, PayCommand, RefundCommand, Transaction
from payment_service.domain.stores import TransactionStore


class PaymentOrchestrator:
    """
    Coordinates bank resolution and lifecycle operations.

    Cancel and refund always dispatch on the bank stored with the
    transaction, never on anything the caller sends.
    """

    def __init__(self, registry: BankRegistry, transactions: TransactionStore):
        self.registry = registry
        self.transactions = transactions

    def pay(self, command: PayCommand) -> Transaction:
        processor = self.registry.resolve(command.bank_id)
        return processor.pay(command)

    def cancel(self, command: CancelCommand) -> Transaction:
        transaction = self._load(command.transaction_id)
        return self.registry.resolve(transaction.bank_id).cancel(transaction)

    def refund(self, command: RefundCommand) -> Transaction:
        transaction = self._load(command.transaction_id)
        return self.registry.resolve(transaction.bank_id).refund(transaction)

    def _load(self, transaction_id: uuid.UUID) -> Transaction:
        transaction = self.transactions.get_by_id(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(transaction_id)
        return transaction
