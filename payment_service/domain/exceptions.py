"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class BankNotFoundError(DomainException):
    """Bank identifier does not map to a known bank"""

    def __init__(self, bank_id: str):
        self.bank_id = bank_id
        super().__init__(f"Invalid Bank Id: {bank_id!r}")


class TransactionNotFoundError(DomainException):
    """Cancel/refund target does not exist"""

    def __init__(self, transaction_id):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction with ID {transaction_id} not found.")


class BusinessRuleViolation(DomainException):
    """A lifecycle rule rejected the operation"""

    def __init__(self, message: str, bank_id: Optional[str] = None):
        self.bank_id = bank_id
        super().__init__(message)


class InvalidInputError(DomainException):
    """Timestamp carries the wrong timezone tag for the conversion"""

    pass


class DateFormatError(DomainException):
    """Date-time text could not be parsed"""

    pass
