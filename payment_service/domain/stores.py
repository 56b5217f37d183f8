"""Persistence ports consumed by the payment domain"""

import uuid
from decimal import Decimal
from typing import Iterable, List, Optional, Protocol

from payment_service.domain.models import SearchFilter, Transaction, TransactionDetail


class TransactionStore(Protocol):
    def add(self, transaction: Transaction) -> None: ...

    def get_by_id(self, transaction_id: uuid.UUID) -> Optional[Transaction]: ...

    def update(self, transaction: Transaction, expected_net_amount: Decimal) -> bool:
        """
        Persist net amount and status only if the stored net amount still
        equals expected_net_amount. Returns False when the row was changed
        underneath the caller.
        """
        ...

    def query_by_filter(self, search_filter: SearchFilter) -> List[Transaction]: ...


class TransactionDetailStore(Protocol):
    def add(self, detail: TransactionDetail) -> None: ...

    def get_by_id(self, detail_id: uuid.UUID) -> Optional[TransactionDetail]: ...

    def update(self, detail: TransactionDetail) -> None: ...

    def get_by_transaction_ids(self, transaction_ids: Iterable[uuid.UUID]) -> List[TransactionDetail]: ...
