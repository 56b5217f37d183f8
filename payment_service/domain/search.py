"""Transaction search joined with detail records for reporting"""

import uuid
from collections import defaultdict
from dataclasses import replace
from typing import Dict, List

from payment_service.domain.banks import canonical_bank_id, normalize_bank_id
from payment_service.domain.models import ReportDetail, ReportRow, SearchFilter, TransactionDetail
from payment_service.domain.stores import TransactionDetailStore, TransactionStore


class SearchProjector:
    """Builds report rows from filtered transactions"""

    def __init__(self, transactions: TransactionStore, details: TransactionDetailStore):
        self.transactions = transactions
        self.details = details

    def search(self, search_filter: SearchFilter) -> List[ReportRow]:
        """
        Flow:
        1. Fetch transactions matching every supplied filter
        2. Fetch their details in one batch (skipped when nothing matched)
        3. Group details by transaction and assemble rows

        The bank filter is matched against canonical ids, the form pay stores.
        """
        if search_filter.bank_id:
            bank_id = canonical_bank_id(search_filter.bank_id) or normalize_bank_id(search_filter.bank_id)
            search_filter = replace(search_filter, bank_id=bank_id)

        transactions = self.transactions.query_by_filter(search_filter)
        if not transactions:
            return []

        details = self.details.get_by_transaction_ids([t.id for t in transactions])

        grouped: Dict[uuid.UUID, List[TransactionDetail]] = defaultdict(list)
        for detail in details:
            grouped[detail.transaction_id].append(detail)

        return [
            ReportRow(
                transaction_id=t.id,
                bank_id=t.bank_id,
                total_amount=t.total_amount,
                net_amount=t.net_amount,
                status=t.status,
                order_reference=t.order_reference,
                transaction_date=t.transaction_date,
                details=[
                    ReportDetail(
                        detail_id=d.id,
                        transaction_type=d.transaction_type,
                        status=d.status,
                        amount=d.amount,
                    )
                    for d in grouped.get(t.id, [])
                ],
            )
            for t in transactions
        ]
