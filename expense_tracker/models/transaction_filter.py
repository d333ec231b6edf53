"""Sparse filter over the ledger, shared by listings, statistics and export."""

from dataclasses import dataclass, replace
from datetime import datetime

from expense_tracker.core.date_range import normalize_date_range
from expense_tracker.models.transaction import TransactionType


@dataclass(frozen=True)
class TransactionFilter:
    """
    Immutable set of optional constraints on transactions.

    A field left as None places no constraint on that dimension; every
    field that is set is combined with the others using AND.

    Attributes:
        user_id: Owner of the transactions
        type: income or expense
        category: Exact category match
        start_date: Inclusive lower bound on transaction_date
        end_date: Inclusive upper bound on transaction_date
    """

    user_id: int | None = None
    type: TransactionType | None = None
    category: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    @property
    def has_type_constraint(self) -> bool:
        return self.type is not None

    def normalized(self) -> "TransactionFilter":
        """Return a copy with day-granularity date bounds expanded to whole days."""
        start, end = normalize_date_range(self.start_date, self.end_date)
        return replace(self, start_date=start, end_date=end)

    def with_type(self, transaction_type: TransactionType) -> "TransactionFilter":
        return replace(self, type=transaction_type)

    def for_owner(self, user_id: int) -> "TransactionFilter":
        return replace(self, user_id=user_id)
