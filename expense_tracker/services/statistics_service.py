"""
Aggregation over a filtered ledger view.

Totals, both category breakdowns and the per-owner breakdown are computed by
independent queries that all start from the same normalized filter. Only the
category breakdown narrows the filter further (by type), and it does so on a
copy, so the totals and the owner breakdown never see that narrowing.

The queries are not wrapped in one database transaction; a row committed
between two of them may show up in one figure and not another.
"""

import logging
from sqlalchemy.orm import Session

from expense_tracker.models.aggregated_stats import AggregatedStats
from expense_tracker.models.transaction import TransactionType
from expense_tracker.models.transaction_filter import TransactionFilter
from expense_tracker.repositories.statistics_repository import StatisticsRepository

logger = logging.getLogger(__name__)


def category_types(spec: TransactionFilter) -> tuple[TransactionType, ...]:
    """
    Which category breakdowns to compute for a filter.

    Without a type constraint both are computed; with one, only the matching
    breakdown is, and the other stays empty.
    """
    if spec.type is None:
        return (TransactionType.INCOME, TransactionType.EXPENSE)
    return (spec.type,)


class StatisticsService:
    """Service computing AggregatedStats for admin reporting"""

    def __init__(self, db: Session):
        self.db = db
        self.stats_repo = StatisticsRepository(db)

    def get_statistics(self, spec: TransactionFilter) -> AggregatedStats:
        """
        Compute totals and breakdowns over the transactions matched by spec.

        Args:
            spec: Raw filter; date bounds are normalized here

        Returns:
            AggregatedStats (zeros and empty maps when nothing matches)

        Raises:
            StoreException: If any of the underlying queries fails
        """
        spec = spec.normalized()

        total_income, total_expenses = self.stats_repo.get_totals(spec)
        stats = AggregatedStats(total_income=total_income, total_expenses=total_expenses)

        for transaction_type in category_types(spec):
            by_category = self.stats_repo.sum_by_category(spec.with_type(transaction_type))
            if transaction_type == TransactionType.INCOME:
                stats.by_category_income = by_category
            else:
                stats.by_category_expense = by_category

        stats.by_user_spending = self.stats_repo.stats_by_user(spec)

        logger.debug(
            "Computed statistics for %s: income=%s expenses=%s owners=%s",
            spec,
            stats.total_income,
            stats.total_expenses,
            len(stats.by_user_spending),
        )
        return stats
