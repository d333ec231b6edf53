from sqlalchemy import case, func
from sqlalchemy.orm import Session

from expense_tracker.models.aggregated_stats import UserStat
from expense_tracker.models.transaction import Transaction, TransactionType
from expense_tracker.models.transaction_filter import TransactionFilter
from expense_tracker.models.user import User
from expense_tracker.repositories.predicates import apply_filter
from expense_tracker.repositories.store_errors import store_operation


def _sum_of(transaction_type: TransactionType):
    """SUM(amount) restricted to one type, 0 when nothing matches"""
    return func.coalesce(
        func.sum(case((Transaction.type == transaction_type, Transaction.amount), else_=0)),
        0,
    )


class StatisticsRepository:
    """Grouped SUM/COUNT queries over a filtered ledger view"""

    def __init__(self, db: Session):
        self.db = db

    @store_operation("get total income/expenses")
    def get_totals(self, spec: TransactionFilter) -> tuple[int, int]:
        """
        Sum income and expense amounts over the filtered rows.

        Returns:
            (total_income, total_expenses), both 0 for an empty subset
        """
        query = self.db.query(
            _sum_of(TransactionType.INCOME),
            _sum_of(TransactionType.EXPENSE),
        ).select_from(Transaction)
        total_income, total_expenses = apply_filter(query, spec).one()
        return int(total_income), int(total_expenses)

    @store_operation("get amounts by category")
    def sum_by_category(self, spec: TransactionFilter) -> dict[str, int]:
        """Sum amounts per category; categories without rows are left out"""
        query = self.db.query(
            Transaction.category, func.coalesce(func.sum(Transaction.amount), 0)
        )
        rows = apply_filter(query, spec).group_by(Transaction.category).all()
        return {category: int(total) for category, total in rows}

    @store_operation("get stats by user")
    def stats_by_user(self, spec: TransactionFilter) -> dict[int, UserStat]:
        """Per-owner spent/received/count; owners without rows are left out"""
        query = self.db.query(
            Transaction.user_id,
            User.phone,
            _sum_of(TransactionType.EXPENSE),
            _sum_of(TransactionType.INCOME),
            func.count(Transaction.id),
        ).join(User, Transaction.user_id == User.id)
        rows = apply_filter(query, spec).group_by(Transaction.user_id, User.phone).all()

        return {
            user_id: UserStat(
                user_id=user_id,
                user_phone=phone or "",
                total_spent=int(spent),
                total_income=int(received),
                transaction_count=int(count),
            )
            for user_id, phone, spent, received, count in rows
        }
