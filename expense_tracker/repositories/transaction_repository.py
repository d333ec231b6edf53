from typing import Any, Optional
from sqlalchemy.orm import Session

from expense_tracker.models.base import utcnow
from expense_tracker.models.transaction import Transaction
from expense_tracker.models.transaction_filter import TransactionFilter
from expense_tracker.repositories.predicates import LISTING_ORDER, apply_filter
from expense_tracker.repositories.store_errors import store_operation

# Columns an owner may change through an update request
UPDATABLE_FIELDS = frozenset({"amount", "type", "category", "description", "transaction_date"})


class TransactionRepository:
    """Repository for Transaction data access"""

    def __init__(self, db: Session):
        self.db = db

    @store_operation("create transaction")
    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction"""
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    @store_operation("find transaction by ID")
    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID, or None if it does not exist"""
        return self.db.query(Transaction).filter(Transaction.id == transaction_id).first()

    @store_operation("query transactions")
    def find_matching(self, spec: TransactionFilter) -> list[Transaction]:
        """
        Get every transaction matched by the filter, most recent first.

        Args:
            spec: Normalized filter

        Returns:
            Transactions ordered by transaction_date desc, created_at desc
        """
        query = apply_filter(self.db.query(Transaction), spec)
        return query.order_by(*LISTING_ORDER).all()

    @store_operation("update transaction")
    def update_owned(self, transaction_id: int, owner_id: int, changes: dict[str, Any]) -> int:
        """
        Apply changes only if the row exists and belongs to owner_id.

        Ownership is verified by the UPDATE itself, so a concurrent change of
        owner or a delete between lookup and write cannot be overwritten.

        Returns:
            Number of rows affected (0 or 1)
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        values = {**changes, "updated_at": utcnow()}
        affected = (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.user_id == owner_id)
            .update(values, synchronize_session=False)
        )
        self.db.commit()
        return affected

    @store_operation("update receipt path")
    def update_receipt_path(self, transaction_id: int, receipt_path: str) -> int:
        """Record the stored receipt location; returns rows affected"""
        affected = (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id)
            .update(
                {"receipt_path": receipt_path, "updated_at": utcnow()},
                synchronize_session=False,
            )
        )
        self.db.commit()
        return affected

    @store_operation("delete transaction")
    def delete_by_id(self, transaction_id: int) -> int:
        """Delete a transaction; returns rows affected"""
        affected = (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id)
            .delete()
        )
        self.db.commit()
        return affected

    @store_operation("reload transaction")
    def refresh(self, transaction: Transaction) -> Transaction:
        """Reload a transaction after a bulk UPDATE"""
        self.db.refresh(transaction)
        return transaction
