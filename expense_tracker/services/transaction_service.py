import logging
from sqlalchemy.orm import Session

from expense_tracker.models.base import utcnow
from expense_tracker.models.caller_context import CallerContext
from expense_tracker.models.transaction import Transaction
from expense_tracker.models.transaction_filter import TransactionFilter
from expense_tracker.repositories.transaction_repository import TransactionRepository
from expense_tracker.schemas.transaction_schemas import TransactionCreate, TransactionUpdate
from expense_tracker.core.exceptions import NotFoundException, ForbiddenException

logger = logging.getLogger(__name__)

TRANSACTION_NOT_FOUND = "Transaction not found"
TRANSACTION_FORBIDDEN = "You do not have permission to access this transaction"


class TransactionService:
    """Service layer for transaction business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.transaction_repo = TransactionRepository(db)

    def create_transaction(
        self, transaction_data: TransactionCreate, context: CallerContext
    ) -> Transaction:
        """
        Record a new income or expense owned by the caller.

        Args:
            transaction_data: Transaction creation data
            context: Authenticated caller

        Returns:
            Created transaction
        """
        transaction = Transaction(
            user_id=context.user_id,
            amount=transaction_data.amount,
            type=transaction_data.type,
            category=transaction_data.category,
            description=transaction_data.description,
            transaction_date=transaction_data.transaction_date or utcnow(),
        )
        return self.transaction_repo.create(transaction)

    def _locate(self, transaction_id: int) -> Transaction:
        transaction = self.transaction_repo.get_by_id(transaction_id)
        if transaction is None:
            raise NotFoundException(TRANSACTION_NOT_FOUND)
        return transaction

    def get_accessible(self, transaction_id: int, context: CallerContext) -> Transaction:
        """
        Get a transaction the caller may read: their own, or any for admins.

        Raises:
            NotFoundException: If transaction doesn't exist
            ForbiddenException: If it belongs to someone else and caller is not admin
        """
        transaction = self._locate(transaction_id)
        if not context.can_access(transaction):
            raise ForbiddenException(TRANSACTION_FORBIDDEN)
        return transaction

    def get_owned(self, transaction_id: int, context: CallerContext) -> Transaction:
        """
        Get a transaction authored by the caller (admins included).

        Raises:
            NotFoundException: If transaction doesn't exist
            ForbiddenException: If the caller is not its owner
        """
        transaction = self._locate(transaction_id)
        if not context.owns(transaction):
            raise ForbiddenException(TRANSACTION_FORBIDDEN)
        return transaction

    def get_transaction(self, transaction_id: int, context: CallerContext) -> Transaction:
        return self.get_accessible(transaction_id, context)

    def get_user_transactions(
        self, spec: TransactionFilter, context: CallerContext
    ) -> list[Transaction]:
        """
        List the caller's transactions, most recent first.

        The owner dimension is always the caller, whatever the filter says.
        """
        scoped = spec.for_owner(context.user_id).normalized()
        return self.transaction_repo.find_matching(scoped)

    def get_all_transactions(self, spec: TransactionFilter) -> list[Transaction]:
        """List transactions across all owners (admin routes only)."""
        return self.transaction_repo.find_matching(spec.normalized())

    def update_transaction(
        self, transaction_id: int, transaction_data: TransactionUpdate, context: CallerContext
    ) -> Transaction:
        """
        Apply a partial update to the caller's own transaction.

        The write is conditional on id and owner; if it touches no row the
        transaction vanished or changed hands after the lookup.

        Raises:
            NotFoundException: If transaction doesn't exist (or no longer matches)
            ForbiddenException: If the caller is not its owner
        """
        transaction = self.get_owned(transaction_id, context)

        changes = transaction_data.changes()
        if not changes:
            return transaction

        affected = self.transaction_repo.update_owned(transaction_id, context.user_id, changes)
        if affected == 0:
            raise NotFoundException(TRANSACTION_NOT_FOUND)

        return self.transaction_repo.refresh(transaction)

    def delete_transaction(self, transaction_id: int, context: CallerContext) -> str | None:
        """
        Delete a transaction (owner or admin).

        Returns:
            Receipt path the deleted transaction pointed to, if any

        Raises:
            NotFoundException: If transaction doesn't exist
            ForbiddenException: If it belongs to someone else and caller is not admin
        """
        transaction = self.get_accessible(transaction_id, context)
        # Row attributes expire on commit, read them before the delete
        owner_id = transaction.user_id
        receipt_path = transaction.receipt_path

        if self.transaction_repo.delete_by_id(transaction_id) == 0:
            raise NotFoundException(TRANSACTION_NOT_FOUND)

        if owner_id != context.user_id:
            logger.info(
                "Admin %s deleted transaction %s owned by user %s",
                context.user_id,
                transaction_id,
                owner_id,
            )
        return receipt_path
