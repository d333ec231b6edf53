"""Caller context for request authorization."""

from dataclasses import dataclass
from expense_tracker.models.user import User
from expense_tracker.models.role import UserRole
from expense_tracker.models.transaction import Transaction


@dataclass
class CallerContext:
    """
    Authenticated caller passed explicitly into every service operation.

    Attributes:
        user: The authenticated User object
        role: Role taken from the verified access token
    """

    user: User
    role: UserRole

    @property
    def user_id(self) -> int:
        return self.user.id

    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def owns(self, transaction: Transaction) -> bool:
        """Check if the caller authored the transaction."""
        return transaction.user_id == self.user.id

    def can_access(self, transaction: Transaction) -> bool:
        """Admins may act on any transaction, everyone else only on their own."""
        return self.is_admin() or self.owns(transaction)

    def __repr__(self) -> str:
        return f"<CallerContext(user_id={self.user.id}, role={self.role.value})>"
