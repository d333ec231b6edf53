from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, BigInteger, ForeignKey, Text, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from expense_tracker.models.base import Base, TimestampMixin, UTCDateTime, utcnow

if TYPE_CHECKING:
    from expense_tracker.models.user import User


class TransactionType(str, PyEnum):
    """Transaction type enumeration"""

    INCOME = "income"
    EXPENSE = "expense"


class Transaction(Base, TimestampMixin):
    """
    Income or expense entry owned by a user.

    Amount is always positive and kept in minor currency units (e.g. cents);
    the direction is given by ``type``.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        Enum(
            TransactionType,
            native_enum=False,
            length=50,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        index=True,
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    transaction_date: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=utcnow, index=True
    )
    receipt_path: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="transactions")

    # Composite index for the per-owner listing
    __table_args__ = (
        Index("ix_transactions_user_date", "user_id", "transaction_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type.value}, amount={self.amount})>"
        )
