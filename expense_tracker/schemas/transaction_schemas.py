from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional

from expense_tracker.models.aggregated_stats import AggregatedStats
from expense_tracker.models.transaction import TransactionType

# Amounts are stored as signed 64-bit integers
MAX_AMOUNT = 2**63 - 1


def _require_non_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("category cannot be blank")
    return value


class TransactionCreate(BaseModel):
    """Schema for creating a new transaction"""

    amount: int = Field(
        ..., gt=0, le=MAX_AMOUNT, description="Amount in minor currency units (e.g. cents)"
    )
    type: TransactionType
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    transaction_date: Optional[datetime] = Field(
        None, description="When the transaction happened (defaults to now)"
    )

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _require_non_blank(value)


class TransactionUpdate(BaseModel):
    """
    Schema for updating a transaction.

    Only fields present in the request body are applied. ``description`` may
    be cleared with an explicit null; the other fields cannot be nulled.
    """

    amount: Optional[int] = Field(None, gt=0, le=MAX_AMOUNT)
    type: Optional[TransactionType] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    transaction_date: Optional[datetime] = None

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _require_non_blank(value)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        for name in ("amount", "type", "category", "transaction_date"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields explicitly set in the request, with their new values"""
        return {name: getattr(self, name) for name in self.model_fields_set}


class TransactionResponse(BaseModel):
    """Schema for transaction response"""

    model_config = {"from_attributes": True}

    id: int
    user_id: int
    amount: int
    type: TransactionType
    category: str
    description: Optional[str]
    transaction_date: datetime
    receipt_path: Optional[str]
    created_at: datetime
    updated_at: datetime


class TransactionListResponse(BaseModel):
    """Schema for list of transactions"""

    transactions: list[TransactionResponse]
    total: int


class UserStatResponse(BaseModel):
    """Per-owner statistics"""

    model_config = {"from_attributes": True}

    user_id: int
    user_phone: str
    total_spent: int
    total_income: int
    transaction_count: int


class AggregatedStatsResponse(BaseModel):
    """Totals and breakdowns over the filtered ledger"""

    total_income: int
    total_expenses: int
    balance: int
    by_category_income: dict[str, int]
    by_category_expense: dict[str, int]
    by_user_spending: dict[int, UserStatResponse]

    @classmethod
    def from_stats(cls, stats: AggregatedStats) -> "AggregatedStatsResponse":
        return cls(
            total_income=stats.total_income,
            total_expenses=stats.total_expenses,
            balance=stats.balance,
            by_category_income=dict(stats.by_category_income),
            by_category_expense=dict(stats.by_category_expense),
            by_user_spending={
                user_id: UserStatResponse.model_validate(stat)
                for user_id, stat in stats.by_user_spending.items()
            },
        )
