from dataclasses import dataclass, field


@dataclass
class UserStat:
    """Per-owner totals within a filtered ledger view"""

    user_id: int
    user_phone: str
    total_spent: int
    total_income: int
    transaction_count: int


@dataclass
class AggregatedStats:
    """
    Totals and breakdowns computed over one filtered ledger view.

    Totals are always present (zero when nothing matches) while the category
    and owner maps only hold keys that had matching rows.
    """

    total_income: int = 0
    total_expenses: int = 0
    by_category_income: dict[str, int] = field(default_factory=dict)
    by_category_expense: dict[str, int] = field(default_factory=dict)
    by_user_spending: dict[int, UserStat] = field(default_factory=dict)

    @property
    def balance(self) -> int:
        return self.total_income - self.total_expenses
