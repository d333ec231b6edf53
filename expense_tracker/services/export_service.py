import csv
import io
import logging
from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy.orm import Session

from expense_tracker.core.date_range import as_utc
from expense_tracker.models.base import utcnow
from expense_tracker.models.transaction import Transaction
from expense_tracker.models.transaction_filter import TransactionFilter
from expense_tracker.repositories.transaction_repository import TransactionRepository

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "ID",
    "OwnerID",
    "Amount",
    "Type",
    "Category",
    "Description",
    "TransactionDate",
    "CreatedAt",
    "ReceiptPath",
]


def format_timestamp(value: Optional[datetime]) -> str:
    """RFC 3339 timestamp in UTC, empty for missing values"""
    if value is None:
        return ""
    return as_utc(value).isoformat()


def transaction_row(transaction: Transaction) -> list[str]:
    """One CSV row; amounts stay integer minor units"""
    return [
        str(transaction.id),
        str(transaction.user_id),
        str(transaction.amount),
        transaction.type.value,
        transaction.category,
        transaction.description or "",
        format_timestamp(transaction.transaction_date),
        format_timestamp(transaction.created_at),
        transaction.receipt_path or "",
    ]


def export_transactions_csv(transactions: Iterable[Transaction]) -> str:
    """
    Serialize transactions to CSV in the order given.

    Fields containing the delimiter, quotes or line breaks are quoted by the
    csv writer.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for transaction in transactions:
        writer.writerow(transaction_row(transaction))
    return buffer.getvalue()


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or utcnow()
    return f"transactions_export_{now.strftime('%Y%m%d_%H%M%S')}.csv"


class ExportService:
    """Service producing CSV exports of the filtered ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.transaction_repo = TransactionRepository(db)

    def export_csv(self, spec: TransactionFilter) -> str:
        """Export every transaction matched by spec, most recent first"""
        transactions = self.transaction_repo.find_matching(spec.normalized())
        logger.info("Exporting %d transactions to CSV", len(transactions))
        return export_transactions_csv(transactions)
