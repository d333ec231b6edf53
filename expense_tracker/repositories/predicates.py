"""
Compile a TransactionFilter into SQLAlchemy WHERE clauses.

Each present field yields exactly one clause and every value travels as a
bound parameter, so filter input never becomes part of the SQL text. The
listing scan and all statistics queries go through ``apply_filter`` so they
always see the same subset of rows.
"""

from sqlalchemy import and_
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from expense_tracker.models.transaction import Transaction
from expense_tracker.models.transaction_filter import TransactionFilter

# Most recent first; id keeps rows with identical timestamps in a stable order
LISTING_ORDER = (
    Transaction.transaction_date.desc(),
    Transaction.created_at.desc(),
    Transaction.id.desc(),
)


def compile_filter(spec: TransactionFilter) -> list[ColumnElement[bool]]:
    """Build one clause per constrained dimension of the filter."""
    clauses: list[ColumnElement[bool]] = []

    if spec.user_id is not None:
        clauses.append(Transaction.user_id == spec.user_id)

    if spec.type is not None:
        clauses.append(Transaction.type == spec.type)

    if spec.category is not None:
        clauses.append(Transaction.category == spec.category)

    if spec.start_date is not None:
        clauses.append(Transaction.transaction_date >= spec.start_date)

    if spec.end_date is not None:
        clauses.append(Transaction.transaction_date <= spec.end_date)

    return clauses


def apply_filter(query: Query, spec: TransactionFilter) -> Query:
    """
    Restrict a query to the rows matched by the filter.

    Args:
        query: Query selecting from transactions
        spec: Filter to apply (expected to be normalized already)

    Returns:
        The filtered query (unchanged when there is nothing to apply)
    """
    clauses = compile_filter(spec)
    if clauses:
        query = query.filter(and_(*clauses))
    return query
