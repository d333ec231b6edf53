"""Query-string parsing for transaction filters.

Empty query values are treated as absent. Malformed values raise
ValidationException so they surface as 400 with a readable message.
"""

from datetime import datetime, timezone
from typing import Optional
from fastapi import Query

from expense_tracker.core.exceptions import ValidationException
from expense_tracker.models.transaction import TransactionType
from expense_tracker.models.transaction_filter import TransactionFilter


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value


def parse_type(value: Optional[str]) -> Optional[TransactionType]:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return TransactionType(value.strip())
    except ValueError:
        raise ValidationException(
            f"Invalid type '{value}', expected one of: income, expense"
        )


def parse_datetime(name: str, value: Optional[str]) -> Optional[datetime]:
    """
    Parse a YYYY-MM-DD date (or full ISO-8601 timestamp).

    Dates and naive timestamps are taken as UTC. An explicit offset is kept
    so whole-day bounds are computed in that offset.
    """
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise ValidationException(f"Invalid date format for '{name}', use YYYY-MM-DD")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_user_id(value: Optional[str]) -> Optional[int]:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationException("Invalid user_id format")


def user_filter_params(
    type: Optional[str] = Query(None, description="income or expense"),
    category: Optional[str] = Query(None, description="Exact category"),
    date: Optional[str] = Query(None, description="Single day, YYYY-MM-DD"),
    start_date: Optional[str] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[str] = Query(None, description="End date (inclusive)"),
) -> TransactionFilter:
    """
    Filter for the caller's own listing.

    ``date`` selects one calendar day and takes precedence over
    start_date/end_date. The owner dimension is set by the service.
    """
    day = parse_datetime("date", date)
    if day is not None:
        start, end = day, None
    else:
        start = parse_datetime("start_date", start_date)
        end = parse_datetime("end_date", end_date)

    return TransactionFilter(
        type=parse_type(type),
        category=_blank_to_none(category),
        start_date=start,
        end_date=end,
    )


def admin_filter_params(
    user_id: Optional[str] = Query(None, description="Owner user ID"),
    type: Optional[str] = Query(None, description="income or expense"),
    category: Optional[str] = Query(None, description="Exact category"),
    start_date: Optional[str] = Query(None, description="Start date (inclusive)"),
    end_date: Optional[str] = Query(None, description="End date (inclusive)"),
) -> TransactionFilter:
    """Filter shared by the admin listing, statistics and CSV export."""
    return TransactionFilter(
        user_id=parse_user_id(user_id),
        type=parse_type(type),
        category=_blank_to_none(category),
        start_date=parse_datetime("start_date", start_date),
        end_date=parse_datetime("end_date", end_date),
    )
