from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from expense_tracker.database import get_db
from expense_tracker.dependencies import require_admin
from expense_tracker.models.caller_context import CallerContext
from expense_tracker.models.transaction_filter import TransactionFilter
from expense_tracker.services.export_service import ExportService, export_filename
from expense_tracker.services.statistics_service import StatisticsService
from expense_tracker.services.transaction_service import TransactionService
from expense_tracker.schemas.filter_schemas import admin_filter_params
from expense_tracker.schemas.transaction_schemas import (
    AggregatedStatsResponse,
    TransactionListResponse,
)

router = APIRouter()


@router.get("/transactions", response_model=TransactionListResponse)
def list_all_transactions(
    context: CallerContext = Depends(require_admin),
    spec: TransactionFilter = Depends(admin_filter_params),
    db: Session = Depends(get_db),
):
    """
    List transactions of all users.

    - Filters: user_id, type, category, start_date, end_date
    - Results sorted by transaction date (newest first)
    """
    service = TransactionService(db)
    transactions = service.get_all_transactions(spec)
    return TransactionListResponse(transactions=transactions, total=len(transactions))


@router.get("/stats", response_model=AggregatedStatsResponse)
def get_statistics(
    context: CallerContext = Depends(require_admin),
    spec: TransactionFilter = Depends(admin_filter_params),
    db: Session = Depends(get_db),
):
    """
    Aggregated statistics over the filtered transactions.

    - Totals, balance, amounts by category (per type) and per-user figures
    """
    service = StatisticsService(db)
    return AggregatedStatsResponse.from_stats(service.get_statistics(spec))


@router.get("/transactions/export/csv")
def export_transactions_csv(
    context: CallerContext = Depends(require_admin),
    spec: TransactionFilter = Depends(admin_filter_params),
    db: Session = Depends(get_db),
):
    """Download the filtered transactions as CSV (amounts in minor units)"""
    service = ExportService(db)
    content = service.export_csv(spec)
    return Response(
        content=content,
        media_type="text/csv",
        headers={
            "Content-Description": "File Transfer",
            "Content-Disposition": f"attachment; filename={export_filename()}",
        },
    )
