from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from expense_tracker.database import get_db
from expense_tracker.dependencies import get_caller_context
from expense_tracker.models.caller_context import CallerContext
from expense_tracker.models.transaction_filter import TransactionFilter
from expense_tracker.services.receipt_service import ReceiptService, discard_receipt_file
from expense_tracker.services.transaction_service import TransactionService
from expense_tracker.schemas.filter_schemas import user_filter_params
from expense_tracker.schemas.transaction_schemas import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionListResponse,
)

router = APIRouter()


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction_data: TransactionCreate,
    context: CallerContext = Depends(get_caller_context),
    db: Session = Depends(get_db),
):
    """
    Record a new transaction for the authenticated user.

    - Amount is a positive integer in minor units (e.g. cents)
    - Type is income or expense
    - transaction_date defaults to now
    """
    service = TransactionService(db)
    return service.create_transaction(transaction_data, context)


@router.get("", response_model=TransactionListResponse)
def list_my_transactions(
    spec: TransactionFilter = Depends(user_filter_params),
    context: CallerContext = Depends(get_caller_context),
    db: Session = Depends(get_db),
):
    """
    List the authenticated user's transactions.

    - Filters: type, category, date (single day) or start_date/end_date
    - Results sorted by transaction date (newest first)
    """
    service = TransactionService(db)
    transactions = service.get_user_transactions(spec, context)
    return TransactionListResponse(transactions=transactions, total=len(transactions))


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    context: CallerContext = Depends(get_caller_context),
    db: Session = Depends(get_db),
):
    """
    Get a specific transaction by ID.

    - 404 if it doesn't exist, 403 if it belongs to another user (admins may read any)
    """
    service = TransactionService(db)
    return service.get_transaction(transaction_id, context)


@router.patch("/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    context: CallerContext = Depends(get_caller_context),
    db: Session = Depends(get_db),
):
    """
    Update a transaction.

    - Only the owner can edit
    - Only provided fields are updated (partial update)
    """
    service = TransactionService(db)
    return service.update_transaction(transaction_id, transaction_data, context)


@router.delete("/{transaction_id}", status_code=status.HTTP_200_OK)
def delete_transaction(
    transaction_id: int,
    context: CallerContext = Depends(get_caller_context),
    db: Session = Depends(get_db),
):
    """
    Delete a transaction.

    - Owner or admin
    - Any stored receipt file is removed as well
    """
    service = TransactionService(db)
    receipt_path = service.delete_transaction(transaction_id, context)
    discard_receipt_file(receipt_path)
    return {"message": "Transaction deleted successfully"}


@router.post("/{transaction_id}/receipt", response_model=TransactionResponse)
def upload_receipt(
    transaction_id: int,
    receipt: UploadFile = File(..., description="Receipt image or PDF"),
    context: CallerContext = Depends(get_caller_context),
    db: Session = Depends(get_db),
):
    """
    Attach a receipt to a transaction.

    - Only the owner can upload
    - Allowed: .jpg, .jpeg, .png, .pdf up to 5 MB
    """
    service = ReceiptService(db)
    try:
        return service.attach_receipt(transaction_id, receipt.filename, receipt.file, context)
    finally:
        receipt.file.close()


@router.get("/{transaction_id}/receipt")
def download_receipt(
    transaction_id: int,
    context: CallerContext = Depends(get_caller_context),
    db: Session = Depends(get_db),
):
    """Download the stored receipt (owner or admin)"""
    service = ReceiptService(db)
    path, filename = service.get_receipt_file(transaction_id, context)
    return FileResponse(path, filename=filename)
