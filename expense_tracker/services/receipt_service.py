import logging
import os
import uuid
from pathlib import Path
from typing import BinaryIO
from sqlalchemy.orm import Session

from expense_tracker.config import settings
from expense_tracker.core.exceptions import NotFoundException, ValidationException
from expense_tracker.models.caller_context import CallerContext
from expense_tracker.models.transaction import Transaction
from expense_tracker.repositories.transaction_repository import TransactionRepository
from expense_tracker.services.transaction_service import TransactionService, TRANSACTION_NOT_FOUND

logger = logging.getLogger(__name__)

ALLOWED_RECEIPT_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".pdf"})
COPY_CHUNK_SIZE = 64 * 1024


def discard_receipt_file(receipt_path: str | None) -> None:
    """Best-effort removal of a stored receipt; failures are only logged"""
    if not receipt_path:
        return
    try:
        Path(receipt_path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove receipt file %s: %s", receipt_path, exc)


class ReceiptService:
    """Stores receipt files on disk and links them to transactions"""

    def __init__(self, db: Session, uploads_dir: str | None = None, max_size: int | None = None):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.transaction_service = TransactionService(db)
        self.uploads_dir = Path(uploads_dir or settings.UPLOADS_DIR)
        self.max_size = max_size if max_size is not None else settings.MAX_RECEIPT_SIZE_BYTES

    def _destination(self, transaction_id: int, filename: str) -> Path:
        directory = self.uploads_dir / "transactions" / str(transaction_id)
        directory.mkdir(parents=True, exist_ok=True)
        # Keep only the final path component of the client-supplied name
        return directory / os.path.basename(filename)

    def _write_temp(self, destination: Path, stream: BinaryIO) -> tuple[Path, int]:
        """
        Copy the upload next to its destination under a temporary name.

        The destination itself is never opened here, so an existing receipt
        stays intact. The temporary file is removed on any failure.
        """
        tmp = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.tmp")
        written = 0
        try:
            with open(tmp, "wb") as out:
                while chunk := stream.read(COPY_CHUNK_SIZE):
                    written += len(chunk)
                    if written > self.max_size:
                        raise ValidationException(
                            f"File size exceeds limit of {self.max_size} bytes"
                        )
                    out.write(chunk)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        return tmp, written

    def attach_receipt(
        self, transaction_id: int, filename: str | None, stream: BinaryIO, context: CallerContext
    ) -> Transaction:
        """
        Save a receipt for the caller's own transaction.

        The new path is recorded before the upload is moved into place, so a
        failed request leaves the previously attached receipt untouched. A
        receipt replaced under a different name is removed afterwards.

        Raises:
            NotFoundException: If transaction doesn't exist
            ForbiddenException: If the caller is not its owner
            ValidationException: If the file type or size is not allowed
            StoreException: If the receipt path cannot be recorded (upload is removed)
        """
        transaction = self.transaction_service.get_owned(transaction_id, context)
        previous_path = transaction.receipt_path

        name = os.path.basename(filename or "")
        if Path(name).suffix.lower() not in ALLOWED_RECEIPT_EXTENSIONS:
            raise ValidationException("Invalid file format. Only .jpg, .jpeg, .png, .pdf are allowed")

        destination = self._destination(transaction_id, name)
        tmp, size = self._write_temp(destination, stream)
        receipt_path = destination.as_posix()

        try:
            affected = self.transaction_repo.update_receipt_path(transaction_id, receipt_path)
        except Exception:
            discard_receipt_file(tmp.as_posix())
            raise
        if affected == 0:
            discard_receipt_file(tmp.as_posix())
            raise NotFoundException(TRANSACTION_NOT_FOUND)

        try:
            os.replace(tmp, destination)
        except OSError:
            discard_receipt_file(tmp.as_posix())
            logger.error(
                "Recorded receipt %s for transaction %s but could not move it into place",
                receipt_path,
                transaction_id,
            )
            raise

        if previous_path and previous_path != receipt_path:
            discard_receipt_file(previous_path)

        logger.info("Stored receipt for transaction %s (%d bytes)", transaction_id, size)
        return self.transaction_repo.refresh(transaction)

    def get_receipt_file(self, transaction_id: int, context: CallerContext) -> tuple[Path, str]:
        """
        Locate the stored receipt of a transaction (owner or admin).

        Returns:
            (path on disk, file name for the download)

        Raises:
            NotFoundException: If transaction, its receipt, or the file is missing
            ForbiddenException: If caller may not read the transaction
        """
        transaction = self.transaction_service.get_accessible(transaction_id, context)
        if not transaction.receipt_path:
            raise NotFoundException("Receipt not found for this transaction")

        path = Path(transaction.receipt_path)
        if not path.is_file():
            raise NotFoundException("Receipt file not found on server")
        return path, path.name
