import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from expense_tracker.core.exceptions import StoreException

logger = logging.getLogger(__name__)


def store_operation(action: str):
    """
    Translate SQLAlchemy failures raised by a repository method into StoreException.

    The session is rolled back so the request can still report the failure
    cleanly. Nothing is retried here.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.error("Ledger store failure while trying to %s: %s", action, exc)
                raise StoreException(f"Failed to {action}") from exc

        return wrapper

    return decorator
