import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.domain.exceptions import StorageFailureError

logger = logging.getLogger(__name__)


@contextmanager
def atomic(db: Session, operation: str):
    """
    Runs the block as one all-or-nothing unit: commit on success,
    rollback on any error. Driver/commit errors surface as StorageFailureError.
    """
    try:
        yield
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Transaction failed during %s; rolled back.", operation)
        raise StorageFailureError(operation) from exc
    except Exception:
        db.rollback()
        raise
