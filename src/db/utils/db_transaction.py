from contextlib import contextmanager
import time

from fastapi import HTTPException
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

SLOW_TRANSACTION_SECONDS = 5


@contextmanager
def db_transaction(db: Session):
    """
    Context manager to wrap database operations in a transaction.
    Commits on success; rolls back on exception.

    Database errors are surfaced as HTTP 500; HTTPExceptions pass through.
    """
    start_time = time.time()
    try:
        yield

        duration = time.time() - start_time
        if duration > SLOW_TRANSACTION_SECONDS:
            logger.warning(
                f"Slow database transaction completed in {duration:.2f} seconds"
            )

        db.commit()

    except HTTPException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        duration = time.time() - start_time
        logger.exception(
            f"Database transaction failed after {duration:.2f} seconds: {str(e)}"
        )
        raise HTTPException(
            status_code=500, detail=f"Database operation failed: {str(e)}"
        ) from e
    except Exception:
        db.rollback()
        raise
