"""
Unit-of-work helper wrapping a group of repository calls in one transaction.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.exceptions import DomainException, InternalException


@contextmanager
def transaction(db: Session, operation: str) -> Iterator[Session]:
    """
    Commit everything done inside the block, or nothing.

    Domain exceptions roll back and propagate unchanged. Storage errors roll
    back, are logged with the operation name and surface as a generic
    InternalException so driver messages never reach clients.

    Args:
        db: Request-scoped database session.
        operation: Short name used in log lines, e.g. "delete post".
    """
    try:
        yield db
        db.commit()
    except DomainException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during {operation}: {e!r}")
        raise InternalException("Internal server error") from e
