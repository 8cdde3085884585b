"""
Storage error classification.

Maps SQLAlchemy / driver exceptions onto the application error taxonomy so
that raw storage faults never reach a caller.
"""

import logging

from sqlalchemy.exc import OperationalError, SQLAlchemyError

from backend.app.core.exceptions import AppException, ConflictError, StorageError

logger = logging.getLogger(__name__)

# PostgreSQL serialization_failure, deadlock_detected and lock_not_available
CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}

# SQLite reports lock contention only through the message text
SQLITE_LOCK_MESSAGES = ("database is locked", "database is busy")


def _sqlstate(exc: SQLAlchemyError):
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_conflict(exc: SQLAlchemyError) -> bool:
    """True when the fault is a transient lock or serialization race."""
    if _sqlstate(exc) in CONFLICT_SQLSTATES:
        return True

    if isinstance(exc, OperationalError):
        message = str(getattr(exc, "orig", None) or exc).lower()
        return any(text in message for text in SQLITE_LOCK_MESSAGES)

    return False


def classify_db_error(exc: SQLAlchemyError, operation: str) -> AppException:
    """
    Convert a storage exception into a ConflictError or StorageError.

    Lock timeouts, serialization failures and deadlocks are transient races
    and become ConflictError (safe to retry). Anything else, including
    connection and schema faults, is a StorageError.
    """
    if is_conflict(exc):
        logger.warning("Concurrent modification during %s: %s", operation, exc.__class__.__name__)
        return ConflictError(f"Concurrent modification detected during {operation}, retry the operation")

    logger.error("Storage failure during %s: %s", operation, exc)
    return StorageError(operation)
