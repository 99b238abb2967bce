"""Errors raised by the media record persistence layer."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import exc as sa_exc

__all__ = [
    "AppError",
    "RepositoryError",
    "RecordConflictError",
    "DatabaseUnavailableError",
    "DatabaseOperationError",
    "handle_sqlalchemy_errors",
]


class AppError(Exception):
    """Base class for application specific errors."""


class RepositoryError(AppError):
    """Base class for persistence layer failures."""


class RecordConflictError(RepositoryError):
    """Raised when a write violates a table constraint."""


class DatabaseUnavailableError(RepositoryError):
    """Raised when the database cannot be reached or is locked."""


class DatabaseOperationError(RepositoryError):
    """Raised for any other driver level failure."""


_TRANSLATIONS: tuple[tuple[type[sa_exc.SQLAlchemyError], type[RepositoryError], str], ...] = (
    (sa_exc.IntegrityError, RecordConflictError, "constraint violated"),
    (sa_exc.OperationalError, DatabaseUnavailableError, "database unavailable"),
    (sa_exc.DBAPIError, DatabaseOperationError, "database operation failed"),
)


def _translate(exc: sa_exc.SQLAlchemyError, table: str | None) -> RepositoryError:
    for source, target, message in _TRANSLATIONS:
        if isinstance(exc, source):
            break
    else:
        target, message = RepositoryError, str(exc)
    return target(f"{table}: {message}" if table else message)


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as :class:`RepositoryError` subclasses."""
    try:
        yield
    except sa_exc.SQLAlchemyError as exc:
        raise _translate(exc, entity) from exc
