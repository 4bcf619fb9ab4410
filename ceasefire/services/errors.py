"""Error taxonomy shared by the fight, mediation and activity services.

Every error carries the HTTP status the routes answer with.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class CeasefireError(Exception):
    """Base class for business logic errors."""
    status_code = 400


class ValidationError(CeasefireError):
    """Bad or missing input. Raised before touching the store."""
    status_code = 400


class UnauthorizedError(CeasefireError):
    """Actor lacks the role the operation requires."""
    status_code = 403


class NotInvitedError(CeasefireError):
    """Acceptance attempted by someone other than the invited opponent."""
    status_code = 403


class NotFoundError(CeasefireError):
    status_code = 404


class AlreadyAcceptedError(CeasefireError):
    status_code = 409


class AlreadyResolvedError(CeasefireError):
    status_code = 409


class RequestClosedError(CeasefireError):
    """Mediator request was rejected or its fight is resolved."""
    status_code = 409


class UpdateConflictError(CeasefireError):
    """Guarded update touched zero rows: lost race or stale id."""
    status_code = 409


class DataIntegrityError(CeasefireError):
    """Guarded update touched more than one row. Never retried."""
    status_code = 500


class StoreError(CeasefireError):
    """Opaque persistence failure (connectivity, constraint, driver)."""
    status_code = 503


def ensure_single_row(rowcount: int, table: str, record_id: str) -> None:
    """Check the outcome of a guarded single-record UPDATE."""
    if rowcount == 1:
        return
    if rowcount == 0:
        raise UpdateConflictError(f'{table} {record_id} was changed concurrently')
    logger.critical(f'Update on {table} {record_id} affected {rowcount} rows')
    raise DataIntegrityError(f'{table} {record_id}: {rowcount} rows affected')


@contextmanager
def store_errors(operation: str, **context):
    """Turn SQLAlchemy failures into StoreError, logging the context."""
    try:
        yield
    except SQLAlchemyError as e:
        details = ', '.join(f'{k}={v}' for k, v in context.items())
        logger.error(f'{operation} failed ({details}): {e}', exc_info=True)
        raise StoreError(f'{operation} failed') from e
