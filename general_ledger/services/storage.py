"""
Flushing writes with all-or-nothing failure semantics.

Services stage their changes on the session and flush through
here. If the database rejects the flush, the whole session is
rolled back before the error leaves the service, so no partial
journal entry or half-deleted item set can ever be committed by
a careless caller.
"""

import logging
from typing import Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from general_ledger.exceptions import LedgerError, StorageError

ConflictTranslator = Callable[[IntegrityError], LedgerError | None]


def flush_or_rollback(
    db: Session,
    logger: logging.Logger,
    action: str,
    on_conflict: ConflictTranslator | None = None,
) -> None:
    """
    Flush pending changes; on failure roll back and raise.

    ``on_conflict`` may turn an IntegrityError into a domain error
    (for example a unique index the caller already checks for but
    can still lose a race on). Anything it does not translate, and
    every other database error, becomes StorageError.
    """
    try:
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        if on_conflict is not None and isinstance(e, IntegrityError):
            translated = on_conflict(e)
            if translated is not None:
                logger.warning(
                    "Constraint violation during %s", action,
                    extra={"error_code": translated.code},
                )
                raise translated from e
        logger.exception("Storage failure during %s", action)
        raise StorageError(f"Storage failure during {action}") from e
