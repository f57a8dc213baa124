"""
Translation of ledger exceptions into HTTP errors.

Endpoints catch LedgerError, roll back, and raise whatever
http_error() returns. Status codes follow the exception type:
validation 422, not found 404, conflict 409, storage 500.
"""

from fastapi import HTTPException

from general_ledger.exceptions import (
    ConflictError,
    LedgerError,
    NotFoundError,
    StorageError,
    ValidationError,
)

_STATUS_BY_ERROR: list[tuple[type[LedgerError], int]] = [
    (ValidationError, 422),
    (NotFoundError, 404),
    (ConflictError, 409),
    (StorageError, 500),
]


def http_error(exc: LedgerError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        status_code = 400

    # Storage details stay in the logs, not in the response.
    message = "Internal storage error" if status_code == 500 else exc.message
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": message},
    )
