"""
Typed exceptions for the ledger.

Callers catch by type, never by message. Every exception carries
a machine-readable ``code`` and the structured data that caused it,
so the HTTP layer can pick a status code and the logs can record
the offending values.

    LedgerError
    +-- ValidationError
    |   +-- UnbalancedEntryError
    |   +-- InvalidAccountError
    +-- NotFoundError
    |   +-- AccountNotFoundError
    |   +-- EntryNotFoundError
    +-- ConflictError
    |   +-- DuplicateCodeError
    |   +-- HasTransactionsError
    +-- StorageError
"""

from decimal import Decimal


class LedgerError(Exception):
    """Base class for every error raised by the ledger."""

    code: str = "LEDGER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Validation ---

class ValidationError(LedgerError):
    """The request is malformed; nothing was written."""

    code = "VALIDATION_ERROR"


class UnbalancedEntryError(ValidationError):
    code = "UNBALANCED_ENTRY"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Journal entry is not balanced: "
            f"debits={total_debit}, credits={total_credit}"
        )


class InvalidAccountError(ValidationError):
    code = "INVALID_ACCOUNT"

    def __init__(self, account_ids: set[int]):
        self.account_ids = sorted(account_ids)
        super().__init__(f"Accounts not found: {self.account_ids}")


# --- Not found ---

class NotFoundError(LedgerError):
    code = "NOT_FOUND"


class AccountNotFoundError(NotFoundError):
    code = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class EntryNotFoundError(NotFoundError):
    code = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Journal entry {entry_id} not found")


# --- Conflicts ---

class ConflictError(LedgerError):
    """The request collides with existing state. Not retryable."""

    code = "CONFLICT"


class DuplicateCodeError(ConflictError):
    code = "DUPLICATE_CODE"

    def __init__(self, account_code: str):
        self.account_code = account_code
        super().__init__(f"Account with code '{account_code}' already exists")


class HasTransactionsError(ConflictError):
    code = "HAS_TRANSACTIONS"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(
            f"Cannot delete account {account_id} with existing transactions"
        )


# --- Storage ---

class StorageError(LedgerError):
    """
    The database rejected a write or the connection failed.

    The session has already been rolled back when this is raised.
    """

    code = "STORAGE_ERROR"
