"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from general_ledger.models.base import Base
from general_ledger.models.enums import (
    AccountType,
    Direction,
    EntryStatus,
    AgingKind,
)
from general_ledger.models.audit_log import AuditLog
from general_ledger.models.account import Account
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.models.line_item import LineItem
from general_ledger.models.documents import Invoice, Bill, BillItem

__all__ = [
    "Base",
    "AccountType",
    "Direction",
    "EntryStatus",
    "AgingKind",
    "AuditLog",
    "Account",
    "JournalEntry",
    "LineItem",
    "Invoice",
    "Bill",
    "BillItem",
]
