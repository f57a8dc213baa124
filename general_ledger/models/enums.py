"""
Shared enumerations for database models.

Enums mapped to database enums ensure only valid values are
stored. An unknown account type is caught at the database
level, not just in request validation.
"""

import enum


class AccountType(str, enum.Enum):
    """The five fundamental accounting categories."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class Direction(str, enum.Enum):
    """Which side of the ledger increases an account's balance."""
    DEBIT = "debit"
    CREDIT = "credit"


class EntryStatus(str, enum.Enum):
    DRAFT = "draft"
    POSTED = "posted"


class AgingKind(str, enum.Enum):
    """Which open documents an aging schedule covers."""
    RECEIVABLE = "receivable"
    PAYABLE = "payable"
