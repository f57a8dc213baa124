"""
Pydantic schemas for journal entry operations.

These define the API contract. Balance is NOT checked here:
the PostingService owns that rule so that every caller (HTTP,
journal synthesizer, tests) goes through the same check.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from general_ledger.models.enums import EntryStatus
from general_ledger.schemas.account import Pagination


# --- Request Schemas ---

class LineItemCreate(BaseModel):
    """A single debit or credit against one account."""
    account_id: int
    debit: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    credit: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)


class JournalEntryCreate(BaseModel):
    """
    A complete journal entry: header plus line items.

    Also used for updates, where the items replace the
    entry's existing items wholesale. There is no status field:
    every entry written through the API is posted.
    """
    date: date
    reference: str | None = Field(default=None, max_length=255)
    description: str | None = None
    items: list[LineItemCreate] = Field(min_length=1)


# --- Response Schemas ---

class LineItemResponse(BaseModel):
    id: int
    account_id: int
    account_code: str
    account_name: str
    debit: Decimal
    credit: Decimal

    model_config = {"from_attributes": True}


class JournalEntryResponse(BaseModel):
    id: int
    date: date
    reference: str | None
    description: str | None
    status: EntryStatus
    items: list[LineItemResponse]
    total_debit: Decimal
    total_credit: Decimal

    model_config = {"from_attributes": True}


class JournalEntryPage(BaseModel):
    data: list[JournalEntryResponse]
    pagination: Pagination
