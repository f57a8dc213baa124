"""
Posting service — the only writer of journal entries.

This service enforces the ledger's core rules:
1. Every entry balances: |debits - credits| <= 0.01
2. Every line item references an existing account
3. An entry and its line items are written all at once or not at all
4. Edits replace the whole item set; items are never patched in place

Validation always finishes before the session is touched, so a
rejected post or update leaves prior state exactly as it was.
The caller commits after a successful return.

There is no row-level locking. Two concurrent postings against
the same account are each atomic, but they are only ordered
relative to each other by the database's own isolation level.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session, selectinload

from general_ledger.config import get_settings
from general_ledger.exceptions import (
    EntryNotFoundError,
    InvalidAccountError,
    UnbalancedEntryError,
    ValidationError,
)
from general_ledger.logging_config import get_logger
from general_ledger.models.account import Account
from general_ledger.models.enums import EntryStatus
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.models.line_item import LineItem
from general_ledger.schemas.journal import JournalEntryCreate, LineItemCreate
from general_ledger.services.audit_service import AuditService
from general_ledger.services.storage import flush_or_rollback

logger = get_logger("services.posting")


class PostingService:

    def __init__(self, db: Session):
        self.db = db
        self.audit = AuditService(db)
        self.tolerance: Decimal = get_settings().BALANCE_TOLERANCE

    def _validate(self, items: list[LineItemCreate]) -> None:
        """
        Check an item set before anything is written.

        Raises ValidationError for an empty set, InvalidAccountError
        for unknown accounts, UnbalancedEntryError when debits and
        credits differ by more than the tolerance.
        """
        if not items:
            raise ValidationError("Journal entry must have at least one line item")

        account_ids = {item.account_id for item in items}
        found = set(self.db.execute(
            select(Account.id).where(Account.id.in_(account_ids))
        ).scalars().all())
        missing = account_ids - found
        if missing:
            raise InvalidAccountError(missing)

        total_debit = sum((item.debit for item in items), Decimal("0"))
        total_credit = sum((item.credit for item in items), Decimal("0"))

        if abs(total_debit - total_credit) > self.tolerance:
            logger.warning(
                "Rejected unbalanced journal entry",
                extra={"total_debit": total_debit, "total_credit": total_credit},
            )
            raise UnbalancedEntryError(total_debit, total_credit)

    @staticmethod
    def _build_items(items: list[LineItemCreate]) -> list[LineItem]:
        return [
            LineItem(
                account_id=item.account_id,
                debit=item.debit,
                credit=item.credit,
            )
            for item in items
        ]

    def post(self, request: JournalEntryCreate) -> JournalEntry:
        """
        Validate and stage a new journal entry with its line items.

        On a storage failure the session is rolled back and
        StorageError is raised; nothing of the entry survives.
        """
        self._validate(request.items)

        entry = JournalEntry(
            date=request.date,
            reference=request.reference,
            description=request.description,
            status=EntryStatus.POSTED,
            items=self._build_items(request.items),
        )
        self.db.add(entry)
        self.audit.record(
            "journal.created",
            f"Posted journal entry {request.reference or '-'} dated "
            f"{request.date} with {len(request.items)} items",
        )
        flush_or_rollback(self.db, logger, "journal post")

        logger.info(
            "Journal entry posted",
            extra={
                "entry_id": entry.id,
                "reference": entry.reference,
                "total": entry.total_debit,
            },
        )
        return entry

    def get(self, entry_id: int) -> JournalEntry:
        entry = self.db.execute(
            select(JournalEntry)
            .where(JournalEntry.id == entry_id)
            .options(selectinload(JournalEntry.items).selectinload(LineItem.account))
        ).scalar_one_or_none()
        if not entry:
            raise EntryNotFoundError(entry_id)
        return entry

    def update(self, entry_id: int, request: JournalEntryCreate) -> JournalEntry:
        """
        Replace an entry's header and its entire item set.

        The new items are validated exactly as in post() before any
        change is made. Then, in one unit of work: every existing
        item is deleted, the header is updated, the new items are
        inserted. Diffing old against new items is deliberately not
        attempted; a full swap keeps the balance rule trivially true.
        """
        entry = self.get(entry_id)
        self._validate(request.items)

        # Old items must be gone before the replacements are inserted.
        entry.items.clear()
        flush_or_rollback(self.db, logger, "journal update")

        entry.date = request.date
        entry.reference = request.reference
        entry.description = request.description
        entry.status = EntryStatus.POSTED
        entry.items.extend(self._build_items(request.items))

        self.audit.record(
            "journal.updated",
            f"Replaced journal entry {entry_id} with "
            f"{len(request.items)} items",
        )
        flush_or_rollback(self.db, logger, "journal update")

        logger.info(
            "Journal entry updated",
            extra={"entry_id": entry.id, "items": len(entry.items)},
        )
        return entry

    def delete(self, entry_id: int) -> None:
        """Delete an entry; its line items go with it."""
        entry = self.get(entry_id)
        reference = entry.reference

        self.db.delete(entry)
        self.audit.record(
            "journal.deleted",
            f"Deleted journal entry {entry_id} ({reference or '-'})",
        )
        flush_or_rollback(self.db, logger, "journal delete")
        logger.info("Journal entry deleted", extra={"entry_id": entry_id})

    def list_entries(
        self,
        keyword: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 10,
        page: int = 1,
    ) -> tuple[list[JournalEntry], int]:
        """Return one page of entries, newest date first, plus the total count."""
        stmt = select(JournalEntry)
        if keyword:
            stmt = stmt.where(or_(
                JournalEntry.reference.icontains(keyword, autoescape=True),
                JournalEntry.description.icontains(keyword, autoescape=True),
            ))
        if start_date:
            stmt = stmt.where(JournalEntry.date >= start_date)
        if end_date:
            stmt = stmt.where(JournalEntry.date <= end_date)

        total = self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        entries = self.db.execute(
            stmt.options(
                selectinload(JournalEntry.items).selectinload(LineItem.account)
            )
            .order_by(JournalEntry.date.desc(), JournalEntry.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        ).scalars().all()
        return list(entries), total

    def find_by_reference_prefix(self, prefix: str) -> JournalEntry | None:
        """First entry (lowest id) whose reference starts with prefix."""
        return self.db.execute(
            select(JournalEntry)
            .where(JournalEntry.reference.startswith(prefix, autoescape=True))
            .order_by(JournalEntry.id)
            .limit(1)
        ).scalar_one_or_none()
