"""
Journal entry model.

An entry is one accounting transaction: a dated header plus the
line items that move money between accounts. The sum of the
debits equals the sum of the credits; the PostingService
enforces this before anything reaches the database.
"""

import datetime as dt
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from general_ledger.models.base import Base
from general_ledger.models.enums import EntryStatus


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    reference: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[EntryStatus] = mapped_column(
        SAEnum(
            EntryStatus,
            name="entry_status_enum",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=EntryStatus.POSTED,
    )
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, nullable=False, default=dt.datetime.utcnow, onupdate=dt.datetime.utcnow
    )

    # The entry owns its items: removing one from this list, or
    # deleting the entry, deletes the item row.
    items: Mapped[list["LineItem"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="LineItem.id",
    )

    @property
    def total_debit(self) -> Decimal:
        return sum((item.debit for item in self.items), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((item.credit for item in self.items), Decimal("0"))

    def __repr__(self) -> str:
        return f"<JournalEntry {self.id} {self.date} {self.reference!r}>"
