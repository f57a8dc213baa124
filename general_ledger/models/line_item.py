"""
Line item model.

One debit or credit against one account inside a journal entry.
Line items are never edited in place: an entry update deletes
the whole set and inserts the replacement.
"""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from general_ledger.models.base import Base


class LineItem(Base):
    """
    Exactly one of debit/credit is expected to be non-zero.

    This is not enforced: report math only assumes that
    net = debit - credit per line. Negative amounts are refused
    by the database.
    """

    __tablename__ = "line_items"
    __table_args__ = (
        CheckConstraint("debit >= 0", name="ck_line_items_debit_nonnegative"),
        CheckConstraint("credit >= 0", name="ck_line_items_credit_nonnegative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    debit: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0")
    )
    credit: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0")
    )

    entry: Mapped["JournalEntry"] = relationship(back_populates="items")
    account: Mapped["Account"] = relationship(back_populates="line_items")

    def __repr__(self) -> str:
        return (
            f"<LineItem account={self.account_id} "
            f"debit={self.debit} credit={self.credit}>"
        )

    @property
    def account_code(self) -> str:
        return self.account.code

    @property
    def account_name(self) -> str:
        return self.account.name
