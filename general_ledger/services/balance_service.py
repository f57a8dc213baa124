"""
Balance service — the one aggregation primitive every report uses.

A balance is never stored. It is always the sum of line items
for a set of accounts over a date window, signed by the normal
side of the account type the caller declares:

    debit-normal  (asset, expense):              debits - credits
    credit-normal (liability, equity, revenue):  credits - debits

The calculator does not look up each row's account type. A call
must cover accounts of one type only; passing a mix produces a
meaningless number, not an error. Report generators partition by
type before calling.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from general_ledger.models.account import Account
from general_ledger.models.enums import AccountType, Direction
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.models.line_item import LineItem

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

DEBIT_NORMAL_TYPES = frozenset({AccountType.ASSET, AccountType.EXPENSE})


def _money(value) -> Decimal:
    # SQLite hands sums back as floats; pin everything to cents.
    return Decimal(str(value)).quantize(CENT)


def sign_convention(account_type: AccountType) -> Direction:
    """Return the side of the ledger that increases this account type."""
    if account_type in DEBIT_NORMAL_TYPES:
        return Direction.DEBIT
    return Direction.CREDIT


@dataclass(frozen=True)
class Window:
    """
    Which journal entries a balance covers, by entry date.

    Window.as_of(d) is cumulative from inception through d.
    Window.between(a, b) is the movement from a through b,
    both ends inclusive.
    """

    end: date
    start: date | None = None

    @classmethod
    def as_of(cls, as_of: date) -> "Window":
        return cls(end=as_of)

    @classmethod
    def between(cls, start: date, end: date) -> "Window":
        return cls(end=end, start=start)

    def clause(self, column):
        if self.start is None:
            return column <= self.end
        return column.between(self.start, self.end)


class BalanceService:

    def __init__(self, db: Session):
        self.db = db

    def totals(
        self, account_ids: Iterable[int], window: Window
    ) -> tuple[Decimal, Decimal]:
        """Raw (debit, credit) sums for the accounts inside the window."""
        ids = set(account_ids)
        if not ids:
            return ZERO, ZERO

        total_debit, total_credit = self.db.execute(
            select(
                func.coalesce(func.sum(LineItem.debit), 0),
                func.coalesce(func.sum(LineItem.credit), 0),
            )
            .join(JournalEntry, LineItem.entry_id == JournalEntry.id)
            .where(
                LineItem.account_id.in_(ids),
                window.clause(JournalEntry.date),
            )
        ).one()

        return _money(total_debit), _money(total_credit)

    def balance(
        self,
        account_ids: Iterable[int],
        direction: Direction,
        window: Window,
    ) -> Decimal:
        """
        Net balance of the accounts, signed for the declared direction.

        No matching line items gives zero, never an error.
        """
        total_debit, total_credit = self.totals(account_ids, window)
        if direction == Direction.DEBIT:
            return total_debit - total_credit
        return total_credit - total_debit

    def account_balance(self, account: Account, window: Window) -> Decimal:
        """Balance of a single account under its own type's convention."""
        return self.balance(
            [account.id], sign_convention(account.account_type), window
        )

    def type_balance(self, account_type: AccountType, window: Window) -> Decimal:
        """Combined balance of every account of one type."""
        account_ids = self.db.execute(
            select(Account.id).where(Account.account_type == account_type)
        ).scalars().all()
        return self.balance(account_ids, sign_convention(account_type), window)
