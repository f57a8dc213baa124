"""
Report service — financial statements built from ledger balances.

Every report here is a composition of the chart of accounts and
BalanceService. No report aggregates line items on its own; they
only choose windows, partition accounts by type and shape the
result. Reports are read-only and never fail on sparse data:
an empty ledger yields empty sections and zero totals.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from general_ledger.logging_config import get_logger
from general_ledger.models.enums import AccountType, Direction
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.models.line_item import LineItem
from general_ledger.schemas.reports import (
    BalanceSheetReport,
    CashFlowReport,
    DashboardReport,
    IncomeStatementReport,
    ReportLine,
    TrialBalanceReport,
    TrialBalanceRow,
)
from general_ledger.services.account_service import AccountService
from general_ledger.services.balance_service import (
    BalanceService,
    Window,
    ZERO,
    sign_convention,
)

logger = get_logger("services.reports")

RETAINED_EARNINGS_CODE = "RE-001"
RETAINED_EARNINGS_NAME = "Net Income / Retained Earnings"

OTHER_RECEIPT = "Other Receipt"
OTHER_PAYMENT = "Other Payment"


class ReportService:

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountService(db)
        self.balances = BalanceService(db)

    def _section(
        self, account_type: AccountType, window: Window
    ) -> list[ReportLine]:
        """Non-zero balances of every account of one type, in code order."""
        lines = []
        for account in self.accounts.accounts_by_code([account_type]):
            balance = self.balances.account_balance(account, window)
            if balance == 0:
                continue
            lines.append(ReportLine(
                code=account.code, name=account.name, balance=balance
            ))
        return lines

    def trial_balance(self, as_of: date) -> TrialBalanceReport:
        """
        Every account's net position as of a date, in debit/credit columns.

        Net is debits - credits for every account regardless of type:
        positive goes in the debit column, otherwise its absolute value
        in the credit column. Accounts with no activity at all are left
        out. For a balanced ledger the two column totals are equal.
        """
        window = Window.as_of(as_of)
        rows = []
        total_debit = ZERO
        total_credit = ZERO

        for account in self.accounts.accounts_by_code():
            debits, credits = self.balances.totals([account.id], window)
            if debits == 0 and credits == 0:
                continue

            net = self.balances.balance([account.id], Direction.DEBIT, window)
            if net > 0:
                row = TrialBalanceRow(
                    code=account.code, name=account.name, debit=net, credit=ZERO
                )
                total_debit += net
            else:
                row = TrialBalanceRow(
                    code=account.code, name=account.name, debit=ZERO, credit=abs(net)
                )
                total_credit += abs(net)
            rows.append(row)

        if total_debit != total_credit:
            logger.warning(
                "Trial balance does not reconcile",
                extra={
                    "as_of": as_of,
                    "total_debit": total_debit,
                    "total_credit": total_credit,
                },
            )

        return TrialBalanceReport(
            accounts=rows,
            total_debit=total_debit,
            total_credit=total_credit,
            date=as_of,
        )

    def net_income(self, window: Window) -> Decimal:
        return (
            self.balances.type_balance(AccountType.REVENUE, window)
            - self.balances.type_balance(AccountType.EXPENSE, window)
        )

    def balance_sheet(self, as_of: date) -> BalanceSheetReport:
        """
        Assets, liabilities and equity as of a date.

        Revenue minus expense from inception through as_of is added
        to equity as a synthetic retained-earnings line, so that
        total_assets == total_liabilities + total_equity holds for
        any balanced ledger.
        """
        window = Window.as_of(as_of)

        assets = self._section(AccountType.ASSET, window)
        liabilities = self._section(AccountType.LIABILITY, window)
        equity = self._section(AccountType.EQUITY, window)

        net_income = self.net_income(window)
        if net_income != 0:
            equity.append(ReportLine(
                code=RETAINED_EARNINGS_CODE,
                name=RETAINED_EARNINGS_NAME,
                balance=net_income,
            ))

        return BalanceSheetReport(
            assets=assets,
            liabilities=liabilities,
            equity=equity,
            net_income=net_income,
            total_assets=self.balances.type_balance(AccountType.ASSET, window),
            total_liabilities=self.balances.type_balance(
                AccountType.LIABILITY, window
            ),
            total_equity=(
                self.balances.type_balance(AccountType.EQUITY, window)
                + net_income
            ),
            date=as_of,
        )

    def income_statement(self, start: date, end: date) -> IncomeStatementReport:
        """Revenue and expense movement between two dates, inclusive."""
        window = Window.between(start, end)

        total_revenue = self.balances.type_balance(AccountType.REVENUE, window)
        total_expense = self.balances.type_balance(AccountType.EXPENSE, window)

        return IncomeStatementReport(
            revenues=self._section(AccountType.REVENUE, window),
            expenses=self._section(AccountType.EXPENSE, window),
            total_revenue=total_revenue,
            total_expense=total_expense,
            net_income=total_revenue - total_expense,
            start_date=start,
            end_date=end,
        )

    def cash_flow(self, start: date, end: date) -> CashFlowReport:
        """
        Approximate cash flow between two dates, by counter-account.

        Each line item on a cash account inside the window is matched
        to the first line of the same entry (lowest id) carrying an
        amount on the opposite side, and filed under that account's
        name: debits to cash are inflows, credits are outflows.

        Entries with more than two lines are attributed to that first
        match only; the remaining counter-lines are ignored. This is a
        known simplification, not an allocation.

        The opening balance is the cash position as of start, so it
        already includes anything dated on the first day of the range.
        """
        cash_accounts = self.accounts.cash_accounts()
        cash_ids = [account.id for account in cash_accounts]

        inflows: dict[str, Decimal] = defaultdict(lambda: ZERO)
        outflows: dict[str, Decimal] = defaultdict(lambda: ZERO)

        if cash_ids:
            window = Window.between(start, end)
            cash_lines = self.db.execute(
                select(LineItem)
                .join(JournalEntry, LineItem.entry_id == JournalEntry.id)
                .where(
                    LineItem.account_id.in_(cash_ids),
                    window.clause(JournalEntry.date),
                )
                .options(
                    selectinload(LineItem.entry)
                    .selectinload(JournalEntry.items)
                    .selectinload(LineItem.account)
                )
                .order_by(JournalEntry.date, LineItem.id)
            ).scalars().all()

            for line in cash_lines:
                if line.debit > 0:
                    counter = next(
                        (i for i in line.entry.items if i.credit > 0), None
                    )
                    category = counter.account.name if counter else OTHER_RECEIPT
                    inflows[category] += line.debit
                elif line.credit > 0:
                    counter = next(
                        (i for i in line.entry.items if i.debit > 0), None
                    )
                    category = counter.account.name if counter else OTHER_PAYMENT
                    outflows[category] += line.credit

        direction = sign_convention(AccountType.ASSET)
        opening = self.balances.balance(
            cash_ids, direction, Window.as_of(start)
        )
        closing = self.balances.balance(cash_ids, direction, Window.as_of(end))

        return CashFlowReport(
            operating_inflows=dict(inflows),
            operating_outflows=dict(outflows),
            net_cash_flow=sum(inflows.values(), ZERO) - sum(outflows.values(), ZERO),
            start_period_balance=opening,
            end_period_balance=closing,
            start_date=start,
            end_date=end,
        )

    def dashboard(self, as_of: date) -> DashboardReport:
        """Headline figures: receivables, payables, cash and net income to date."""
        window = Window.as_of(as_of)

        def named(account_type: AccountType, name_like: str) -> Decimal:
            ids = self.accounts.account_ids(account_type, name_like)
            return self.balances.balance(ids, sign_convention(account_type), window)

        revenue = self.balances.type_balance(AccountType.REVENUE, window)
        expense = self.balances.type_balance(AccountType.EXPENSE, window)

        return DashboardReport(
            receivables=named(AccountType.ASSET, "Accounts Receivable"),
            payables=named(AccountType.LIABILITY, "Accounts Payable"),
            cash=named(AccountType.ASSET, "Cash"),
            revenue=revenue,
            expense=expense,
            net_income=revenue - expense,
            date=as_of,
        )
