"""
Financial report API endpoints.

All reports are read-only. ``date`` defaults to today; ranges
default to 1 January of the current year through today.
"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.models.enums import AgingKind
from general_ledger.services.aging_service import AgingService
from general_ledger.services.report_service import ReportService
from general_ledger.schemas.reports import (
    AgingReport,
    BalanceSheetReport,
    CashFlowReport,
    DashboardReport,
    IncomeStatementReport,
    TrialBalanceReport,
)

router = APIRouter(prefix="/accounting/reports", tags=["Reports"])


def _as_of(value: date | None) -> date:
    return value or date.today()


def _period(start: date | None, end: date | None) -> tuple[date, date]:
    today = date.today()
    return start or date(today.year, 1, 1), end or today


@router.get("/trial-balance", response_model=TrialBalanceReport)
def trial_balance(
    date: date | None = None,
    db: Session = Depends(get_db),
):
    return ReportService(db).trial_balance(_as_of(date))


@router.get("/balance-sheet", response_model=BalanceSheetReport)
def balance_sheet(
    date: date | None = None,
    db: Session = Depends(get_db),
):
    return ReportService(db).balance_sheet(_as_of(date))


@router.get("/income-statement", response_model=IncomeStatementReport)
def income_statement(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    start, end = _period(start_date, end_date)
    return ReportService(db).income_statement(start, end)


@router.get("/cash-flow", response_model=CashFlowReport)
def cash_flow(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
):
    start, end = _period(start_date, end_date)
    return ReportService(db).cash_flow(start, end)


@router.get("/aged", response_model=AgingReport)
def aged_report(
    type: AgingKind,
    date: date | None = None,
    db: Session = Depends(get_db),
):
    """Aged receivables (type=receivable) or payables (type=payable)."""
    try:
        return AgingService(db).report(type, _as_of(date))
    except LedgerError as e:
        raise http_error(e)


@router.get("/dashboard", response_model=DashboardReport)
def dashboard(
    date: date | None = None,
    db: Session = Depends(get_db),
):
    """Receivables, payables, cash and net income to date."""
    return ReportService(db).dashboard(_as_of(date))
