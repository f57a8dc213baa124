"""
Pydantic schemas for report payloads.

The report generators build these directly, so the service
layer and the HTTP layer share one shape per report.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from general_ledger.models.enums import AgingKind


class ReportLine(BaseModel):
    """One account's balance inside a report section."""
    code: str
    name: str
    balance: Decimal


class TrialBalanceRow(BaseModel):
    code: str
    name: str
    debit: Decimal
    credit: Decimal


class TrialBalanceReport(BaseModel):
    accounts: list[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    date: date


class BalanceSheetReport(BaseModel):
    assets: list[ReportLine]
    liabilities: list[ReportLine]
    equity: list[ReportLine]
    net_income: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    date: date


class IncomeStatementReport(BaseModel):
    revenues: list[ReportLine]
    expenses: list[ReportLine]
    total_revenue: Decimal
    total_expense: Decimal
    net_income: Decimal
    start_date: date
    end_date: date


class CashFlowReport(BaseModel):
    """
    Cash movements keyed by counter-account name.

    Each cash line is attributed to a single counter-account,
    see ReportService.cash_flow.
    """
    operating_inflows: dict[str, Decimal]
    operating_outflows: dict[str, Decimal]
    net_cash_flow: Decimal
    start_period_balance: Decimal
    end_period_balance: Decimal
    start_date: date
    end_date: date


class DashboardReport(BaseModel):
    receivables: Decimal
    payables: Decimal
    cash: Decimal
    revenue: Decimal
    expense: Decimal
    net_income: Decimal
    date: date


class AgingDetail(BaseModel):
    id: int
    name: str
    ref: str
    date: date
    due_date: date
    balance: Decimal
    age: int
    bucket: str


class AgingReport(BaseModel):
    type: AgingKind
    summary: dict[str, Decimal]
    details: list[AgingDetail]
    as_of: date
