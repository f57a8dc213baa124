"""Business logic services."""

from general_ledger.services.account_service import AccountService
from general_ledger.services.aging_service import AgingService
from general_ledger.services.audit_service import AuditService
from general_ledger.services.balance_service import BalanceService, Window
from general_ledger.services.journal_synthesizer import JournalSynthesizer
from general_ledger.services.posting_service import PostingService
from general_ledger.services.report_service import ReportService

__all__ = [
    "AccountService",
    "AgingService",
    "AuditService",
    "BalanceService",
    "Window",
    "JournalSynthesizer",
    "PostingService",
    "ReportService",
]
