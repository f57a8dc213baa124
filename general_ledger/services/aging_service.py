"""
Aging service — receivable and payable aging schedules.

Aging runs over open invoices and bills, not over ledger
balances: the outstanding balance on each document is kept by
the invoicing and billing modules. Bucketing itself is a pure
function of (due date, as-of date) so it can be tested without
a database.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from general_ledger.exceptions import ValidationError
from general_ledger.logging_config import get_logger
from general_ledger.models.documents import Bill, Invoice
from general_ledger.models.enums import AgingKind
from general_ledger.schemas.reports import AgingDetail, AgingReport

logger = get_logger("services.aging")

CURRENT = "current"

# Bucket names in report order. ``total`` is appended to the summary.
BUCKETS = (CURRENT, "0-30", "31-60", "61-90", "90+")

# Checked top to bottom; the first threshold strictly exceeded wins.
_THRESHOLDS = (
    (90, "90+"),
    (60, "61-90"),
    (30, "31-60"),
    (0, "0-30"),
)

UNKNOWN_PARTY = "Unknown"


@dataclass(frozen=True)
class OpenDocument:
    """An invoice or bill reduced to what aging needs."""

    id: int
    name: str
    ref: str
    date: date
    due_date: date
    balance: Decimal


def days_overdue(due_date: date, as_of: date) -> int:
    """Days past due; negative when the due date is still ahead."""
    return (as_of - due_date).days


def bucket_for(days: int) -> str:
    for threshold, name in _THRESHOLDS:
        if days > threshold:
            return name
    return CURRENT


def age_documents(
    documents: Iterable[OpenDocument], as_of: date
) -> tuple[dict[str, Decimal], list[AgingDetail]]:
    """
    Bucket documents by days overdue.

    Returns the summary (one sum per bucket plus ``total``) and a
    detail row per document. The reported age never goes below 0.
    """
    summary = {name: Decimal("0") for name in BUCKETS}
    summary["total"] = Decimal("0")
    details = []

    for doc in documents:
        days = days_overdue(doc.due_date, as_of)
        bucket = bucket_for(days)

        summary[bucket] += doc.balance
        summary["total"] += doc.balance

        details.append(AgingDetail(
            id=doc.id,
            name=doc.name,
            ref=doc.ref,
            date=doc.date,
            due_date=doc.due_date,
            balance=doc.balance,
            age=max(days, 0),
            bucket=bucket,
        ))

    return summary, details


class AgingService:

    def __init__(self, db: Session):
        self.db = db

    def _open_invoices(self) -> list[OpenDocument]:
        invoices = self.db.execute(
            select(Invoice).where(Invoice.balance > 0).order_by(Invoice.id)
        ).scalars().all()
        return [
            OpenDocument(
                id=inv.id,
                name=inv.customer_name or UNKNOWN_PARTY,
                ref=inv.invoice_number,
                date=inv.invoice_date,
                due_date=inv.due_date,
                balance=inv.balance,
            )
            for inv in invoices
        ]

    def _open_bills(self) -> list[OpenDocument]:
        bills = self.db.execute(
            select(Bill).where(Bill.balance > 0).order_by(Bill.id)
        ).scalars().all()
        return [
            OpenDocument(
                id=bill.id,
                name=bill.vendor_name or UNKNOWN_PARTY,
                ref=bill.bill_number,
                date=bill.bill_date,
                due_date=bill.due_date,
                balance=bill.balance,
            )
            for bill in bills
        ]

    def report(self, kind: AgingKind | str, as_of: date) -> AgingReport:
        """
        Aged receivables (open invoices) or payables (open bills).

        Raises ValidationError for any kind other than
        "receivable" or "payable".
        """
        try:
            kind = AgingKind(kind)
        except ValueError:
            raise ValidationError(
                f"Unknown aging type '{kind}', expected receivable or payable"
            ) from None

        if kind == AgingKind.RECEIVABLE:
            documents = self._open_invoices()
        else:
            documents = self._open_bills()

        summary, details = age_documents(documents, as_of)
        logger.debug(
            "Aging schedule built",
            extra={"kind": kind.value, "as_of": as_of, "documents": len(details)},
        )
        return AgingReport(type=kind, summary=summary, details=details, as_of=as_of)
