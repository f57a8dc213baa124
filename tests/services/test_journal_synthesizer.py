"""
Tests for the JournalSynthesizer.

Invoices and bills are turned into balanced entries posted
through PostingService, so they show up in every report like a
manual entry would.
"""

from datetime import date
from decimal import Decimal

import pytest

from general_ledger.exceptions import UnbalancedEntryError, ValidationError
from general_ledger.models import Bill, BillItem, Invoice
from general_ledger.models.enums import AccountType
from general_ledger.services.journal_synthesizer import JournalSynthesizer
from general_ledger.services.posting_service import PostingService
from general_ledger.services.report_service import ReportService


@pytest.fixture
def chart(make_account):
    return {
        "ar": make_account("1100", "Accounts Receivable", AccountType.ASSET),
        "ap": make_account("2000", "Accounts Payable", AccountType.LIABILITY),
        "tax": make_account("2100", "Sales Tax Payable", AccountType.LIABILITY),
        "sales": make_account("4000", "Sales Revenue", AccountType.REVENUE),
        "rent": make_account("6000", "Rent Expense", AccountType.EXPENSE),
        "utilities": make_account("6100", "Utilities Expense", AccountType.EXPENSE),
    }


def _invoice(subtotal, tax, total=None, number="0001"):
    subtotal, tax = Decimal(subtotal), Decimal(tax)
    return Invoice(
        invoice_number=number,
        customer_name="Acme Ltd",
        invoice_date=date(2024, 3, 1),
        due_date=date(2024, 3, 31),
        subtotal=subtotal,
        tax_amount=tax,
        total_amount=Decimal(total) if total else subtotal + tax,
        balance=subtotal + tax,
    )


def _lines(entry):
    return [(i.account.code, i.debit, i.credit) for i in entry.items]


class TestInvoiceJournal:

    def test_with_tax(self, chart, db_session):
        entry = JournalSynthesizer(db_session).post_invoice_journal(
            _invoice("1000.00", "100.00")
        )
        db_session.commit()

        assert entry.reference == "INV-0001"
        assert entry.date == date(2024, 3, 1)
        assert _lines(entry) == [
            ("1100", Decimal("1100.00"), Decimal("0")),
            ("4000", Decimal("0"), Decimal("1000.00")),
            ("2100", Decimal("0"), Decimal("100.00")),
        ]

    def test_without_tax(self, chart, db_session):
        entry = JournalSynthesizer(db_session).post_invoice_journal(
            _invoice("500.00", "0")
        )

        assert [code for code, _, _ in _lines(entry)] == ["1100", "4000"]

    def test_shows_up_in_reports(self, chart, db_session):
        JournalSynthesizer(db_session).post_invoice_journal(
            _invoice("1000.00", "100.00")
        )
        db_session.commit()

        report = ReportService(db_session).income_statement(
            date(2024, 3, 1), date(2024, 3, 31)
        )
        assert report.total_revenue == Decimal("1000.00")

    def test_amounts_that_do_not_add_up(self, chart, db_session):
        with pytest.raises(UnbalancedEntryError):
            JournalSynthesizer(db_session).post_invoice_journal(
                _invoice("1000.00", "100.00", total="1200.00")
            )

    def test_missing_receivable_account(self, make_account, db_session):
        make_account("4000", "Sales Revenue", AccountType.REVENUE)

        with pytest.raises(ValidationError, match="1100"):
            JournalSynthesizer(db_session).post_invoice_journal(
                _invoice("100.00", "0")
            )


class TestBillJournal:

    def test_one_debit_per_item(self, chart, db_session):
        bill = Bill(
            bill_number="B-77",
            vendor_name="Landlord",
            bill_date=date(2024, 3, 5),
            due_date=date(2024, 4, 5),
            subtotal=Decimal("1500.00"),
            total_amount=Decimal("1500.00"),
            balance=Decimal("1500.00"),
            items=[
                BillItem(account_id=chart["rent"].id, line_total=Decimal("1200.00")),
                BillItem(account_id=chart["utilities"].id, line_total=Decimal("300.00")),
            ],
        )
        db_session.add(bill)
        db_session.flush()

        entry = JournalSynthesizer(db_session).post_bill_journal(bill)
        db_session.commit()

        assert entry.reference == "BILL-B-77"
        assert _lines(entry) == [
            ("2000", Decimal("0"), Decimal("1500.00")),
            ("6000", Decimal("1200.00"), Decimal("0")),
            ("6100", Decimal("300.00"), Decimal("0")),
        ]

    def test_missing_payable_account(self, make_account, db_session):
        bill = Bill(
            bill_number="B-1",
            bill_date=date(2024, 3, 5),
            due_date=date(2024, 4, 5),
            total_amount=Decimal("10.00"),
        )

        with pytest.raises(ValidationError, match="2000"):
            JournalSynthesizer(db_session).post_bill_journal(bill)


class TestDeleteRelatedJournal:

    def test_deletes_matching_entry(self, chart, db_session):
        synthesizer = JournalSynthesizer(db_session)
        entry = synthesizer.post_invoice_journal(_invoice("100.00", "0"))
        db_session.commit()
        entry_id = entry.id

        assert synthesizer.delete_related_journal("INV-0001") is True
        db_session.commit()

        _, total = PostingService(db_session).list_entries()
        assert total == 0
        assert db_session.get(type(entry), entry_id) is None

    def test_nothing_to_delete(self, chart, db_session):
        assert JournalSynthesizer(db_session).delete_related_journal("INV-404") is False
