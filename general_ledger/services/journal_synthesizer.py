"""
Journal synthesizer — turns finalized invoices and bills into entries.

Invoicing and billing never write to the ledger themselves. They
hand a finalized document to this module, which builds the
balanced entry the document implies and posts it through
PostingService like any other caller:

    Invoice:  DEBIT  Accounts Receivable (1100)   total
              CREDIT Sales Revenue        (4000)   subtotal
              CREDIT Sales Tax Payable    (2100)   tax, if any

    Bill:     CREDIT Accounts Payable     (2000)   total
              DEBIT  <item account>                line total, per item

A document whose amounts do not add up is rejected by the
posting service with UnbalancedEntryError, exactly as a manual
entry would be. Before re-synthesizing an edited document, call
delete_related_journal() with its reference.
"""

from sqlalchemy.orm import Session

from general_ledger.exceptions import ValidationError
from general_ledger.logging_config import get_logger
from general_ledger.models.account import Account
from general_ledger.models.documents import Bill, Invoice
from general_ledger.models.journal_entry import JournalEntry
from general_ledger.schemas.journal import JournalEntryCreate, LineItemCreate
from general_ledger.services.account_service import AccountService
from general_ledger.services.posting_service import PostingService

logger = get_logger("services.synthesizer")

RECEIVABLE_CODE = "1100"
PAYABLE_CODE = "2000"
SALES_TAX_CODE = "2100"
SALES_REVENUE_CODE = "4000"

INVOICE_PREFIX = "INV-"
BILL_PREFIX = "BILL-"


class JournalSynthesizer:

    def __init__(self, db: Session):
        self.db = db
        self.accounts = AccountService(db)
        self.posting = PostingService(db)

    def _require(self, code: str) -> Account:
        account = self.accounts.get_by_code(code)
        if account is None:
            raise ValidationError(f"Required accounting code {code} not found")
        return account

    def post_invoice_journal(self, invoice: Invoice) -> JournalEntry:
        receivable = self._require(RECEIVABLE_CODE)
        revenue = self._require(SALES_REVENUE_CODE)
        tax = self.accounts.get_by_code(SALES_TAX_CODE)

        items = [
            LineItemCreate(account_id=receivable.id, debit=invoice.total_amount),
            LineItemCreate(account_id=revenue.id, credit=invoice.subtotal),
        ]
        # Without a tax account the tax share is left out, and the
        # entry will not balance if the invoice carries tax.
        if invoice.tax_amount > 0 and tax is not None:
            items.append(LineItemCreate(account_id=tax.id, credit=invoice.tax_amount))

        entry = self.posting.post(JournalEntryCreate(
            date=invoice.invoice_date,
            reference=f"{INVOICE_PREFIX}{invoice.invoice_number}",
            description=(
                f"Automatic journal entry for invoice {invoice.invoice_number}"
            ),
            items=items,
        ))
        logger.info(
            "Invoice journal synthesized",
            extra={"invoice": invoice.invoice_number, "entry_id": entry.id},
        )
        return entry

    def post_bill_journal(self, bill: Bill) -> JournalEntry:
        payable = self._require(PAYABLE_CODE)

        items = [LineItemCreate(account_id=payable.id, credit=bill.total_amount)]
        for bill_item in bill.items:
            if bill_item.account_id:
                items.append(LineItemCreate(
                    account_id=bill_item.account_id,
                    debit=bill_item.line_total,
                ))

        entry = self.posting.post(JournalEntryCreate(
            date=bill.bill_date,
            reference=f"{BILL_PREFIX}{bill.bill_number}",
            description=f"Automatic journal entry for bill {bill.bill_number}",
            items=items,
        ))
        logger.info(
            "Bill journal synthesized",
            extra={"bill": bill.bill_number, "entry_id": entry.id},
        )
        return entry

    def delete_related_journal(self, reference: str) -> bool:
        """
        Delete the first entry whose reference starts with ``reference``.

        Returns False when there is nothing to delete.
        """
        entry = self.posting.find_by_reference_prefix(reference)
        if entry is None:
            return False
        self.posting.delete(entry.id)
        return True
