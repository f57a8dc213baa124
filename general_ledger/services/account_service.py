"""
Account service — the chart-of-accounts registry.

Owns account definitions and the two rules that protect them:
account codes are unique, and an account that any line item
references can never be deleted. Listings are ordered by code,
which is the order every report presents accounts in.
"""

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from general_ledger.exceptions import (
    AccountNotFoundError,
    DuplicateCodeError,
    HasTransactionsError,
)
from general_ledger.logging_config import get_logger
from general_ledger.models.account import Account
from general_ledger.models.enums import AccountType
from general_ledger.models.line_item import LineItem
from general_ledger.schemas.account import AccountCreate, AccountUpdate
from general_ledger.services.audit_service import AuditService
from general_ledger.services.storage import flush_or_rollback

logger = get_logger("services.accounts")


# The standard chart a fresh ledger starts from. The journal
# synthesizer depends on 1100, 2000, 2100 and 4000 being present.
DEFAULT_CHART: list[dict] = [
    {"code": "1001", "name": "Cash on Hand", "account_type": AccountType.ASSET, "sub_type": "cash"},
    {"code": "1002", "name": "Bank Account", "account_type": AccountType.ASSET, "sub_type": "cash"},
    {"code": "1100", "name": "Accounts Receivable", "account_type": AccountType.ASSET, "sub_type": "Current Asset"},
    {"code": "1200", "name": "Inventory", "account_type": AccountType.ASSET, "sub_type": "Current Asset"},
    {"code": "1500", "name": "Office Equipment", "account_type": AccountType.ASSET, "sub_type": "Non-Current Asset"},
    {"code": "2000", "name": "Accounts Payable", "account_type": AccountType.LIABILITY, "sub_type": "Current Liability"},
    {"code": "2100", "name": "Sales Tax Payable", "account_type": AccountType.LIABILITY, "sub_type": "Current Liability"},
    {"code": "3000", "name": "Owner Equity", "account_type": AccountType.EQUITY, "sub_type": "Equity"},
    {"code": "3100", "name": "Retained Earnings", "account_type": AccountType.EQUITY, "sub_type": "Equity"},
    {"code": "4000", "name": "Sales Revenue", "account_type": AccountType.REVENUE, "sub_type": "Operating Revenue"},
    {"code": "4100", "name": "Service Income", "account_type": AccountType.REVENUE, "sub_type": "Operating Revenue"},
    {"code": "5000", "name": "Cost of Goods Sold", "account_type": AccountType.EXPENSE, "sub_type": "Cost of Sales"},
    {"code": "6000", "name": "Rent Expense", "account_type": AccountType.EXPENSE, "sub_type": "Operating Expense"},
    {"code": "6100", "name": "Salaries Expense", "account_type": AccountType.EXPENSE, "sub_type": "Operating Expense"},
    {"code": "6200", "name": "Utilities Expense", "account_type": AccountType.EXPENSE, "sub_type": "Operating Expense"},
]


def _duplicate_code(code: str):
    """Map a unique-index violation on accounts.code to DuplicateCodeError."""
    def translate(error: IntegrityError) -> DuplicateCodeError | None:
        if "code" in str(error.orig).lower():
            return DuplicateCodeError(code)
        return None
    return translate


class AccountService:

    def __init__(self, db: Session):
        self.db = db
        self.audit = AuditService(db)

    def _find_by_code(self, code: str) -> Account | None:
        return self.db.execute(
            select(Account).where(Account.code == code)
        ).scalar_one_or_none()

    def create_account(self, request: AccountCreate) -> Account:
        """
        Add an account to the chart.

        Raises DuplicateCodeError if the code is already taken.
        """
        if self._find_by_code(request.code):
            logger.warning(
                "Rejected duplicate account code", extra={"code": request.code}
            )
            raise DuplicateCodeError(request.code)

        account = Account(
            code=request.code,
            name=request.name,
            account_type=request.account_type,
            sub_type=request.sub_type,
            description=request.description,
            is_active=request.is_active,
        )
        self.db.add(account)
        self.audit.record(
            "account.created",
            f"Created account {account.code} {account.name} "
            f"({account.account_type.value})",
        )
        flush_or_rollback(
            self.db, logger, "account create",
            on_conflict=_duplicate_code(request.code),
        )
        logger.info(
            "Account created",
            extra={"account_id": account.id, "code": account.code},
        )
        return account

    def get_account(self, account_id: int) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFoundError(account_id)
        return account

    def get_by_code(self, code: str) -> Account | None:
        return self._find_by_code(code)

    def update_account(self, account_id: int, request: AccountUpdate) -> Account:
        """
        Rename, re-code, retype or toggle an account.

        Only the fields present in the request are touched. Reports
        assume an account's type is stable once it carries entries;
        retyping is allowed but changes every historical report.
        """
        account = self.get_account(account_id)
        changes = request.model_dump(exclude_unset=True)

        new_code = changes.get("code")
        if new_code and new_code != account.code:
            other = self._find_by_code(new_code)
            if other and other.id != account.id:
                raise DuplicateCodeError(new_code)

        for field, value in changes.items():
            if value is None and field in ("code", "name", "account_type", "is_active"):
                continue
            setattr(account, field, value)

        self.audit.record(
            "account.updated",
            f"Updated account {account.code}: {sorted(changes)}",
        )
        flush_or_rollback(
            self.db, logger, "account update",
            on_conflict=_duplicate_code(account.code),
        )
        logger.info(
            "Account updated",
            extra={"account_id": account.id, "fields": sorted(changes)},
        )
        return account

    def has_transactions(self, account_id: int) -> bool:
        return self.db.execute(
            select(LineItem.id).where(LineItem.account_id == account_id).limit(1)
        ).first() is not None

    def delete_account(self, account_id: int) -> None:
        """
        Remove an account from the chart.

        Refused with HasTransactionsError while any line item
        references the account. There is no cascade here on
        purpose: ledger history is never removed as a side effect.
        """
        account = self.get_account(account_id)

        if self.has_transactions(account.id):
            logger.warning(
                "Rejected delete of account with transactions",
                extra={"account_id": account.id, "code": account.code},
            )
            raise HasTransactionsError(account.id)

        self.db.delete(account)
        self.audit.record(
            "account.deleted", f"Deleted account {account.code} {account.name}"
        )
        flush_or_rollback(self.db, logger, "account delete")
        logger.info("Account deleted", extra={"account_id": account_id})

    def list_accounts(
        self,
        account_type: AccountType | None = None,
        keyword: str | None = None,
        limit: int = 10,
        page: int = 1,
    ) -> tuple[list[Account], int]:
        """Return one page of accounts ordered by code, plus the total count."""
        stmt = select(Account)
        if account_type:
            stmt = stmt.where(Account.account_type == account_type)
        if keyword:
            stmt = stmt.where(or_(
                Account.name.icontains(keyword, autoescape=True),
                Account.code.icontains(keyword, autoescape=True),
            ))

        total = self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        accounts = self.db.execute(
            stmt.order_by(Account.code)
            .limit(limit)
            .offset((page - 1) * limit)
        ).scalars().all()
        return list(accounts), total

    def accounts_by_code(
        self, account_types: list[AccountType] | None = None
    ) -> list[Account]:
        """Every account (optionally of the given types), ordered by code."""
        stmt = select(Account).order_by(Account.code)
        if account_types:
            stmt = stmt.where(Account.account_type.in_(account_types))
        return list(self.db.execute(stmt).scalars().all())

    def account_ids(
        self, account_type: AccountType, name_like: str | None = None
    ) -> list[int]:
        """Ids of every account of one type, optionally narrowed by name."""
        stmt = select(Account.id).where(Account.account_type == account_type)
        if name_like:
            stmt = stmt.where(Account.name.icontains(name_like, autoescape=True))
        return list(self.db.execute(stmt).scalars().all())

    def cash_accounts(self) -> list[Account]:
        """
        Accounts treated as cash by the cash-flow statement.

        An asset counts as cash if its name mentions Cash or Bank,
        or its sub_type is exactly "cash".
        """
        return list(self.db.execute(
            select(Account)
            .where(
                Account.account_type == AccountType.ASSET,
                or_(
                    Account.name.icontains("cash"),
                    Account.name.icontains("bank"),
                    Account.sub_type == "cash",
                ),
            )
            .order_by(Account.code)
        ).scalars().all())

    def seed_default_chart(self) -> list[Account]:
        """
        Create or refresh the standard chart of accounts.

        Matches by code: existing accounts get their name, type and
        sub_type reset, missing ones are created. Safe to run twice.
        """
        seeded = []
        for definition in DEFAULT_CHART:
            account = self._find_by_code(definition["code"])
            if account is None:
                account = Account(**definition)
                self.db.add(account)
            else:
                account.name = definition["name"]
                account.account_type = definition["account_type"]
                account.sub_type = definition["sub_type"]
            seeded.append(account)

        flush_or_rollback(self.db, logger, "chart seed")
        logger.info("Default chart seeded", extra={"accounts": len(seeded)})
        return seeded
