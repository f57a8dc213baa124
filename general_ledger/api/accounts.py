"""
Chart-of-accounts API endpoints.

The API layer is thin: it owns the commit/rollback boundary and
HTTP status codes, and delegates every rule to AccountService.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.config import get_settings
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.models.enums import AccountType
from general_ledger.services.account_service import AccountService
from general_ledger.schemas.account import (
    AccountCreate,
    AccountPage,
    AccountResponse,
    AccountUpdate,
    Pagination,
)

router = APIRouter(prefix="/accounting/accounts", tags=["Accounts"])

settings = get_settings()


@router.get("", response_model=AccountPage)
def list_accounts(
    type: AccountType | None = None,
    keyword: str | None = None,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    page: int = Query(default=1, ge=1),
    db: Session = Depends(get_db),
):
    """List accounts ordered by code, filtered by type and name/code keyword."""
    service = AccountService(db)
    accounts, total = service.list_accounts(
        account_type=type, keyword=keyword, limit=limit, page=page
    )
    return AccountPage(
        data=[AccountResponse.model_validate(a) for a in accounts],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """Add an account to the chart. The code must be unique."""
    service = AccountService(db)
    try:
        account = service.create_account(request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    service = AccountService(db)
    try:
        return service.get_account(account_id)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: int,
    request: AccountUpdate,
    db: Session = Depends(get_db),
):
    """Rename, re-code, retype or (de)activate an account."""
    service = AccountService(db)
    try:
        account = service.update_account(account_id, request)
        db.commit()
        return account
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{account_id}")
def delete_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """
    Delete an account.

    Refused with 409 while any journal line references it.
    """
    service = AccountService(db)
    try:
        service.delete_account(account_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
    return {"message": "Account deleted successfully"}
