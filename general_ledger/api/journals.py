"""
Journal entry API endpoints.

Posting, replacing and deleting entries all go through
PostingService; this layer only commits on success and rolls
back on any ledger error.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from general_ledger.api.errors import http_error
from general_ledger.config import get_settings
from general_ledger.exceptions import LedgerError
from general_ledger.models.base import get_db
from general_ledger.services.posting_service import PostingService
from general_ledger.schemas.account import Pagination
from general_ledger.schemas.journal import (
    JournalEntryCreate,
    JournalEntryPage,
    JournalEntryResponse,
)

router = APIRouter(prefix="/accounting/journals", tags=["Journals"])

settings = get_settings()


@router.get("", response_model=JournalEntryPage)
def list_journals(
    keyword: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    page: int = Query(default=1, ge=1),
    db: Session = Depends(get_db),
):
    """List entries newest first, with their line items."""
    service = PostingService(db)
    entries, total = service.list_entries(
        keyword=keyword,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        page=page,
    )
    return JournalEntryPage(
        data=[JournalEntryResponse.model_validate(e) for e in entries],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("", response_model=JournalEntryResponse, status_code=201)
def post_journal(
    request: JournalEntryCreate,
    db: Session = Depends(get_db),
):
    """
    Post a balanced journal entry.

    Total debits must equal total credits within 0.01, and every
    line must reference an existing account; otherwise 422 and
    nothing is written.
    """
    service = PostingService(db)
    try:
        entry = service.post(request)
        db.commit()
        return entry
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_journal(
    entry_id: int,
    db: Session = Depends(get_db),
):
    service = PostingService(db)
    try:
        return service.get(entry_id)
    except LedgerError as e:
        raise http_error(e)


@router.put("/{entry_id}", response_model=JournalEntryResponse)
def update_journal(
    entry_id: int,
    request: JournalEntryCreate,
    db: Session = Depends(get_db),
):
    """Replace an entry's header and its entire set of line items."""
    service = PostingService(db)
    try:
        entry = service.update(entry_id, request)
        db.commit()
        return entry
    except LedgerError as e:
        db.rollback()
        raise http_error(e)


@router.delete("/{entry_id}")
def delete_journal(
    entry_id: int,
    db: Session = Depends(get_db),
):
    service = PostingService(db)
    try:
        service.delete(entry_id)
        db.commit()
    except LedgerError as e:
        db.rollback()
        raise http_error(e)
    return {"message": "Journal deleted successfully"}
