"""
Journal entry endpoints: posting, voiding, approving and reading
the ledger.

The ledger is append-only. There are no update or delete endpoints;
a wrong entry is voided, which posts its reversal.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ledger_api.account_paths import normalize_path
from ledger_api.api.dependencies import get_book
from ledger_api.errors import LedgerError
from ledger_api.models.base import get_db
from ledger_api.models.book import Book
from ledger_api.money import ONE
from ledger_api.schemas.ledger import (
    EntryResponse,
    JournalEntryCreate,
    JournalEntryView,
    LedgerResponse,
    VoidRequest,
)
from ledger_api.schemas.query import LedgerFilter
from ledger_api.services.book_service import BookService
from ledger_api.services.ledger_service import LedgerService

router = APIRouter(tags=["Ledger"])


@router.get("/books/{book_id}/ledger", response_model=LedgerResponse)
def get_ledger(
    account: list[str] | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    page: int | None = Query(default=None, ge=1),
    newest_first: bool = Query(default=False, alias="newestFirst"),
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """
    Transactions of the book, oldest first.

    `account` may be repeated; each value matches that account and
    every account below it.
    """
    query = LedgerFilter(
        account=account,
        start_date=start_date,
        end_date=end_date,
        per_page=per_page,
        page=page,
        newest_first=newest_first,
    )
    return BookService(db).get_ledger(book, query)


@router.post("/books/{book_id}/ledger", response_model=EntryResponse)
def post_journal_entry(
    request: JournalEntryCreate,
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """
    Post a journal entry.

    Each transaction's credit and debit are netted into one leg:
    a positive credit - debit is a credit, a negative one a debit.
    The entry is rejected with EntryNotBalanced unless the legs sum
    to zero in the quote currency.
    """
    book_service = BookService(db)
    ledger_service = LedgerService(db)
    try:
        entry = book_service.new_journal_entry(book, request.memo, request.timestamp)
        entry.set_approved(request.approved)
        for tx in request.transactions:
            net = tx.credit - tx.debit
            if net == 0:
                # A leg that nets to zero moves no balance and is not stored
                normalize_path(tx.account)
                continue
            entry.new_transaction(
                tx.account,
                abs(net),
                net > 0,
                tx.currency or book.quote_currency,
                tx.exchange_rate or ONE,
            )
        committed = ledger_service.commit(entry)
        db.commit()
    except LedgerError:
        db.rollback()
        raise

    if committed is None:
        return EntryResponse(
            success=True,
            message="Journal Entry has no transactions; nothing was saved",
            id=None,
        )
    return EntryResponse(
        success=True, message="Journal Entry has been saved", id=committed.id
    )


@router.get("/books/{book_id}/entries", response_model=list[JournalEntryView])
def get_journal_entries(
    memo: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    page: int | None = Query(default=None, ge=1),
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """Journal entries with their transactions, oldest first."""
    query = LedgerFilter(
        memo=memo,
        start_date=start_date,
        end_date=end_date,
        per_page=per_page,
        page=page,
    )
    return [
        JournalEntryView.model_validate(entry)
        for entry in BookService(db).get_journal_entries(book, query)
    ]


@router.post("/books/{book_id}/ledger/{entry_id}/void", response_model=EntryResponse)
def void_journal_entry(
    entry_id: int,
    request: VoidRequest | None = None,
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """
    Void an entry.

    The entry and its transactions are marked void and a reversing
    entry is posted. The response carries the reversal's id.
    """
    reason = request.reason if request else None
    service = LedgerService(db)
    try:
        reversal = service.void_entry(book, entry_id, reason)
        db.commit()
    except LedgerError:
        db.rollback()
        raise

    return EntryResponse(
        success=True,
        message=f"Journal entry {entry_id} voided",
        id=reversal.id,
    )


@router.post("/books/{book_id}/ledger/{entry_id}/approve", response_model=EntryResponse)
def approve_journal_entry(
    entry_id: int,
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    service = LedgerService(db)
    try:
        entry = service.approve_entry(book, entry_id)
        db.commit()
    except LedgerError:
        db.rollback()
        raise

    return EntryResponse(
        success=True,
        message=f"Journal entry {entry_id} approved",
        id=entry.id,
    )
