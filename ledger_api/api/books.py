"""
Book and account registration endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ledger_api.api.dependencies import get_book
from ledger_api.errors import LedgerError
from ledger_api.models.base import get_db
from ledger_api.models.book import Book
from ledger_api.schemas.account import (
    AccountCreate,
    AccountCreatedResponse,
    AccountResponse,
)
from ledger_api.schemas.book import BookCreate, BookCreateResponse, BookResponse
from ledger_api.services.account_service import AccountService
from ledger_api.services.book_service import BookService

router = APIRouter(tags=["Books"])


# --- Book Endpoints ---

@router.get("/books", response_model=list[BookResponse])
def list_books(db: Session = Depends(get_db)):
    """All books, ordered by name."""
    return [BookResponse.from_book(b) for b in BookService(db).list_books()]


@router.post("/books", response_model=BookCreateResponse)
def create_book(request: BookCreate, db: Session = Depends(get_db)):
    """
    Get or create a book.

    An existing book is returned with success=false; asking for it
    with a different currency fails with MismatchedCurrency.
    """
    service = BookService(db)
    try:
        is_new, book = service.get_or_create_book(request.name, request.currency)
        db.commit()
    except LedgerError:
        db.rollback()
        raise

    if is_new:
        message = f"Book {book.name} ({book.quote_currency}) created"
    else:
        message = f"Book {book.name} already exists"

    return BookCreateResponse(
        **BookResponse.from_book(book).model_dump(),
        success=is_new,
        message=message,
    )


@router.get("/books/{book_id}", response_model=BookResponse)
def get_book_view(book: Book = Depends(get_book)):
    return BookResponse.from_book(book)


# --- Account Endpoints ---

@router.get("/books/{book_id}/accounts", response_model=list[str])
def list_accounts(
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """Every account path used in the book, with all its parents."""
    return BookService(db).list_accounts(book)


@router.get("/books/{book_id}/accounts/registered", response_model=list[AccountResponse])
def list_registered_accounts(
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """The chart of accounts, by account code."""
    return [
        AccountResponse.from_account(a)
        for a in AccountService(db).get_accounts(book)
    ]


@router.post("/books/{book_id}/accounts", response_model=AccountCreatedResponse)
def register_account(
    request: AccountCreate,
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """Register an account path with its code and increasing side."""
    service = AccountService(db)
    try:
        account = service.register_account(book, request)
        db.commit()
    except LedgerError:
        db.rollback()
        raise

    return AccountCreatedResponse(
        success=True,
        message=f"Account {account.account_name} registered",
        id=account.id,
    )
