"""
Read-only reporting endpoints: balances, transactions, trial
balance and mark-to-market.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ledger_api.api.dependencies import get_book
from ledger_api.models.base import get_db
from ledger_api.models.book import Book
from ledger_api.schemas.ledger import TransactionView
from ledger_api.schemas.query import LedgerFilter
from ledger_api.schemas.reports import (
    BalanceResult,
    MarkToMarketRequest,
    TrialBalanceResult,
)
from ledger_api.services.book_service import BookService

router = APIRouter(tags=["Reports"])


def split_accounts(value: str | None) -> list[str] | None:
    """Split a comma-separated account list, dropping blanks."""
    if not value:
        return None
    return [part for part in (p.strip() for p in value.split(",")) if part]


@router.get("/books/{book_id}/balance", response_model=BalanceResult)
def get_balance(
    account: list[str] | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    in_quote_currency: bool = Query(default=True, alias="inQuoteCurrency"),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    page: int | None = Query(default=None, ge=1),
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """
    Credit and debit totals of the matching transactions.

    Amounts are converted to the book's quote currency unless
    inQuoteCurrency=false. With perPage/page the totals cover only
    that page of transactions.
    """
    query = LedgerFilter(
        account=account,
        start_date=start_date,
        end_date=end_date,
        per_page=per_page,
        page=page,
    )
    return BookService(db).get_balance(book, query, in_quote_currency=in_quote_currency)


@router.get("/books/{book_id}/transactions", response_model=list[TransactionView])
def get_transactions(
    accounts: str | None = Query(default=None),
    per_page: int | None = Query(default=None, ge=1, alias="perPage"),
    page: int | None = Query(default=None, ge=1),
    newest_first: bool = Query(default=False, alias="newestFirst"),
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """Transactions on any of a comma-separated list of accounts."""
    query = LedgerFilter(
        account=split_accounts(accounts),
        per_page=per_page,
        page=page,
        newest_first=newest_first,
    )
    return [
        TransactionView.model_validate(tx)
        for tx in BookService(db).get_transactions(book, query)
    ]


@router.get("/books/{book_id}/tb", response_model=TrialBalanceResult)
def get_trial_balance(
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    query = LedgerFilter(start_date=start_date, end_date=end_date)
    return BookService(db).trial_balance(book, query)


@router.post("/books/{book_id}/marktomarket", response_model=dict[str, float])
def mark_to_market(
    request: MarkToMarketRequest,
    book: Book = Depends(get_book),
    db: Session = Depends(get_db),
):
    """
    Revalue balances at the supplied exchange rates.

    The rate table must include the book's quote currency and every
    currency held by the selected accounts.
    """
    query = LedgerFilter(account=request.accounts)
    return BookService(db).mark_to_market(book, query, request.exchange_rates)
