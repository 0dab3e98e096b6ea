"""
Book service: books and every read over a book's ledger.

A book owns a quote currency, hands out new journal entries, and
answers balance, ledger, account, trial-balance and mark-to-market
questions. Reads are aggregate queries against the transactions
table; nothing is cached in memory.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, func, distinct
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_api.account_paths import list_accounts
from ledger_api.config import get_settings
from ledger_api.errors import (
    BookDoesNotExist,
    DatabaseQueryError,
    ExchangeRateNotFound,
    MismatchedCurrency,
    MissingInput,
)
from ledger_api.models.book import Book
from ledger_api.models.journal_entry import JournalEntry
from ledger_api.models.transaction import Transaction
from ledger_api.money import ZERO, as_number, is_near_zero, to_decimal
from ledger_api.schemas.ledger import LedgerResponse, TransactionView
from ledger_api.schemas.query import LedgerFilter
from ledger_api.schemas.reports import (
    AccountBalanceRow,
    BalanceResult,
    TrialBalanceLine,
    TrialBalanceResult,
)
from ledger_api.services.account_service import AccountService
from ledger_api.services.queries import (
    is_paginated,
    journal_entry_conditions,
    order_journal_entries,
    order_transactions,
    paginate,
    to_utc_naive,
    transaction_conditions,
)
from ledger_api.services.storage import reading, writing

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"


def _decimal(value) -> Decimal:
    """Aggregates come back as Decimal, float or int depending on the backend."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class BookService:
    """
    Operations on books.

    The service takes a database session as a constructor argument,
    so the caller controls the transaction boundary.
    """

    def __init__(self, db: Session):
        self.db = db
        self.default_page_size = get_settings().DEFAULT_PAGE_SIZE

    # --- Books ---

    def _find_book(self, name: str) -> Book | None:
        with reading("Book query"):
            return self.db.execute(
                select(Book).where(Book.name == name)
            ).scalar_one_or_none()

    def get_or_create_book(
        self, name: str, quote_currency: str | None = None
    ) -> tuple[bool, Book]:
        """
        Return (is_new, book), creating the book if needed.

        The quote currency of an existing book cannot change: asking
        for it with a different currency raises MismatchedCurrency.
        When two requests race to create the same book, the loser's
        insert hits the unique constraint and it falls back to the
        row the winner created.
        """
        if not name:
            raise MissingInput("Missing book name")

        is_new = False
        book = self._find_book(name)

        if book is None:
            book = Book(
                name=name,
                quote_currency=quote_currency or DEFAULT_CURRENCY,
            )
            with writing(self.db, f"Creating book {name}"):
                try:
                    self.db.add(book)
                    self.db.flush()
                except IntegrityError:
                    # Another request created the same name first
                    self.db.rollback()
                    book = None

            if book is None:
                logger.info("Book %s was created concurrently; re-reading", name)
                book = self._find_book(name)
                if book is None:
                    raise DatabaseQueryError(
                        f"Book {name} could not be created or found"
                    )
            else:
                is_new = True
                logger.info(
                    "Created book %s (%s)", book.name, book.quote_currency
                )

        if quote_currency and quote_currency != book.quote_currency:
            logger.warning(
                "Rejected currency %s for book %s (%s)",
                quote_currency, book.name, book.quote_currency,
            )
            raise MismatchedCurrency(
                "Request Base currency does not match existing base "
                f"currency. Requested: {quote_currency}. "
                f"Current: {book.quote_currency}"
            )

        return is_new, book

    def get_book(self, name: str) -> Book:
        book = self._find_book(name)
        if book is None:
            raise BookDoesNotExist(f"Book {name} does not exist.")
        return book

    def get_book_by_id(self, book_id: int) -> Book:
        with reading("Book query"):
            book = self.db.get(Book, book_id)
        if book is None:
            raise BookDoesNotExist(f"Book with id {book_id} does not exist")
        return book

    def list_books(self) -> list[Book]:
        """All books, ordered by name."""
        with reading("Book list query"):
            books = self.db.execute(
                select(Book).order_by(Book.name.asc())
            ).scalars().all()
        return list(books)

    def delete_book(self, book: Book) -> None:
        """
        Delete a book with all its entries, transactions and accounts.

        Administrative operation; never part of normal bookkeeping.
        """
        with writing(self.db, f"Deleting book {book.name}"):
            self.db.delete(book)
            self.db.flush()
        logger.info("Deleted book %s", book.name)

    # --- Journal entries ---

    def new_journal_entry(
        self, book: Book, memo: str, timestamp: datetime | None = None
    ) -> JournalEntry:
        """
        Build a pending journal entry for this book.

        Nothing is written until LedgerService.commit() is called.
        """
        return JournalEntry(
            book_id=book.id,
            memo=memo or "",
            timestamp=to_utc_naive(timestamp) or datetime.utcnow(),
            quote_currency=book.quote_currency,
            voided=False,
            approved=True,
        )

    def get_journal_entries(
        self, book: Book, query: LedgerFilter | None = None
    ) -> list[JournalEntry]:
        query = query or LedgerFilter()
        stmt = select(JournalEntry).where(
            *journal_entry_conditions(book.id, query)
        )
        stmt = paginate(
            order_journal_entries(stmt, query), query, self.default_page_size
        )
        with reading("JournalEntry query"):
            entries = self.db.execute(stmt).scalars().all()
        return list(entries)

    # --- Balances and ledgers ---

    def _matching_conditions(self, book: Book, query: LedgerFilter) -> list:
        """
        Conditions for the transactions a filter selects.

        With pagination, the page is cut from the ordered transactions
        first, and aggregates run over that page only.
        """
        conditions = transaction_conditions(book.id, query)
        if not is_paginated(query):
            return conditions
        page_ids = paginate(
            order_transactions(
                select(Transaction.id).where(*conditions), query
            ),
            query,
            self.default_page_size,
        )
        return [Transaction.id.in_(page_ids.scalar_subquery())]

    def get_balance(
        self,
        book: Book,
        query: LedgerFilter | None = None,
        in_quote_currency: bool = False,
    ) -> BalanceResult:
        """
        Sum credits and debits of the matching transactions.

        balance = credit_total - debit_total. In quote currency each
        row is first multiplied by its stored exchange rate.
        """
        query = query or LedgerFilter()
        if in_quote_currency:
            credit = Transaction.credit * Transaction.exchange_rate
            debit = Transaction.debit * Transaction.exchange_rate
        else:
            credit = Transaction.credit
            debit = Transaction.debit

        stmt = select(
            func.sum(credit),
            func.sum(debit),
            func.count(Transaction.id),
            func.max(Transaction.currency),
        ).where(*self._matching_conditions(book, query))

        with reading("Balance query"):
            credit_total, debit_total, count, currency = (
                self.db.execute(stmt).one()
            )

        credit_total = _decimal(credit_total)
        debit_total = _decimal(debit_total)
        if in_quote_currency or not currency:
            currency = book.quote_currency

        return BalanceResult(
            credit_total=as_number(credit_total),
            debit_total=as_number(debit_total),
            balance=as_number(credit_total - debit_total),
            currency=currency,
            num_transactions=int(count or 0),
        )

    def get_transactions(
        self, book: Book, query: LedgerFilter | None = None
    ) -> list[Transaction]:
        """Matching transactions, oldest first unless newest_first."""
        query = query or LedgerFilter()
        stmt = select(Transaction).where(
            *transaction_conditions(book.id, query)
        )
        stmt = paginate(
            order_transactions(stmt, query), query, self.default_page_size
        )
        with reading("Transaction query"):
            transactions = self.db.execute(stmt).scalars().all()
        return list(transactions)

    def get_ledger(
        self, book: Book, query: LedgerFilter | None = None
    ) -> LedgerResponse:
        transactions = self.get_transactions(book, query)
        return LedgerResponse(
            count=len(transactions),
            entries=[TransactionView.model_validate(t) for t in transactions],
        )

    def list_accounts(self, book: Book) -> list[str]:
        """Every account path used in the book, with all its parents."""
        with reading("Account list query"):
            paths = self.db.execute(
                select(distinct(Transaction.account)).where(
                    Transaction.book_id == book.id
                )
            ).scalars().all()
        return list_accounts(paths)

    def get_account_balances(
        self, book: Book, query: LedgerFilter | None = None
    ) -> list[AccountBalanceRow]:
        """credit - debit per (account, currency), in the row currency."""
        query = query or LedgerFilter()
        stmt = (
            select(
                Transaction.account,
                Transaction.currency,
                func.sum(Transaction.credit - Transaction.debit),
            )
            .where(*transaction_conditions(book.id, query))
            .group_by(Transaction.account, Transaction.currency)
            .order_by(Transaction.account, Transaction.currency)
        )
        with reading("Account balance query"):
            rows = self.db.execute(stmt).all()
        return [
            AccountBalanceRow(
                account=account, currency=currency, balance=_decimal(balance)
            )
            for account, currency, balance in rows
        ]

    def trial_balance(
        self, book: Book, query: LedgerFilter | None = None
    ) -> TrialBalanceResult:
        """
        Balance of every registered account, in the quote currency.

        The trial balance is balanced when total credits equal total
        debits across the registered accounts.
        """
        query = query or LedgerFilter()
        accounts = AccountService(self.db).get_accounts(book)

        lines = []
        credit_sum = ZERO
        debit_sum = ZERO
        for account in accounts:
            account_query = query.model_copy(update={
                "account": [account.account_name],
                "per_page": None,
                "page": None,
            })
            balance = self.get_balance(book, account_query, in_quote_currency=True)
            credit_sum += to_decimal(balance.credit_total)
            debit_sum += to_decimal(balance.debit_total)
            lines.append(TrialBalanceLine(
                account=account.account_name,
                account_code=account.account_code,
                increasing_entry=account.to_increase,
                credit_total=balance.credit_total,
                debit_total=balance.debit_total,
                balance=balance.balance,
                currency=balance.currency,
                num_transactions=balance.num_transactions,
            ))

        return TrialBalanceResult(
            is_tb_balanced=is_near_zero(credit_sum - debit_sum),
            credit_total=as_number(credit_sum),
            debit_total=as_number(debit_sum),
            accounts=lines,
        )

    # --- Currency ---

    @staticmethod
    def normalize_rates(currency: str, rates: dict) -> dict[str, Decimal] | None:
        """
        Rescale a rate table so that `currency` maps to 1.

        Every rate is divided by the rate of `currency`. Returns None
        when `currency` has no (or a zero) rate, since there is no base
        to normalise against.
        """
        base = rates.get(currency) if rates else None
        if base is None:
            return None
        base = to_decimal(base, field="exchange rate")
        if base == 0:
            return None
        return {
            cur: to_decimal(rate, field="exchange rate") / base
            for cur, rate in rates.items()
        }

    def mark_to_market(
        self,
        book: Book,
        query: LedgerFilter | None,
        exchange_rates: dict,
    ) -> dict[str, float]:
        """
        Revalue open balances at the given exchange rates.

        Each (account, currency) balance is divided by that currency's
        normalised rate; the revalued balances are summed per account
        and in total as unrealizedProfit.
        """
        rates = self.normalize_rates(book.quote_currency, exchange_rates)
        if rates is None:
            raise MissingInput(
                "Cannot mark-to-market if no current exchange rates are "
                f"supplied (missing rate for {book.quote_currency})"
            )

        revalued: dict[str, Decimal] = {}
        profit = ZERO
        for row in self.get_account_balances(book, query):
            rate = rates.get(row.currency)
            if not rate:
                raise ExchangeRateNotFound(
                    f"A {row.currency} transaction exists, but its current "
                    "exchange rate was not provided"
                )
            current = row.balance / rate
            revalued[row.account] = revalued.get(row.account, ZERO) + current
            profit += current

        result = {account: as_number(value) for account, value in revalued.items()}
        result["unrealizedProfit"] = as_number(profit)
        return result
