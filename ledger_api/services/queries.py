"""
Translate a LedgerFilter into SQLAlchemy clauses.

Each constraint of the filter maps to one explicit clause on the
transactions (or journal_entries) table; nothing is assembled from
strings.
"""

from datetime import datetime, timezone

from sqlalchemy import Select, or_, select
from sqlalchemy.sql.elements import ColumnElement

from ledger_api.account_paths import SEPARATOR
from ledger_api.models.journal_entry import JournalEntry, REVERSED_SUFFIX
from ledger_api.models.transaction import Transaction
from ledger_api.schemas.query import LedgerFilter


def to_utc_naive(value: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def account_matches(column, path: str) -> ColumnElement[bool]:
    """The path itself or any account below it."""
    return or_(
        column == path,
        column.startswith(f"{path}{SEPARATOR}", autoescape=True),
    )


def memo_matches(column, memo: str) -> ColumnElement[bool]:
    """An entry's memo, or the memo of its reversal."""
    return column.in_([memo, f"{memo}{REVERSED_SUFFIX}"])


def transaction_conditions(
    book_id: int, query: LedgerFilter
) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = [Transaction.book_id == book_id]

    if query.account:
        conditions.append(or_(*[
            account_matches(Transaction.account, path)
            for path in query.account
        ]))

    if query.journal_entry_id is not None:
        conditions.append(
            Transaction.journal_entry_id == query.journal_entry_id
        )

    if query.start_date is not None:
        conditions.append(
            Transaction.timestamp >= to_utc_naive(query.start_date)
        )
    if query.end_date is not None:
        conditions.append(
            Transaction.timestamp <= to_utc_naive(query.end_date)
        )

    if query.memo:
        conditions.append(Transaction.journal_entry_id.in_(
            select(JournalEntry.id).where(
                JournalEntry.book_id == book_id,
                memo_matches(JournalEntry.memo, query.memo),
            )
        ))

    if query.approved is not None:
        conditions.append(Transaction.approved == query.approved)

    return conditions


def journal_entry_conditions(
    book_id: int, query: LedgerFilter
) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = [JournalEntry.book_id == book_id]

    if query.journal_entry_id is not None:
        conditions.append(JournalEntry.id == query.journal_entry_id)
    if query.start_date is not None:
        conditions.append(
            JournalEntry.timestamp >= to_utc_naive(query.start_date)
        )
    if query.end_date is not None:
        conditions.append(
            JournalEntry.timestamp <= to_utc_naive(query.end_date)
        )
    if query.memo:
        conditions.append(memo_matches(JournalEntry.memo, query.memo))
    if query.approved is not None:
        conditions.append(JournalEntry.approved == query.approved)

    if query.account:
        # Entries with at least one leg on a matching account
        conditions.append(
            select(Transaction.id).where(
                Transaction.journal_entry_id == JournalEntry.id,
                or_(*[
                    account_matches(Transaction.account, path)
                    for path in query.account
                ]),
            ).exists()
        )

    return conditions


def is_paginated(query: LedgerFilter) -> bool:
    return query.per_page is not None or query.page is not None


def paginate(stmt: Select, query: LedgerFilter, default_page_size: int) -> Select:
    """Apply offset = (page - 1) * per_page and limit = per_page."""
    if not is_paginated(query):
        return stmt
    per_page = query.per_page or default_page_size
    page = query.page or 1
    return stmt.offset((page - 1) * per_page).limit(per_page)


def order_transactions(stmt: Select, query: LedgerFilter) -> Select:
    if query.newest_first:
        return stmt.order_by(Transaction.timestamp.desc(), Transaction.id.desc())
    return stmt.order_by(Transaction.timestamp.asc(), Transaction.id.asc())


def order_journal_entries(stmt: Select, query: LedgerFilter) -> Select:
    if query.newest_first:
        return stmt.order_by(JournalEntry.timestamp.desc(), JournalEntry.id.desc())
    return stmt.order_by(JournalEntry.timestamp.asc(), JournalEntry.id.asc())
