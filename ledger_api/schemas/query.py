"""
Query filter shared by balance, ledger, transaction and
mark-to-market lookups.

The filter is a typed value; services/queries.py turns it into
SQLAlchemy clauses.
"""

from datetime import datetime

from pydantic import Field, field_validator

from ledger_api.schemas.base import ApiModel


class LedgerFilter(ApiModel):
    """
    Optional constraints on the transactions of a book.

    account: one or more account paths. Each matches the path itself
    and every account below it, so "Assets" includes
    "Assets:Receivable".
    memo: matches entries with exactly this memo, and their reversals.
    page is 1-indexed; offset = (page - 1) * per_page.
    """
    account: list[str] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    memo: str | None = None
    journal_entry_id: int | None = None
    approved: bool | None = None
    per_page: int | None = Field(default=None, ge=1)
    page: int | None = Field(default=None, ge=1)
    newest_first: bool = False

    @field_validator("account", mode="before")
    @classmethod
    def wrap_single_account(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        accounts = [a.strip() for a in v if a and a.strip()]
        return accounts or None
