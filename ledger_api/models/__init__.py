"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from ledger_api.models.base import Base
from ledger_api.models.enums import EntryType
from ledger_api.models.book import Book
from ledger_api.models.transaction import Transaction
from ledger_api.models.journal_entry import JournalEntry
from ledger_api.models.account import Account

__all__ = [
    "Base",
    "EntryType",
    "Book",
    "Transaction",
    "JournalEntry",
    "Account",
]
