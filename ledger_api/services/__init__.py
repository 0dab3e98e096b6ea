"""Business logic services."""

from ledger_api.services.book_service import BookService
from ledger_api.services.ledger_service import LedgerService
from ledger_api.services.account_service import AccountService

__all__ = ["BookService", "LedgerService", "AccountService"]
