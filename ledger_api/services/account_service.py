"""
Account service: the optional chart of accounts.

Transactions can post to any valid account path without
registering it first. Registering adds a code, a name and the side
that increases the account, which the trial balance reports on.
"""

import logging

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from ledger_api.account_paths import normalize_path
from ledger_api.errors import DatabaseQueryError
from ledger_api.models.account import Account
from ledger_api.models.book import Book
from ledger_api.schemas.account import AccountCreate
from ledger_api.services.storage import reading, writing

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def register_account(self, book: Book, request: AccountCreate) -> Account:
        """
        Register an account path in a book.

        Raises DatabaseQueryError if the code or the name is already
        taken; both are unique across all books.
        """
        name = normalize_path(request.account_name)

        with reading("Account query"):
            existing = self.db.execute(
                select(Account).where(or_(
                    Account.account_code == request.account_code,
                    Account.account_name == name,
                )).limit(1)
            ).scalar_one_or_none()

        if existing:
            if existing.account_code == request.account_code:
                raise DatabaseQueryError(
                    f"Account code {request.account_code} already exists"
                )
            raise DatabaseQueryError(f"Account name {name} already exists")

        account = Account(
            book_id=book.id,
            account_code=request.account_code,
            account_name=name,
            to_increase=request.to_increase,
            classification=request.account_classification,
            account_type=request.account_type,
            sub_account_type=request.sub_account_type,
            memo=request.memo,
        )
        with writing(self.db, f"Registering account {name}"):
            self.db.add(account)
            self.db.flush()

        logger.info(
            "Registered account %s %s in book %s",
            account.account_code, account.account_name, book.name,
        )
        return account

    def get_accounts(self, book: Book) -> list[Account]:
        """Registered accounts of a book, by code."""
        with reading("Account query"):
            accounts = self.db.execute(
                select(Account)
                .where(Account.book_id == book.id)
                .order_by(Account.account_code)
            ).scalars().all()
        return list(accounts)
