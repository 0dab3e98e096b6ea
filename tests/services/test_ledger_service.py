"""
Tests for the LedgerService.

Tests cover:
- Balanced entry posting and the zero-sum rule
- Rounding of decimal amounts
- Multi-currency entries
- Voiding: reversal symmetry, idempotency, atomicity
- Approval
"""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from ledger_api.errors import (
    DatabaseUpdateError,
    EntryAlreadyVoided,
    EntryNotBalanced,
    TransactionIDNotFound,
    ValidationError,
)
from ledger_api.models import JournalEntry, Transaction
from ledger_api.schemas.query import LedgerFilter


# --- Helpers to reduce repetition ---

def make_book(book_service, db_session, name="TestA", currency="ZAR"):
    _, book = book_service.get_or_create_book(name, currency)
    db_session.commit()
    return book


def post_rent(book_service, ledger_service, book, memo, amount, timestamp=None):
    """Debit Assets:Receivable, credit Income:Rent."""
    entry = book_service.new_journal_entry(book, memo, timestamp)
    entry.debit("Assets:Receivable", amount).credit("Income:Rent", amount)
    return ledger_service.commit(entry)


def count_transactions(db_session):
    return db_session.scalar(select(func.count(Transaction.id)))


# --- Commit Tests ---

class TestCommit:

    def test_balanced_entry_is_saved(self, book_service, ledger_service, db_session):
        book = make_book(book_service, db_session)
        entry = post_rent(book_service, ledger_service, book, "Test Entry", 500)
        db_session.commit()

        assert entry.id is not None
        assert entry.memo == "Test Entry"
        assert entry.voided is False
        assert entry.approved is True
        assert len(entry.transactions) == 2
        assert entry.pending_transactions == []

    def test_transactions_copy_entry_fields(self, book_service, ledger_service, db_session):
        book = make_book(book_service, db_session)
        when = datetime(2024, 3, 1, 12, 0, 0)
        entry = post_rent(book_service, ledger_service, book, "Dated", 700, when)
        db_session.commit()

        txs = sorted(entry.transactions, key=lambda t: t.account)
        assert [t.account for t in txs] == ["Assets:Receivable", "Income:Rent"]
        assert txs[0].debit == 700
        assert txs[0].credit == 0
        assert txs[1].credit == 700
        assert txs[1].debit == 0
        for tx in txs:
            assert tx.book_id == book.id
            assert tx.journal_entry_id == entry.id
            assert tx.timestamp == when
            assert tx.currency == "ZAR"
            assert tx.exchange_rate == 1

    def test_unbalanced_entry_rejected(self, book_service, ledger_service, db_session):
        book = make_book(book_service, db_session)
        entry = book_service.new_journal_entry(book, "Broken")
        entry.debit("Assets:Receivable", 500).credit("Income:Rent", 400)

        with pytest.raises(EntryNotBalanced, match="Total not zero") as exc_info:
            ledger_service.commit(entry)

        assert exc_info.value.total == Decimal(-100)
        assert count_transactions(db_session) == 0

    def test_rounding_does_not_unbalance(self, book_service, ledger_service, db_session):
        book = make_book(book_service, db_session, "TestB", "USD")
        entry = book_service.new_journal_entry(book, "Rounding Test")
        entry.credit("A:B", 1005).debit("A:B", 994.95).debit("A:B", 10.05)
        ledger_service.commit(entry)
        db_session.commit()

        result = book_service.get_balance(book, LedgerFilter(account="A:B"))
        assert result.balance == 0
        assert result.credit_total == 1005
        assert result.debit_total == 1005
        assert result.num_transactions == 3

    def test_empty_entry_is_a_no_op(self, book_service, ledger_service, db_session):
        book = make_book(book_service, db_session)
        entry = book_service.new_journal_entry(book, "Nothing")

        assert ledger_service.commit(entry) is None
        assert db_session.scalar(select(func.count(JournalEntry.id))) == 0

    def test_multi_currency_entry_balances_at_rates(
        self, book_service, ledger_service, db_session
    ):
        book = make_book(book_service, db_session, "Forex", "USD")
        entry = book_service.new_journal_entry(book, "Buy 10000 ZAR for $1000")
        entry.credit("Trading:ZAR", 10000, "ZAR", 0.1)
        entry.debit("Trading:USD", 1050, "USD", 1)
        entry.credit("Expenses:Fees", 50, "USD", 1)

        assert ledger_service.commit(entry) is not None

    def test_multi_currency_entry_unbalanced_at_rates(
        self, book_service, ledger_service, db_session
    ):
        book = make_book(book_service, db_session, "Forex", "USD")
        entry = book_service.new_journal_entry(book, "Wrong rate")
        entry.credit("Trading:ZAR", 10000, "ZAR", 0.2)
        entry.debit("Trading:USD", 1000, "USD")

        with pytest.raises(EntryNotBalanced):
            ledger_service.commit(entry)

    def test_committed_entry_cannot_gain_legs(
        self, book_service, ledger_service, db_session
    ):
        book = make_book(book_service, db_session)
        entry = post_rent(book_service, ledger_service, book, "Test Entry", 500)
        db_session.commit()

        with pytest.raises(ValidationError, match="already committed"):
            entry.debit("Assets:Cash", 99)
        assert entry.pending_transactions == []

    def test_committed_entry_cannot_be_committed_again(
        self, book_service, ledger_service, db_session
    ):
        book = make_book(book_service, db_session)
        entry = post_rent(book_service, ledger_service, book, "Test Entry", 500)
        db_session.commit()

        with pytest.raises(ValidationError, match="already committed"):
            ledger_service.commit(entry)
        assert count_transactions(db_session) == 2

    def test_deep_account_rejected_before_commit(self, book_service, db_session):
        book = make_book(book_service, db_session)
        entry = book_service.new_journal_entry(book, "Deep")

        with pytest.raises(ValidationError, match="too deep"):
            entry.debit("A:B:C:D", 10)
        assert entry.pending_transactions == []

    def test_negative_amount_rejected(self, book_service, db_session):
        book = make_book(book_service, db_session)
        entry = book_service.new_journal_entry(book, "Negative")

        with pytest.raises(ValidationError, match="must not be negative"):
            entry.credit("Income", -5)

    def test_non_numeric_amount_rejected(self, book_service, db_session):
        book = make_book(book_service, db_session)
        entry = book_service.new_journal_entry(book, "Garbage")

        with pytest.raises(ValidationError, match="Invalid amount"):
            entry.credit("Income", "lots")


# --- Void Tests ---

class TestVoid:

    def _setup(self, book_service, ledger_service, db_session):
        book = make_book(book_service, db_session)
        first = post_rent(
            book_service, ledger_service, book, "Test Entry", 500,
            datetime(2024, 1, 1),
        )
        post_rent(
            book_service, ledger_service, book, "Test Entry 2", 700,
            datetime(2024, 1, 2),
        )
        db_session.commit()
        return book, first

    def test_void_marks_entry_and_transactions(
        self, book_service, ledger_service, db_session
    ):
        book, first = self._setup(book_service, ledger_service, db_session)

        ledger_service.void_entry(book, first.id, "Messed up")
        db_session.commit()

        db_session.refresh(first)
        assert first.voided is True
        assert first.void_reason == "Messed up"
        assert all(tx.voided for tx in first.transactions)
        assert all(tx.void_reason == "Messed up" for tx in first.transactions)

    def test_reversal_is_equal_and_opposite(
        self, book_service, ledger_service, db_session
    ):
        book, first = self._setup(book_service, ledger_service, db_session)

        reversal = ledger_service.void(first, "Messed up")
        db_session.commit()

        assert reversal.id is not None
        assert reversal.memo == "Test Entry [REVERSED]"
        assert reversal.original_id == first.id
        assert reversal.voided is False

        legs = {tx.account: tx for tx in reversal.transactions}
        assert legs["Assets:Receivable"].credit == 500
        assert legs["Assets:Receivable"].debit == 0
        assert legs["Income:Rent"].debit == 500
        assert legs["Income:Rent"].credit == 0

    def test_balances_net_out_after_void(
        self, book_service, ledger_service, db_session
    ):
        book, first = self._setup(book_service, ledger_service, db_session)
        assets = LedgerFilter(account="Assets")

        assert book_service.get_balance(book, assets).balance == -1200

        ledger_service.void(first, "Messed up")
        db_session.commit()

        result = book_service.get_balance(book, assets)
        assert result.balance == -700
        assert result.num_transactions == 3

    def test_voided_entry_keeps_its_legs(
        self, book_service, ledger_service, db_session
    ):
        book, first = self._setup(book_service, ledger_service, db_session)
        ledger_service.void(first, "Messed up")
        db_session.commit()

        with pytest.raises(ValidationError, match="already committed"):
            first.debit("Assets:Cash", 99).credit("Income", 99)
        with pytest.raises(ValidationError):
            ledger_service.commit(first)

        db_session.refresh(first)
        assert len(first.transactions) == 2
        result = book_service.get_balance(book, LedgerFilter(account="Assets"))
        assert result.balance == -700

    def test_pending_entry_cannot_be_voided(
        self, book_service, ledger_service, db_session
    ):
        book = make_book(book_service, db_session)
        entry = book_service.new_journal_entry(book, "Never saved")
        entry.debit("Assets:Cash", 10).credit("Income", 10)

        with pytest.raises(ValidationError, match="Only a committed"):
            ledger_service.void(entry, "oops")

        assert entry.voided is False
        assert db_session.scalar(select(func.count(JournalEntry.id))) == 0

    def test_void_twice_rejected(self, book_service, ledger_service, db_session):
        book, first = self._setup(book_service, ledger_service, db_session)
        ledger_service.void(first)
        db_session.commit()

        with pytest.raises(EntryAlreadyVoided):
            ledger_service.void_entry(book, first.id)

    def test_unknown_entry(self, book_service, ledger_service, db_session):
        book, _ = self._setup(book_service, ledger_service, db_session)

        with pytest.raises(TransactionIDNotFound):
            ledger_service.void_entry(book, 9999)

    def test_entry_of_another_book_not_found(
        self, book_service, ledger_service, db_session
    ):
        _, first = self._setup(book_service, ledger_service, db_session)
        other = make_book(book_service, db_session, "Other", "ZAR")

        with pytest.raises(TransactionIDNotFound):
            ledger_service.void_entry(other, first.id)

    def test_failed_reversal_leaves_entry_untouched(
        self, book_service, ledger_service, db_session, monkeypatch
    ):
        book, first = self._setup(book_service, ledger_service, db_session)

        def failing_commit(entry):
            raise DatabaseUpdateError("Saving journal entry failed")

        monkeypatch.setattr(ledger_service, "commit", failing_commit)

        with pytest.raises(DatabaseUpdateError):
            ledger_service.void_entry(book, first.id, "Messed up")

        entry = db_session.get(JournalEntry, first.id)
        assert entry.voided is False
        assert not any(tx.voided for tx in entry.transactions)
        assert db_session.scalar(select(func.count(JournalEntry.id))) == 2


# --- Approval Tests ---

class TestApprove:

    def test_unapproved_entry_can_be_approved(
        self, book_service, ledger_service, db_session
    ):
        book = make_book(book_service, db_session)
        entry = book_service.new_journal_entry(book, "Needs sign-off")
        entry.set_approved(False)
        entry.debit("Assets:Cash", 20).credit("Income:Sales", 20)
        ledger_service.commit(entry)
        db_session.commit()

        pending = book_service.get_balance(book, LedgerFilter(approved=False))
        assert pending.num_transactions == 2

        ledger_service.approve_entry(book, entry.id)
        db_session.commit()

        assert entry.approved is True
        assert all(tx.approved for tx in entry.transactions)
        pending = book_service.get_balance(book, LedgerFilter(approved=False))
        assert pending.num_transactions == 0

    def test_approve_unknown_entry(self, book_service, ledger_service, db_session):
        book = make_book(book_service, db_session)
        with pytest.raises(TransactionIDNotFound):
            ledger_service.approve_entry(book, 42)
