"""
Ledger service: committing, voiding and approving journal entries.

This service enforces the fundamental rules:
1. Every entry must balance: the sum of (credit - debit) * rate over
   its transactions is zero (within NEAR_ZERO)
2. An entry and its transactions are written together or not at all
3. Committed transactions are never edited; a mistake is undone by
   voiding the entry, which commits an equal and opposite entry

No other service writes journal entries or transactions.
"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ledger_api.errors import (
    EntryAlreadyVoided,
    EntryNotBalanced,
    LedgerError,
    TransactionIDNotFound,
    ValidationError,
)
from ledger_api.models.book import Book
from ledger_api.models.journal_entry import JournalEntry, REVERSED_SUFFIX
from ledger_api.money import is_near_zero
from ledger_api.services.storage import reading, writing

logger = logging.getLogger(__name__)


class LedgerService:
    """
    All journal entry writes pass through this service.

    Methods add and flush; the caller commits the session. When a
    write fails the session is rolled back before the error is raised.
    """

    def __init__(self, db: Session):
        self.db = db

    def commit(self, entry: JournalEntry) -> JournalEntry | None:
        """
        Validate and persist a pending journal entry.

        An entry that is already committed raises ValidationError.
        An entry without pending transactions is left alone and None is
        returned. An unbalanced entry raises EntryNotBalanced and nothing
        is written. Storage failures raise DatabaseUpdateError after a
        rollback.
        """
        if entry.id is not None:
            raise ValidationError(
                f"Journal entry {entry.id} is already committed"
            )

        pending = list(entry.pending_transactions)
        if not pending:
            logger.debug(
                "Journal entry %r has no transactions; nothing to commit",
                entry.memo,
            )
            return None

        total = entry.pending_total()
        if not is_near_zero(total):
            logger.warning(
                "Rejected unbalanced journal entry %r (total %s)",
                entry.memo, total,
            )
            raise EntryNotBalanced(
                f"Invalid Journal Entry. Total not zero: {total}",
                total=total,
            )

        if entry.approved is None:
            entry.approved = True

        with writing(self.db, f"Saving journal entry {entry.memo!r}"):
            self.db.add(entry)
            for tx in pending:
                tx.book_id = entry.book_id
                tx.timestamp = entry.timestamp
                tx.approved = entry.approved
                entry.transactions.append(tx)
            self.db.flush()

        entry.clear_pending()
        logger.info(
            "Committed journal entry %s %r with %d transactions",
            entry.id, entry.memo, len(pending),
        )
        return entry

    def get_entry(self, book: Book, entry_id: int) -> JournalEntry:
        with reading("JournalEntry query"):
            entry = self.db.get(JournalEntry, entry_id)
        if entry is None or entry.book_id != book.id:
            raise TransactionIDNotFound(
                f"Journal entry not found with ID {entry_id}"
            )
        return entry

    def void_entry(
        self, book: Book, entry_id: int, reason: str | None = None
    ) -> JournalEntry:
        """Void the entry with this id in this book."""
        return self.void(self.get_entry(book, entry_id), reason)

    def void(self, entry: JournalEntry, reason: str | None = None) -> JournalEntry:
        """
        Void a committed entry and commit its reversal.

        In one unit of work:
        1. the entry is marked void with the reason
        2. each of its transactions is marked void
        3. a reversing entry is built: same book, memo "<memo> [REVERSED]",
           original_id pointing back, and for every transaction the
           opposite leg with the same account, amount, currency and rate
        4. the reversing entry is committed

        A failure in any step rolls back all of them. Returns the
        reversing entry.
        """
        if entry.id is None:
            raise ValidationError(
                "Only a committed journal entry can be voided"
            )
        if entry.voided:
            raise EntryAlreadyVoided(
                f"Journal entry {entry.id} already voided"
            )

        reason = reason or ""
        entry_id = entry.id

        with writing(self.db, f"Voiding journal entry {entry_id}"):
            entry.voided = True
            entry.void_reason = reason
            transactions = list(entry.transactions)
            for tx in transactions:
                tx.voided = True
                tx.void_reason = reason
            self.db.flush()

        reversal = JournalEntry(
            book_id=entry.book_id,
            memo=f"{entry.memo}{REVERSED_SUFFIX}",
            timestamp=datetime.utcnow(),
            quote_currency=entry.quote_currency,
            original_id=entry_id,
            voided=False,
            approved=entry.approved,
        )
        try:
            for tx in transactions:
                if tx.credit:
                    reversal.debit(
                        tx.account, tx.credit, tx.currency, tx.exchange_rate
                    )
                if tx.debit:
                    reversal.credit(
                        tx.account, tx.debit, tx.currency, tx.exchange_rate
                    )
            self.commit(reversal)
        except LedgerError:
            # Undo steps 1 and 2
            self.db.rollback()
            raise

        logger.info(
            "Voided journal entry %s (%r); reversal is entry %s",
            entry_id, reason, reversal.id,
        )
        return reversal

    def approve_entry(self, book: Book, entry_id: int) -> JournalEntry:
        """Mark a committed entry and all its transactions approved."""
        entry = self.get_entry(book, entry_id)
        with writing(self.db, f"Approving journal entry {entry_id}"):
            entry.approved = True
            for tx in entry.transactions:
                tx.approved = True
            self.db.flush()
        logger.info("Approved journal entry %s", entry_id)
        return entry
