"""
Journal entry model.

A journal entry groups the transactions of one business event.
It is built in memory, legs are added with debit() and credit(),
and LedgerService.commit() checks the zero-sum rule and persists
the entry and its transactions together.

Lifecycle: pending -> committed -> voided. Voiding is one-way and
produces a reversing entry that points back via original_id.
"""

from datetime import datetime
from decimal import Decimal
from typing import Sequence

from sqlalchemy import (
    String, Boolean, DateTime, Text, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_api.account_paths import normalize_path
from ledger_api.errors import ValidationError
from ledger_api.models.base import Base
from ledger_api.models.transaction import Transaction
from ledger_api.money import ONE, ZERO, to_decimal

REVERSED_SUFFIX = " [REVERSED]"


class JournalEntry(Base):
    __tablename__ = "journal_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    memo: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    quote_currency: Mapped[str] = mapped_column(
        String(10), nullable=False, default="USD"
    )
    voided: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    void_reason: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    # Plain id, not an object reference: a reversal never owns its original
    original_id: Mapped[int | None] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="SET NULL"),
        nullable=True,
    )
    approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    book: Mapped["Book"] = relationship(back_populates="journal_entries")
    transactions: Mapped[list["Transaction"]] = relationship(
        back_populates="journal_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Transaction.id",
    )

    # --- Pending legs (in memory until commit) ---

    @property
    def pending_transactions(self) -> list[Transaction]:
        pending = self.__dict__.get("_pending_transactions")
        if pending is None:
            pending = []
            self.__dict__["_pending_transactions"] = pending
        return pending

    def clear_pending(self) -> None:
        self.__dict__["_pending_transactions"] = []

    def new_transaction(
        self,
        account: str | Sequence[str],
        amount,
        is_credit: bool,
        currency: str | None = None,
        exchange_rate=ONE,
    ) -> "JournalEntry":
        """
        Add one pending leg and return the entry, for chaining.

        The account path is validated here, before anything reaches
        the store. A committed entry is immutable: its legs cannot
        change, so adding one raises ValidationError.
        """
        if self.id is not None:
            raise ValidationError(
                f"Journal entry {self.id} is already committed; "
                "its transactions cannot change"
            )
        path = normalize_path(account)
        value = to_decimal(amount)
        if value < 0:
            raise ValidationError(
                f"Amount must not be negative for account {path}: {amount}"
            )
        rate = to_decimal(
            ONE if exchange_rate is None else exchange_rate,
            field="exchange rate",
        )

        transaction = Transaction(
            account=path,
            credit=value if is_credit else ZERO,
            debit=ZERO if is_credit else value,
            currency=currency or self.quote_currency,
            exchange_rate=rate,
            timestamp=self.timestamp,
            voided=False,
            approved=self.approved,
        )
        self.pending_transactions.append(transaction)
        return self

    def debit(
        self, account, amount, currency: str | None = None, exchange_rate=ONE
    ) -> "JournalEntry":
        return self.new_transaction(
            account, amount, False, currency, exchange_rate
        )

    def credit(
        self, account, amount, currency: str | None = None, exchange_rate=ONE
    ) -> "JournalEntry":
        return self.new_transaction(
            account, amount, True, currency, exchange_rate
        )

    def set_approved(self, value: bool) -> "JournalEntry":
        self.approved = value
        return self

    def pending_total(self) -> Decimal:
        """Sum of (credit - debit) * exchange_rate over pending legs."""
        total = ZERO
        for tx in self.pending_transactions:
            total += (tx.credit - tx.debit) * tx.exchange_rate
        return total

    @property
    def is_committed(self) -> bool:
        return self.id is not None

    def __repr__(self) -> str:
        state = "voided" if self.voided else (
            "committed" if self.id is not None else "pending"
        )
        return f"<JournalEntry {self.id} {self.memo!r} ({state})>"
