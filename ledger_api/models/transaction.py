"""
Transaction model.

A transaction is one leg of a journal entry: a credit or a debit
against an account path. It only becomes durable when its journal
entry is committed, and afterwards only the void and approval flags
change.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, DateTime, Numeric, ForeignKey,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_api.models.base import Base

# Large enough for any currency amount, precise enough for rates
CURRENCY_LARGE = Numeric(40, 16)


class Transaction(Base):
    """
    A single credit or debit leg.

    book_id duplicates journal_entries.book_id so that balance
    queries never need a join.
    """

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    journal_entry_id: Mapped[int] = mapped_column(
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )
    credit: Mapped[Decimal] = mapped_column(
        CURRENCY_LARGE, nullable=False, default=Decimal(0)
    )
    debit: Mapped[Decimal] = mapped_column(
        CURRENCY_LARGE, nullable=False, default=Decimal(0)
    )
    currency: Mapped[str] = mapped_column(
        String(10), nullable=False, default="USD"
    )
    exchange_rate: Mapped[Decimal] = mapped_column(
        CURRENCY_LARGE, nullable=False, default=Decimal(1)
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )
    voided: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    void_reason: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )

    journal_entry: Mapped["JournalEntry"] = relationship(
        back_populates="transactions"
    )

    def __repr__(self) -> str:
        side = "CR" if self.credit else "DR"
        amount = self.credit or self.debit
        return f"<Transaction {self.account} {side} {amount} {self.currency}>"
