"""
Book model.

A book is a named ledger with a fixed quote currency. All journal
entries and transactions belong to exactly one book, and are removed
with it.
"""

from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_api.models.base import Base


class Book(Base):
    """
    A ledger denominated in a quote currency.

    The quote currency never changes after creation: asking for an
    existing book with a different currency is an error.
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    quote_currency: Mapped[str] = mapped_column(
        String(10), nullable=False, default="USD"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    journal_entries: Mapped[list["JournalEntry"]] = relationship(
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    accounts: Mapped[list["Account"]] = relationship(
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Book {self.name} ({self.quote_currency})>"
