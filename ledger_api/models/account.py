"""
Registered account model (chart of accounts).

Registration is optional: transactions may post to any valid path.
A registered account adds reporting metadata, and the trial balance
is built from the registered accounts of a book.
"""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_api.models.base import Base
from ledger_api.models.enums import EntryType


class Account(Base):
    """
    Metadata for one account path in a book.

    account_code and account_name are unique across the system;
    account_name is the account path used for balance queries.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    book_id: Mapped[int] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    account_code: Mapped[int] = mapped_column(
        Integer, unique=True, nullable=False
    )
    account_name: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )
    to_increase: Mapped[EntryType] = mapped_column(
        SAEnum(EntryType, name="entry_type_enum"),
        nullable=False,
    )
    classification: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    account_type: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    sub_account_type: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    memo: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    book: Mapped["Book"] = relationship(back_populates="accounts")

    def __repr__(self) -> str:
        return f"<Account {self.account_code} {self.account_name}>"
