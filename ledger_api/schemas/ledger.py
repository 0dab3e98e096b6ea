"""
Pydantic schemas for journal entries and transactions.

These define the API contract: what data comes in, what data goes
out. Decimal columns leave the API as plain numbers.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import Field, field_validator

from ledger_api.money import as_number
from ledger_api.schemas.base import ApiModel


# --- Request Schemas ---

class TransactionCreate(ApiModel):
    """
    One leg of a posted entry.

    Credit and debit are netted: credit - debit decides the side
    and the absolute value is the amount.
    """
    account: str = Field(min_length=1, max_length=255)
    credit: Decimal = Field(default=Decimal(0), ge=0)
    debit: Decimal = Field(default=Decimal(0), ge=0)
    currency: str | None = Field(default=None, max_length=10)
    exchange_rate: Decimal | None = Field(default=None, gt=0)


class JournalEntryCreate(ApiModel):
    memo: str = Field(default="", max_length=10000)
    timestamp: datetime | None = None
    transactions: list[TransactionCreate] = Field(default_factory=list)
    approved: bool = True


class VoidRequest(ApiModel):
    reason: str | None = Field(default=None, max_length=255)


# --- Response Schemas ---

class TransactionView(ApiModel):
    """A committed transaction with decimals as plain numbers."""
    id: int
    journal_entry_id: int
    book_id: int
    account: str
    credit: float
    debit: float
    currency: str
    exchange_rate: float
    timestamp: datetime
    voided: bool
    void_reason: str | None
    approved: bool

    @field_validator("credit", "debit", "exchange_rate", mode="before")
    @classmethod
    def decimal_to_number(cls, v):
        return as_number(v)


class JournalEntryView(ApiModel):
    id: int
    book_id: int
    memo: str
    timestamp: datetime
    quote_currency: str
    voided: bool
    void_reason: str | None
    original_id: int | None
    approved: bool
    transactions: list[TransactionView]


class LedgerResponse(ApiModel):
    count: int
    entries: list[TransactionView]


class EntryResponse(ApiModel):
    """Outcome of posting, voiding or approving an entry."""
    success: bool
    message: str
    id: int | None
