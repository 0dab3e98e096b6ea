"""
Pydantic schemas for book operations.
"""

from datetime import datetime

from pydantic import Field

from ledger_api.models.book import Book
from ledger_api.schemas.base import ApiModel


class BookCreate(ApiModel):
    """
    Request to create (or fetch) a book.

    Both fields are optional at the schema level so that a missing
    value is reported as MissingInput rather than a schema failure.
    """
    name: str | None = Field(default=None, max_length=255)
    currency: str | None = Field(default=None, max_length=10)


class BookResponse(ApiModel):
    id: int
    name: str
    currency: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_book(cls, book: Book) -> "BookResponse":
        return cls(
            id=book.id,
            name=book.name,
            currency=book.quote_currency,
            created_at=book.created_at,
            updated_at=book.updated_at,
        )


class BookCreateResponse(BookResponse):
    """Book fields plus whether this call created it."""
    success: bool
    message: str
