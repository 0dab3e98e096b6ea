"""
Shared FastAPI dependencies.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ledger_api.models.base import get_db
from ledger_api.models.book import Book
from ledger_api.services.book_service import BookService


def get_book(book_id: int, db: Session = Depends(get_db)) -> Book:
    """Resolve the {book_id} path parameter, or raise BookDoesNotExist."""
    return BookService(db).get_book_by_id(book_id)
