"""
Ledger error codes and exception types.

Every failure that reaches a client carries a stable integer code.
The HTTP layer turns any LedgerError into

    {"success": false, "message": <str>, "errorCode": <int>}

with status 400. Anything that is not a LedgerError is reported
as UnknownError.
"""

import enum


class ErrorCode(enum.IntEnum):
    """Stable error codes exposed to API clients."""
    UNKNOWN_ERROR = -1
    MISMATCHED_CURRENCY = 100
    TRANSACTION_ID_NOT_FOUND = 200
    EXCHANGE_RATE_NOT_FOUND = 210
    DATABASE_CONNECTION_ERROR = 300
    DATABASE_UPDATE_ERROR = 310
    DATABASE_QUERY_ERROR = 320
    ENTRY_NOT_BALANCED = 400
    ENTRY_ALREADY_VOIDED = 410
    MISSING_INPUT = 500
    BOOK_DOES_NOT_EXIST = 510
    VALIDATION_ERROR = 600


class LedgerError(Exception):
    """Base class for every error the ledger reports to callers."""

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def as_response(self) -> dict:
        return {
            "success": False,
            "message": self.message,
            "errorCode": int(self.code),
        }


# --- Validation ---

class ValidationError(LedgerError):
    """Malformed input, rejected before touching the store."""
    code = ErrorCode.VALIDATION_ERROR


class MissingInput(LedgerError):
    code = ErrorCode.MISSING_INPUT


# --- Domain invariants ---

class MismatchedCurrency(LedgerError):
    code = ErrorCode.MISMATCHED_CURRENCY


class TransactionIDNotFound(LedgerError):
    code = ErrorCode.TRANSACTION_ID_NOT_FOUND


class ExchangeRateNotFound(LedgerError):
    code = ErrorCode.EXCHANGE_RATE_NOT_FOUND


class EntryNotBalanced(LedgerError):
    code = ErrorCode.ENTRY_NOT_BALANCED

    def __init__(self, message: str, total=None):
        super().__init__(message)
        self.total = total


class EntryAlreadyVoided(LedgerError):
    code = ErrorCode.ENTRY_ALREADY_VOIDED


class BookDoesNotExist(LedgerError):
    code = ErrorCode.BOOK_DOES_NOT_EXIST


# --- Storage ---

class DatabaseConnectionError(LedgerError):
    code = ErrorCode.DATABASE_CONNECTION_ERROR


class DatabaseUpdateError(LedgerError):
    code = ErrorCode.DATABASE_UPDATE_ERROR


class DatabaseQueryError(LedgerError):
    code = ErrorCode.DATABASE_QUERY_ERROR
