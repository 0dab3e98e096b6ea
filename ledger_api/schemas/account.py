"""
Pydantic schemas for registered accounts.
"""

from pydantic import Field, field_validator

from ledger_api.models.account import Account
from ledger_api.models.enums import EntryType
from ledger_api.schemas.base import ApiModel


class AccountCreate(ApiModel):
    """Request to register an account path in a book."""
    account_code: int = Field(ge=0)
    account_name: str = Field(min_length=1, max_length=255)
    to_increase: EntryType
    account_classification: str | None = Field(default=None, max_length=100)
    account_type: str | None = Field(default=None, max_length=100)
    sub_account_type: str | None = Field(default=None, max_length=100)
    memo: str | None = Field(default=None, max_length=255)

    @field_validator("to_increase", mode="before")
    @classmethod
    def upper_case_side(cls, v):
        # "Debit" and "debit" are accepted as well as "DEBIT"
        if isinstance(v, str):
            return v.strip().upper()
        return v


class AccountResponse(ApiModel):
    id: int
    book_id: int
    account_code: int
    account_name: str
    to_increase: EntryType
    account_classification: str | None
    account_type: str | None
    sub_account_type: str | None
    memo: str | None

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            book_id=account.book_id,
            account_code=account.account_code,
            account_name=account.account_name,
            to_increase=account.to_increase,
            account_classification=account.classification,
            account_type=account.account_type,
            sub_account_type=account.sub_account_type,
            memo=account.memo,
        )


class AccountCreatedResponse(ApiModel):
    success: bool
    message: str
    id: int
