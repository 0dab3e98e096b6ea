"""
Result types for aggregate queries: balances, trial balance and
mark-to-market.

Group-by rows are explicit types rather than loosely shaped
query results.
"""

from decimal import Decimal

from pydantic import Field

from ledger_api.models.enums import EntryType
from ledger_api.schemas.base import ApiModel


class BalanceResult(ApiModel):
    """
    Totals for the transactions matching a filter.

    balance = credit_total - debit_total. With no matching rows all
    numbers are zero and currency is the book's quote currency.
    """
    credit_total: float
    debit_total: float
    balance: float
    currency: str
    num_transactions: int


class AccountBalanceRow(ApiModel):
    """One (account, currency) group: sum of credit - debit."""
    account: str
    currency: str
    balance: Decimal


class TrialBalanceLine(ApiModel):
    account: str
    account_code: int
    increasing_entry: EntryType
    credit_total: float
    debit_total: float
    balance: float
    currency: str
    num_transactions: int


class TrialBalanceResult(ApiModel):
    is_tb_balanced: bool
    credit_total: float
    debit_total: float
    accounts: list[TrialBalanceLine]


class MarkToMarketRequest(ApiModel):
    accounts: list[str] | None = None
    exchange_rates: dict[str, Decimal] = Field(default_factory=dict)
