"""
Decimal helpers for credit, debit and exchange-rate arithmetic.

Amounts are never combined as binary floats. Inputs are converted
through str() so that 994.95 stays 994.95, and every sum that decides
whether an entry balances is done in Decimal.
"""

from decimal import Context, Decimal, InvalidOperation

from ledger_api.errors import ValidationError

# Column precision: Numeric(40, 16)
PRECISION = 16
ZERO = Decimal(0)
ONE = Decimal(1)

# Tolerance for "balanced"
NEAR_ZERO = Decimal("1e-10")

# Public results are rounded to this many places
RESULT_PLACES = Decimal("1e-10")
_RESULT_CONTEXT = Context(prec=60)


def to_decimal(value, field: str = "amount") -> Decimal:
    """Convert a number or numeric string to a finite Decimal."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationError(f"Invalid {field}: {value!r}") from None
    else:
        raise ValidationError(f"Invalid {field}: {value!r}")

    if not result.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    return result


def is_near_zero(value: Decimal) -> bool:
    return abs(value) <= NEAR_ZERO


def as_number(value) -> float:
    """
    Turn an internal decimal result into a plain number.

    Aggregates read back from the store may carry noise far below
    NEAR_ZERO; rounding removes it so a balanced account reads 0.
    """
    if value is None:
        return 0.0
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    result = float(value.quantize(RESULT_PLACES, context=_RESULT_CONTEXT))
    # Normalise -0.0
    return result + 0.0
