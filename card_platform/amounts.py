"""
Amount Handling

Conversion, validation and arithmetic for monetary amounts. NEVER uses
float for monetary arithmetic: floats are only accepted through their string
form.

Balances are changed with exact Decimal arithmetic. Sums run in a local
context sized to the operands, with ``Inexact`` and ``Rounded`` trapped, so
a balance can never drift from the ledger entries folded onto it. The global
decimal context is left untouched.
"""

from decimal import Decimal, Inexact, InvalidOperation, Rounded, localcontext
from typing import Any

from .errors import InvalidAmountError

ZERO = Decimal('0')

# Widest amount accepted, counted from the leading digit to the last
# fractional digit
MAX_AMOUNT_DIGITS = 64


def _digit_span(value: Decimal) -> int:
    """Digits needed to write ``value`` exactly in plain notation"""
    exponent = value.as_tuple().exponent
    return max(value.adjusted(), 0) - min(exponent, 0) + 1


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """
    Convert a value to a finite Decimal.

    Accepts Decimal, int, float (via str) and numeric strings.

    Raises:
        InvalidAmountError: If the value is not a finite number or is wider
            than MAX_AMOUNT_DIGITS
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"{field_name} must be a number", value)
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(f"Cannot convert {value!r} to a decimal {field_name}", value)
    else:
        raise InvalidAmountError(f"{field_name} must be a number", value)

    if not result.is_finite():
        raise InvalidAmountError(f"{field_name} must be a finite number", value)
    if _digit_span(result) > MAX_AMOUNT_DIGITS:
        raise InvalidAmountError(
            f"{field_name} cannot have more than {MAX_AMOUNT_DIGITS} digits", value
        )
    return result


def require_positive(value: Any, field_name: str = "amount") -> Decimal:
    """Convert and check that the amount is strictly greater than zero"""
    amount = to_decimal(value, field_name)
    if amount <= ZERO:
        raise InvalidAmountError(f"{field_name} must be a positive number greater than zero.", value)
    return amount


def require_non_negative(value: Any, field_name: str = "amount") -> Decimal:
    """Convert and check that the amount is zero or more"""
    amount = to_decimal(value, field_name)
    if amount < ZERO:
        raise InvalidAmountError(f"{field_name} cannot be negative.", value)
    return amount


def exact_add(a: Decimal, b: Decimal) -> Decimal:
    """
    Sum of two Decimals without rounding.

    Raises:
        InvalidAmountError: If the sum cannot be represented exactly
    """
    with localcontext() as ctx:
        # Leading digit of the larger operand, one carry digit, down to the
        # finer exponent
        ctx.prec = (max(a.adjusted(), b.adjusted(), 0)
                    - min(a.as_tuple().exponent, b.as_tuple().exponent, 0) + 2)
        ctx.traps[Inexact] = True
        ctx.traps[Rounded] = True
        try:
            return a + b
        except (Inexact, Rounded):
            raise InvalidAmountError(f"{a} + {b} cannot be computed exactly", b)


def exact_subtract(a: Decimal, b: Decimal) -> Decimal:
    """Difference of two Decimals without rounding"""
    return exact_add(a, b.copy_negate())
