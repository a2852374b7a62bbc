"""
Test suite for amount conversion and exact balance arithmetic
"""

import pytest
from decimal import Decimal, localcontext

from card_platform.amounts import (
    MAX_AMOUNT_DIGITS, exact_add, exact_subtract, require_non_negative,
    require_positive, to_decimal
)
from card_platform.errors import InvalidAmountError


class TestToDecimal:
    """Test amount conversion"""

    def test_accepted_types(self):
        assert to_decimal(Decimal('1.50')) == Decimal('1.50')
        assert to_decimal(3) == Decimal('3')
        assert to_decimal(0.1) == Decimal('0.1')
        assert to_decimal(" 25.00 ") == Decimal('25.00')

    def test_construction_keeps_every_digit(self):
        """More significant digits than the default context still convert exactly"""
        value = "1000000000000000000000000000.0000000000000000000000000001"

        assert str(to_decimal(value)) == value

    @pytest.mark.parametrize("value", [True, None, "abc", "", "NaN", "-Infinity", [1]])
    def test_rejected_values(self, value):
        with pytest.raises(InvalidAmountError):
            to_decimal(value)

    def test_width_limit(self):
        widest = "1" * (MAX_AMOUNT_DIGITS - 1) + ".1"

        assert to_decimal(widest) == Decimal(widest)
        with pytest.raises(InvalidAmountError, match="digits"):
            to_decimal("1" * MAX_AMOUNT_DIGITS + ".1")
        with pytest.raises(InvalidAmountError, match="digits"):
            to_decimal("1E-70")
        with pytest.raises(InvalidAmountError, match="digits"):
            to_decimal("1E+70")

    def test_require_positive(self):
        assert require_positive("0.01") == Decimal('0.01')
        with pytest.raises(InvalidAmountError):
            require_positive("0")

    def test_require_non_negative(self):
        assert require_non_negative("0") == Decimal('0')
        with pytest.raises(InvalidAmountError):
            require_non_negative("-0.01")


class TestExactArithmetic:
    """Balance arithmetic never rounds"""

    def test_tiny_amount_on_ordinary_balance(self):
        result = exact_add(Decimal('100.00'), Decimal('0.0000000000000000000000000001'))

        assert result == Decimal('100.0000000000000000000000000001')
        assert result > Decimal('100.00')

    def test_cents_on_large_balance(self):
        balance = Decimal('1000000000000000000000000000.01')

        assert exact_add(balance, Decimal('0.01')) == Decimal('1000000000000000000000000000.02')
        assert exact_subtract(balance, Decimal('0.01')) == Decimal('1000000000000000000000000000.00')

    def test_operands_far_apart(self):
        result = exact_add(Decimal('1E+30'), Decimal('1E-30'))

        assert str(result) == "1" + "0" * 30 + "." + "0" * 29 + "1"

    def test_independent_of_caller_context(self):
        with localcontext() as ctx:
            ctx.prec = 3
            assert exact_add(Decimal('100.00'), Decimal('0.01')) == Decimal('100.01')
            assert exact_subtract(Decimal('100.00'), Decimal('0.01')) == Decimal('99.99')

    def test_subtract_to_zero_and_below(self):
        assert exact_subtract(Decimal('25.00'), Decimal('25.00')) == Decimal('0')
        assert exact_subtract(Decimal('1.5'), Decimal('2.25')) == Decimal('-0.75')
