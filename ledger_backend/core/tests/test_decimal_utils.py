from decimal import Decimal

from django.test import SimpleTestCase

from core.decimal_utils import (
    fmt_money,
    money,
    parse_amount,
    quantity,
    sum_decimals,
    to_decimal,
    unit_cost,
)
from core.exceptions import LedgerValidationError


class DecimalUtilsTests(SimpleTestCase):
    """
    GUARANTEES:
    - ROUND_HALF_UP at 2 dp (money) and 4 dp (quantity, unit cost)
    - floats, booleans and non-finite values are rejected
    - allocation amounts accept at most 2 decimals and must be > 0
    """

    # --------------------------------------------------
    # Rounding
    # --------------------------------------------------

    def test_money_rounds_half_up(self):
        self.assertEqual(money("2.005"), Decimal("2.01"))
        self.assertEqual(money("2.004"), Decimal("2.00"))
        self.assertEqual(money("-2.005"), Decimal("-2.01"))

    def test_quantity_and_unit_cost_use_four_places(self):
        self.assertEqual(quantity("1.00005"), Decimal("1.0001"))
        self.assertEqual(unit_cost(Decimal("120") / Decimal("20")), Decimal("6.0000"))
        self.assertEqual(unit_cost(Decimal("10") / Decimal("3")), Decimal("3.3333"))

    def test_none_rounds_to_zero(self):
        self.assertEqual(money(None), Decimal("0.00"))
        self.assertEqual(quantity(None), Decimal("0.0000"))

    # --------------------------------------------------
    # Input validation
    # --------------------------------------------------

    def test_to_decimal_rejects_float(self):
        with self.assertRaises(LedgerValidationError):
            to_decimal(0.1)

    def test_to_decimal_rejects_bool_blank_and_garbage(self):
        for bad in (True, None, "", "abc", "NaN", "Infinity"):
            with self.subTest(value=bad):
                with self.assertRaises(LedgerValidationError):
                    to_decimal(bad)

    def test_to_decimal_accepts_int_str_decimal(self):
        self.assertEqual(to_decimal(3), Decimal("3"))
        self.assertEqual(to_decimal(" 1.50 "), Decimal("1.50"))
        self.assertEqual(to_decimal(Decimal("7.1")), Decimal("7.1"))

    def test_parse_amount_format(self):
        self.assertEqual(parse_amount("500"), Decimal("500.00"))
        self.assertEqual(parse_amount("220.1"), Decimal("220.10"))
        self.assertEqual(parse_amount(Decimal("500.00")), Decimal("500.00"))

        for bad in ("0", "0.00", "-1", "1.234", "1,50", "abc", 1.5):
            with self.subTest(value=bad):
                with self.assertRaises(LedgerValidationError):
                    parse_amount(bad)

    def test_parse_amount_error_names_field(self):
        with self.assertRaises(LedgerValidationError) as cm:
            parse_amount("x", field_name="amount")
        self.assertEqual(cm.exception.details["field"], "amount")

    # --------------------------------------------------
    # Aggregation / formatting
    # --------------------------------------------------

    def test_sum_is_exact(self):
        values = ["0.1"] * 10
        self.assertEqual(sum_decimals(values), Decimal("1.0"))

    def test_fmt_money_is_string_with_two_places(self):
        self.assertEqual(fmt_money(Decimal("5")), "5.00")
