from decimal import Decimal

import pytest

from storefront.utils.payments import round_half_up, safe_number


@pytest.mark.parametrize(
    "value,expected",
    [
        (10, Decimal("10")),
        ("49.99", Decimal("49.99")),
        (" 7 ", Decimal("7")),
        (2.5, Decimal("2.5")),
    ],
)
def test_safe_number_parses(value, expected):
    assert safe_number(value) == expected


@pytest.mark.parametrize("value", [None, True, False, "", "abc", "Infinity", "-inf", "NaN", [1], {"a": 1}])
def test_safe_number_rejects(value):
    assert safe_number(value) is None


def test_round_half_up():
    assert round_half_up(Decimal("0.5")) == 1
    assert round_half_up(Decimal("2.5")) == 3
    assert round_half_up(Decimal("2.49")) == 2
