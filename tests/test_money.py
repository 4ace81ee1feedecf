from decimal import Decimal

from src.utils.money import to_money, to_float


def test_missing_aggregate_is_zero():
    assert to_money(None) == Decimal("0.00")


def test_float_noise_is_rounded_to_cents():
    assert to_money(0.1 + 0.2) == Decimal("0.30")


def test_half_cent_rounds_up():
    assert to_money(Decimal("2.005")) == Decimal("2.01")


def test_to_float_keeps_two_decimals():
    assert to_float(Decimal("1234567.89")) == 1234567.89
    assert to_float(None) == 0.0
