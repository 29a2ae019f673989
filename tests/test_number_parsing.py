"""
Price and stock text parsing tests.
"""

import pytest

from monitoring.errors import ParseError
from utils.number_parsing import convert_brl_to_float, parse_price, parse_quantity


@pytest.mark.parametrize("text, expected", [
    ("R$ 1.234,56", 1234.56),
    ("R$ 10,00", 10.0),
    ("R$\xa00,99", 0.99),
    ("  5,5 ", 5.5),
])
def test_parse_price(text, expected):
    assert parse_price(text) == expected


@pytest.mark.parametrize("text", ["", None, "consulte", "R$ -3,00"])
def test_parse_price_falls_back_to_zero(text):
    assert parse_price(text) == 0.0


def test_convert_brl_to_float_raises_on_garbage():
    with pytest.raises(ParseError):
        convert_brl_to_float("sem preço")


@pytest.mark.parametrize("text, expected", [
    ("Estoque: 3 unidades", 3),
    ("12", 12),
    ("Disponível: abc 4 7", 4),
])
def test_parse_quantity(text, expected):
    assert parse_quantity(text) == expected


@pytest.mark.parametrize("text", ["", None, "Esgotado", "Estoque: três"])
def test_parse_quantity_falls_back_to_zero(text):
    assert parse_quantity(text) == 0
