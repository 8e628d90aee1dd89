import pytest

from mantle_context.models import PriceRecord
from mantle_context.services.formatter import plain_number, render_price


@pytest.mark.parametrize(
    "value,expected",
    [
        (5e-05, "0.00005"),
        (1.0, "1"),
        (0.8123, "0.8123"),
        (1234.5, "1234.5"),
        (1e21, "1000000000000000000000"),
        (0.0, "0"),
    ],
)
def test_plain_number(value, expected):
    assert plain_number(value) == expected


def test_render_price_small_value():
    price = PriceRecord(symbol="PEPE", price=5e-05, decimals=18, timestamp=1_700_000_000)
    assert render_price(price) == "Price of PEPE: 0.00005"
