import pytest

from aurora_gold.pricing.parser import is_valid_gold_price, parse_gold_price


@pytest.mark.parametrize("text, expected", [
    ("6850", 6850),
    ("The price today is 6850 INR", 6850),
    ("6,850", 6850),
    ("Approximately ₹7,120 per gram", 7120),
    ("₹6850", 6850),
    ("Rs. 6900 per gram", 6900),
    ("about 7010 rupees", 7010),
    ("In 2024 it was 6720", 6720),
])
def test_parse_gold_price(text, expected):
    assert parse_gold_price(text) == expected


@pytest.mark.parametrize("text", [
    "I recommend ₹99999 is great",
    "no numbers here",
    "",
    None,
    "123",
    "4,999",
])
def test_parse_gold_price_rejects(text):
    assert parse_gold_price(text) is None


def test_out_of_range_standalone_falls_through_to_later_candidate():
    # 2024 is a bare 4-digit number but outside the range; any-digits finds 6850
    assert parse_gold_price("Back in 2024 the rate was about 6850ish") == 6850


@pytest.mark.parametrize("price, valid", [
    (5499, False), (5500, True), (8000, True), (8001, False),
])
def test_validity_band(price, valid):
    assert is_valid_gold_price(price) is valid
