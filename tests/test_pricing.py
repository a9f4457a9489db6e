import pytest

from bjorkmans_feed.core.errors import ParseMismatch
from bjorkmans_feed.core.pricing import (
    SWEDISH_MONTHLY,
    PriceFormat,
    format_price,
    parse_price_label,
    rejection_reason,
)


def test_parse_package_and_grouped_price():
    assert parse_price_label("Plus FWD Long Range 3 412 kr/mån") == ("Plus FWD Long Range", 3412)


def test_parse_accepts_nbsp_and_line_breaks():
    text = "  GT-Line AWD\n   Long Range 10\u00a0247 kr/mån  "
    assert parse_price_label(text) == ("GT-Line AWD Long Range", 10247)


def test_parse_digits_inside_package_name():
    assert parse_price_label("EV6 GT 4 999 kr/mån") == ("EV6 GT", 4999)


@pytest.mark.parametrize("text", ["Välj paket", "Plus 3 412 kr", "", "kr/mån"])
def test_parse_mismatch(text):
    with pytest.raises(ParseMismatch):
        parse_price_label(text)


def test_addon_accessory_is_rejected():
    package, price = parse_price_label("+ Dragkrok 299 kr/mån")
    assert package == "+ Dragkrok"
    assert rejection_reason(package, price) is not None
    assert rejection_reason(package, 2990) == "add-on"
    assert rejection_reason("Dragkrok avtagbar", 2990) == "accessory"
    assert rejection_reason("Vinterhjul 17 tum", 2990) == "accessory"
    assert rejection_reason("LED-ramp", 2990) == "accessory"


def test_pricing_note_is_rejected():
    package, price = parse_price_label("Privatleasing 12-36 mån 500 kr/mån")
    assert package == "Privatleasing 12-36 mån"
    assert rejection_reason(package, price) is not None
    assert rejection_reason(package, 5000) == "pricing-note"
    assert rejection_reason("Action 1500 mil/år", 5000) == "pricing-note"


def test_price_floor():
    package, price = parse_price_label("X 500 kr/mån")
    assert rejection_reason(package, price) == "below-floor"
    assert rejection_reason("X", 1000) == "below-floor"
    assert rejection_reason("X", 1001) is None


def test_format_price():
    assert format_price(3412) == "3 412"
    assert format_price(999) == "999"
    assert format_price(1234567) == "1 234 567"


def test_other_locale_is_a_new_format_not_new_code():
    nok = PriceFormat(
        locale="nb-NO",
        thousands_separator=".",
        unit_suffix="kr/mnd",
        currency="NOK",
        unit="kr",
    )
    assert parse_price_label("Active 4.590 kr/mnd", nok) == ("Active", 4590)
    with pytest.raises(ParseMismatch):
        parse_price_label("Active 4.590 kr/mnd", SWEDISH_MONTHLY)
