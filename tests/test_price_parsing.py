"""
tests/test_price_parsing.py

Amount normalization, extraction rules and the reference-price sanity filter.
"""

from __future__ import annotations

import pytest

from pricescan.scraping.parsing.prices import (
    PRICE_RULES,
    extract_prices,
    filter_by_reference_price,
    normalize_localized_amount,
    normalize_markup,
    sanity_window,
    unique_amounts,
)


class TestNormalizeLocalizedAmount:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1.234,56 €", 1234.56),
            ("19,99", 19.99),
            ("1,234.56", 1234.56),
            ("179.00", 179.0),
            ("EUR 49,9", 49.9),
            ("1 299,00", 1299.0),
        ],
    )
    def test_localized_formats(self, raw: str, expected: float) -> None:
        assert normalize_localized_amount(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["abc", "", None, "0", "0,00", "1.000.001,00", "€"])
    def test_rejected_values(self, raw) -> None:
        assert normalize_localized_amount(raw) is None

    def test_result_has_at_most_two_decimals(self) -> None:
        amount = normalize_localized_amount("10,12345")
        assert amount == 10.12

    def test_upper_bound_is_inclusive(self) -> None:
        assert normalize_localized_amount("1.000.000,00") == 1_000_000.0


class TestSanityFilter:
    def test_window_is_relative_to_reference(self) -> None:
        low, high = sanity_window(100.0)
        assert low == pytest.approx(35.0)
        assert high == pytest.approx(280.0)

    def test_no_window_without_positive_reference(self) -> None:
        assert sanity_window(None) is None
        assert sanity_window(0) is None
        assert sanity_window(-5.0) is None

    def test_filters_outside_window(self) -> None:
        assert filter_by_reference_price([50.0, 90.0, 300.0], 100.0) == [50.0, 90.0]

    def test_all_outside_window_returns_unfiltered(self) -> None:
        assert filter_by_reference_price([500.0, 600.0], 100.0) == [500.0, 600.0]

    def test_without_reference_everything_passes(self) -> None:
        assert filter_by_reference_price([1.0, 5000.0], None) == [1.0, 5000.0]

    def test_window_bounds_are_inclusive(self) -> None:
        assert filter_by_reference_price([35.0, 280.0, 280.01], 100.0) == [35.0, 280.0]


class TestExtractPrices:
    def test_json_ld_offer(self) -> None:
        markup = '<script type="application/ld+json">{"@type":"Offer","price":"179.00"}</script>'
        assert extract_prices(markup) == [179.0]

    def test_unquoted_json_price(self) -> None:
        assert extract_prices('{"price": 24.95, "currency": "EUR"}') == [24.95]

    def test_itemprop_both_attribute_orders(self) -> None:
        markup = (
            '<meta itemprop="price" content="49.90">'
            '<span content="59,90" itemprop="price"></span>'
        )
        assert sorted(extract_prices(markup)) == [49.9, 59.9]

    def test_data_price_attribute(self) -> None:
        assert extract_prices('<div data-price="89.00"></div>') == [89.0]

    def test_currency_text_before_and_after(self) -> None:
        markup = "<p>Nur 1.234,56 €</p><p>EUR 99,00</p>"
        assert sorted(extract_prices(markup)) == [99.0, 1234.56]

    def test_duplicates_across_rules_are_collapsed(self) -> None:
        markup = '{"price":"179.00"}<span>179,00 €</span><meta itemprop="price" content="179">'
        assert extract_prices(markup) == [179.0]

    def test_escaped_euro_and_nbsp(self) -> None:
        escaped_euro = "\\" + "u20ac"
        escaped_nbsp = "\\" + "u00a0"
        markup = f'"label":"29,99{escaped_nbsp}{escaped_euro}"'
        assert extract_prices(markup) == [29.99]

    def test_html_entities_for_currency(self) -> None:
        assert extract_prices("<b>19,99&nbsp;&euro;</b>") == [19.99]

    def test_reference_price_filters_outliers(self) -> None:
        markup = '<span>4,99 €</span><span>179,00 €</span>'
        assert extract_prices(markup, reference_price=169.99) == [179.0]

    def test_no_prices(self) -> None:
        assert extract_prices("<html><body>Kein Preis</body></html>") == []

    def test_rules_are_individually_usable(self) -> None:
        rule = next(item for item in PRICE_RULES if item.name == "data_price")
        assert rule.candidates('<i data-price="12,50"></i><i data-price="x"></i>') == ["12,50", "x"]


def test_normalize_markup_replaces_entity_forms() -> None:
    assert normalize_markup("5&#8364;") == "5€"
    assert normalize_markup("5&nbsp;x") == "5 x"


def test_unique_amounts_keeps_first_seen_order() -> None:
    assert unique_amounts([3.001, 1.0, 3.0, 2.0]) == [3.0, 1.0, 2.0]
