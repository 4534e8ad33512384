"""
Tests for pairwise opportunity detection and confidence scoring.
"""

import math

import pytest

from funding_monitor.bot.opportunity_analyzer import (
    OpportunityAnalyzer,
    annualize_spread,
    calculate_confidence,
    resolve_price
)
from conftest import DETECTED_AT, make_rate


@pytest.fixture
def analyzer():
    return OpportunityAnalyzer(min_spread_percent=0.3, max_price_spread_percent=0.5)


class TestConfidence:

    def test_large_spread_close_prices_scores_full(self):
        assert calculate_confidence(1.2, 0.05) == 1.0

    def test_small_spread_penalized(self):
        assert calculate_confidence(0.4, 0.0) == pytest.approx(0.6)

    def test_medium_spread_penalized(self):
        assert calculate_confidence(0.59, 0.02) == pytest.approx(0.8)

    def test_price_divergence_penalties_multiply(self):
        assert calculate_confidence(0.4, 0.35) == pytest.approx(0.6 * 0.7)
        assert calculate_confidence(2.0, 0.2) == pytest.approx(0.9)

    @pytest.mark.parametrize("spread,price_spread", [
        (0.0, 0.0), (0.3, 0.5), (5.0, 100.0), (100.0, 0.0), (0.49, 0.31)
    ])
    def test_always_within_unit_interval(self, spread, price_spread):
        assert 0.0 <= calculate_confidence(spread, price_spread) <= 1.0


class TestPriceResolution:

    def test_mark_price_preferred(self):
        assert resolve_price(make_rate("binance", mark_price=100.0, index_price=99.0)) == 100.0

    def test_index_price_fallback(self):
        assert resolve_price(make_rate("bybit", mark_price=None, index_price=99.0)) == 99.0

    def test_missing_prices_resolve_to_zero(self):
        assert resolve_price(make_rate("okx", mark_price=None, index_price=None)) == 0.0

    def test_non_finite_price_treated_as_missing(self):
        assert resolve_price(make_rate("okx", mark_price=math.nan, index_price=10.0)) == 10.0


class TestAnalyze:

    def test_profitable_pair_detected(self, analyzer):
        rates = [
            make_rate("binance", funding_rate=0.0001, mark_price=50000.0),
            make_rate("okx", funding_rate=0.0060, mark_price=50010.0),
        ]

        opportunities = analyzer.analyze(rates, DETECTED_AT)

        assert len(opportunities) == 1
        opportunity = opportunities[0]
        assert opportunity.symbol == "BTCUSDT"
        assert opportunity.long_exchange == "binance"
        assert opportunity.short_exchange == "okx"
        assert opportunity.long_rate == pytest.approx(0.01)
        assert opportunity.short_rate == pytest.approx(0.60)
        assert opportunity.spread_rate == pytest.approx(0.59)
        assert opportunity.annualized_return == pytest.approx(646.05)
        assert opportunity.price_diff == pytest.approx(10.0)
        assert opportunity.price_spread_percent == pytest.approx(0.02)
        assert opportunity.confidence == pytest.approx(0.8)
        assert opportunity.detected_at == DETECTED_AT

    def test_leg_assignment_independent_of_input_order(self, analyzer):
        rates = [
            make_rate("okx", funding_rate=0.0060, mark_price=50010.0),
            make_rate("binance", funding_rate=0.0001, mark_price=50000.0),
        ]

        opportunity = analyzer.analyze(rates, DETECTED_AT)[0]

        assert opportunity.long_exchange == "binance"
        assert opportunity.short_exchange == "okx"

    def test_spread_below_threshold_rejected(self, analyzer):
        rates = [
            make_rate("binance", funding_rate=0.0001),
            make_rate("okx", funding_rate=0.0005),
        ]
        assert analyzer.analyze(rates, DETECTED_AT) == []

    def test_price_divergence_rejected(self, analyzer):
        rates = [
            make_rate("binance", funding_rate=0.0001, mark_price=50000.0),
            make_rate("okx", funding_rate=0.0060, mark_price=55000.0),
        ]
        assert analyzer.analyze(rates, DETECTED_AT) == []

    def test_equal_rates_never_produce_opportunity(self):
        permissive = OpportunityAnalyzer(min_spread_percent=0.0, max_price_spread_percent=100.0)
        rates = [make_rate("binance", funding_rate=0.001), make_rate("okx", funding_rate=0.001)]
        assert permissive.analyze(rates, DETECTED_AT) == []

    def test_missing_long_price_skips_price_guard(self, analyzer):
        rates = [
            make_rate("okx", funding_rate=-0.0040, mark_price=None),
            make_rate("binance", funding_rate=0.0010, mark_price=50000.0),
        ]

        opportunity = analyzer.analyze(rates, DETECTED_AT)[0]

        assert opportunity.long_exchange == "okx"
        assert opportunity.long_price == 0.0
        assert opportunity.price_spread_percent == 0.0
        assert opportunity.spread_rate == pytest.approx(0.5)

    def test_fewer_than_two_rates(self, analyzer):
        assert analyzer.analyze([], DETECTED_AT) == []
        assert analyzer.analyze([make_rate("binance")], DETECTED_AT) == []

    def test_unusable_rate_ignored(self, analyzer):
        rates = [
            make_rate("binance", funding_rate=math.nan),
            make_rate("okx", funding_rate=0.0060),
        ]
        assert analyzer.analyze(rates, DETECTED_AT) == []

    def test_three_exchanges_sorted_by_spread(self, analyzer):
        rates = [
            make_rate("binance", funding_rate=0.0001, mark_price=50000.0),
            make_rate("okx", funding_rate=0.0060, mark_price=50010.0),
            make_rate("bybit", funding_rate=0.0100, mark_price=50020.0),
        ]

        opportunities = analyzer.analyze(rates, DETECTED_AT)

        spreads = [opportunity.spread_rate for opportunity in opportunities]
        assert spreads == sorted(spreads, reverse=True)
        assert len(opportunities) == 3
        assert opportunities[0].pair_name == "binance_bybit"

    def test_emitted_opportunities_respect_bounds(self, analyzer):
        rates = [
            make_rate("binance", funding_rate=0.0001, mark_price=50000.0),
            make_rate("okx", funding_rate=0.0060, mark_price=50400.0),
            make_rate("bybit", funding_rate=-0.0030, mark_price=49950.0),
        ]

        for opportunity in analyzer.analyze(rates, DETECTED_AT):
            assert opportunity.long_rate <= opportunity.short_rate
            assert opportunity.spread_rate >= analyzer.min_spread_percent
            assert opportunity.price_spread_percent <= analyzer.max_price_spread_percent
            assert 0.0 <= opportunity.confidence <= 1.0


class TestAnalyzeGroups:

    def test_results_sorted_across_symbols(self, analyzer):
        grouped = {
            "ETHUSDT": [
                make_rate("binance", "ETHUSDT", 0.0001, mark_price=3000.0),
                make_rate("okx", "ETHUSDT", 0.0041, mark_price=3000.0),
            ],
            "BTCUSDT": [
                make_rate("binance", "BTCUSDT", 0.0001, mark_price=50000.0),
                make_rate("okx", "BTCUSDT", 0.0101, mark_price=50000.0),
            ],
            "SOLUSDT": [make_rate("binance", "SOLUSDT", 0.05, mark_price=100.0)],
        }

        opportunities = analyzer.analyze_groups(grouped, DETECTED_AT)

        assert [opportunity.symbol for opportunity in opportunities] == ["BTCUSDT", "ETHUSDT"]

    def test_annualization_uses_three_settlements_per_day(self):
        assert annualize_spread(1.0) == 1095.0
