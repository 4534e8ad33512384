"""
Tests for symbol reconciliation across exchanges.
"""

from funding_monitor.bot.symbol_reconciler import group_by_symbol, intersect, symbols_of
from conftest import make_rate


BINANCE = [make_rate("binance", "BTCUSDT"), make_rate("binance", "ETHUSDT"), make_rate("binance", "SOLUSDT")]
OKX = [make_rate("okx", "ETHUSDT"), make_rate("okx", "BTCUSDT"), make_rate("okx", "XRPUSDT")]
BYBIT = [make_rate("bybit", "SOLUSDT"), make_rate("bybit", "BTCUSDT"), make_rate("bybit", "ETHUSDT")]


class TestIntersect:

    def test_common_symbols(self):
        assert intersect(BINANCE, OKX, BYBIT) == frozenset({"BTCUSDT", "ETHUSDT"})

    def test_order_independent(self):
        assert intersect(BINANCE, OKX, BYBIT) == intersect(BYBIT, BINANCE, OKX)
        assert intersect(BINANCE, OKX, BYBIT) == intersect(OKX, BYBIT, BINANCE)

    def test_one_empty_exchange_empties_result(self):
        assert intersect(BINANCE, [], BYBIT) == frozenset()

    def test_two_exchanges(self):
        assert intersect(BINANCE, BYBIT) == frozenset({"BTCUSDT", "ETHUSDT", "SOLUSDT"})

    def test_no_input(self):
        assert intersect() == frozenset()

    def test_single_symbol_present_everywhere(self):
        assert intersect(BINANCE, OKX, BYBIT, symbol="BTCUSDT") == frozenset({"BTCUSDT"})

    def test_single_symbol_missing_somewhere(self):
        assert intersect(BINANCE, OKX, BYBIT, symbol="SOLUSDT") == frozenset()

    def test_symbols_of(self):
        assert symbols_of(OKX) == frozenset({"ETHUSDT", "BTCUSDT", "XRPUSDT"})


class TestGroupBySymbol:

    def test_groups_keep_exchange_order(self):
        grouped = group_by_symbol([BINANCE, OKX, BYBIT], frozenset({"BTCUSDT", "ETHUSDT"}))

        assert set(grouped) == {"BTCUSDT", "ETHUSDT"}
        assert [rate.exchange for rate in grouped["BTCUSDT"]] == ["binance", "okx", "bybit"]
        assert [rate.exchange for rate in grouped["ETHUSDT"]] == ["binance", "okx", "bybit"]

    def test_symbols_in_first_seen_order(self):
        grouped = group_by_symbol([BINANCE, OKX, BYBIT], frozenset({"ETHUSDT", "BTCUSDT"}))
        assert list(grouped) == ["BTCUSDT", "ETHUSDT"]

    def test_empty_symbol_set(self):
        assert group_by_symbol([BINANCE, OKX], frozenset()) == {}
