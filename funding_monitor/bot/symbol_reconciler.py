"""
Symbol reconciliation across exchange catalogs.
"""

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from ..models.funding_rate import FundingRate


def symbols_of(rates: Iterable[FundingRate]) -> FrozenSet[str]:
    """Symbols reported in one exchange's rate list"""
    return frozenset(rate.symbol for rate in rates)


def intersect(*rate_lists: Sequence[FundingRate], symbol: Optional[str] = None) -> FrozenSet[str]:
    """
    Symbols listed on every exchange

    Args:
        *rate_lists: One rate list per exchange
        symbol: Only check whether this exact symbol is common to all

    Returns:
        The common symbols; empty as soon as one list is empty
    """
    if not rate_lists:
        return frozenset()

    symbol_sets = [symbols_of(rates) for rates in rate_lists]

    if symbol is not None:
        if all(symbol in symbols for symbols in symbol_sets):
            return frozenset([symbol])
        return frozenset()

    return frozenset.intersection(*symbol_sets)


def group_by_symbol(rate_lists: Sequence[Sequence[FundingRate]],
                    symbols: FrozenSet[str]) -> Dict[str, List[FundingRate]]:
    """
    Group rates by symbol, keeping only the given symbols

    Groups keep exchange fetch order, and symbols appear in the order they
    are first met, so results are deterministic for a given input.
    """
    grouped: Dict[str, List[FundingRate]] = {}
    for rates in rate_lists:
        for rate in rates:
            if rate.symbol in symbols:
                grouped.setdefault(rate.symbol, []).append(rate)
    return grouped
