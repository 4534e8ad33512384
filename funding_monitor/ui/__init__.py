"""
Console output.
"""

from .console import (
    build_opportunities_table,
    build_rates_table,
    build_stats_panel,
    print_opportunities
)

__all__ = [
    "build_opportunities_table", "build_rates_table",
    "build_stats_panel", "print_opportunities"
]
