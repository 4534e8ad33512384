"""
Data models for the funding rate monitor.
"""

from .funding_rate import FundingRate
from .opportunity import (
    ArbitrageOpportunity,
    ArbitrageRecord,
    OpportunityFilter,
    RealtimeOpportunityFilter
)
from .config import MonitorConfig, create_config

__all__ = [
    "FundingRate",
    "ArbitrageOpportunity", "ArbitrageRecord",
    "OpportunityFilter", "RealtimeOpportunityFilter",
    "MonitorConfig", "create_config"
]
