"""
Persistence backends.
"""

from .base_storage import Storage, StorageError, FundingRateRecord
from .memory_storage import InMemoryStorage

__all__ = ["Storage", "StorageError", "FundingRateRecord", "InMemoryStorage"]
