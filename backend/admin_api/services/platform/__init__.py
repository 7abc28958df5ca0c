"""
Cross-tenant reads for the super-admin area.
"""

from .aggregator import PlatformAggregator, round_half_up
from .filters import filter_stats, filter_users

__all__ = [
    "PlatformAggregator",
    "round_half_up",
    "filter_stats",
    "filter_users",
]
