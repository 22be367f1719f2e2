"""
Link services: short code generation, the link store and statistics.
"""

from .link_store import LinkStore
from .stats_service import StatsService

__all__ = ["LinkStore", "StatsService"]
