"""
StockPick Gateway

A market-data aggregation gateway providing:
- A unified instrument catalog built from per-exchange ticker lists
- Paginated and sector-filtered catalog views with a derived sector index
- Pass-through access to an upstream quotes/charts/news/options provider
"""

__version__ = "1.0.0"
__author__ = "StockPick Development Team"

from stockpick_gateway.config import Settings, get_settings

__all__ = ["__version__", "Settings", "get_settings"]
