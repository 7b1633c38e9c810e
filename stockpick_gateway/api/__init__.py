"""
FastAPI route modules for the StockPick gateway.
"""

from stockpick_gateway.api.catalog_routes import router as catalog_router
from stockpick_gateway.api.market_routes import router as market_router

__all__ = ["catalog_router", "market_router"]
