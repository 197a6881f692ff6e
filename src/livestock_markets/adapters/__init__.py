"""
アダプター層

上流ソースごとの取得・正規化ロジックを提供します。
"""

from .market_feed_adapter import MarketFeedAdapter, NetworkError, ParsingError
from .usda_market_news import (
    AuctionReportAdapter,
    FiveAreaWeeklyAdapter,
    NebraskaDirectSlaughterAdapter,
    PublicTextReportAdapter,
)
from .usda_slaughter import LmprSlaughterAdapter, NassSlaughterAdapter
from .futures_adapter import FuturesAdapter

__all__ = [
    "MarketFeedAdapter",
    "NetworkError",
    "ParsingError",
    "AuctionReportAdapter",
    "FiveAreaWeeklyAdapter",
    "NebraskaDirectSlaughterAdapter",
    "PublicTextReportAdapter",
    "LmprSlaughterAdapter",
    "NassSlaughterAdapter",
    "FuturesAdapter",
]
