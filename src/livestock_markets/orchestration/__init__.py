"""
オーケストレーション層

ドメインごとのフォールバックチェーンと全体の集約を提供します。
"""

from .aggregator_service import (
    FALLBACK_STATUS,
    FallbackChain,
    FeedResult,
    MarketDataAggregator,
    MarketSnapshot,
    has_data,
)

__all__ = [
    "FALLBACK_STATUS",
    "FallbackChain",
    "FeedResult",
    "MarketDataAggregator",
    "MarketSnapshot",
    "has_data",
]
