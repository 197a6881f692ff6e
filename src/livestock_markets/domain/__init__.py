"""
ドメイン層

データモデル・フィールド合体・カテゴリ正規化・テキストレポート解析を提供します。
"""

from .models import (
    AuctionReport,
    AuctionSale,
    CashPrice,
    CashPriceReport,
    FuturesContract,
    FuturesData,
    PriceHistoryPoint,
    PriceType,
    SaleBarn,
    SlaughterWeek,
    TextReportRow,
    Trend,
    ValueRange,
)
from .comparison import ComparisonRow, build_comparison_rows, weight_bucket
from .normalizer import MarketNormalizer
from .text_report import parse_text_report

__all__ = [
    "AuctionReport",
    "AuctionSale",
    "CashPrice",
    "CashPriceReport",
    "FuturesContract",
    "FuturesData",
    "PriceHistoryPoint",
    "PriceType",
    "SaleBarn",
    "SlaughterWeek",
    "TextReportRow",
    "Trend",
    "ValueRange",
    "ComparisonRow",
    "build_comparison_rows",
    "weight_bucket",
    "MarketNormalizer",
    "parse_text_report",
]
