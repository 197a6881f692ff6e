"""
オークション比較ロジック

複数市場のレポートを 1 行 1 取引の比較行に平坦化し、
クラスを正規化して体重帯ごとに揃えます。
"""

from typing import List, Optional, Sequence, Tuple

from pydantic import BaseModel

from .models import AuctionReport, Trend
from .normalizer import MarketNormalizer

# (ラベル, 下限, 上限)
WEIGHT_BUCKETS: List[Tuple[str, float, float]] = [
    ("300-400", 300, 400),
    ("400-500", 400, 500),
    ("500-600", 500, 600),
    ("600-700", 600, 700),
    ("700-800", 700, 800),
    ("800-900", 800, 900),
    ("900+", 900, 9999),
]


class ComparisonRow(BaseModel):
    """市場横断比較の 1 行"""

    barn_name: str
    category: str
    grade: str
    head_count: int
    avg_price: float
    price_low: float
    price_high: float
    weight_low: float
    weight_high: float
    trend: Optional[Trend] = None
    report_date: str
    weight_bucket: str


def weight_bucket(low: float, high: float) -> str:
    """
    体重レンジの中央値が属する体重帯ラベル

    300 lb 未満は最初の体重帯に含めます。
    """
    mid = (low + high) / 2
    for label, bucket_min, bucket_max in WEIGHT_BUCKETS:
        if bucket_min <= mid < bucket_max:
            return label
    if mid >= WEIGHT_BUCKETS[-1][1]:
        return WEIGHT_BUCKETS[-1][0]
    return WEIGHT_BUCKETS[0][0]


def build_comparison_rows(
    reports: Sequence[AuctionReport],
    category: Optional[str] = None,
    bucket: Optional[str] = None,
) -> List[ComparisonRow]:
    """
    レポート一覧を比較行に平坦化

    Args:
        reports: オークションレポート一覧
        category: 正規化済みクラスで絞り込む場合に指定
        bucket: 体重帯ラベルで絞り込む場合に指定

    Returns:
        List[ComparisonRow]: レポート順・取引順の比較行
    """
    rows: List[ComparisonRow] = []

    for report in reports:
        for sale in report.sales:
            row = ComparisonRow(
                barn_name=report.market_name,
                category=MarketNormalizer.category(sale.category),
                grade=sale.grade or "-",
                head_count=sale.head_count,
                avg_price=sale.avg_price,
                price_low=sale.price_range.low,
                price_high=sale.price_range.high,
                weight_low=sale.weight_range.low,
                weight_high=sale.weight_range.high,
                trend=sale.trend,
                report_date=sale.report_date,
                weight_bucket=weight_bucket(sale.weight_range.low, sale.weight_range.high),
            )
            if category is not None and row.category != category:
                continue
            if bucket is not None and row.weight_bucket != bucket:
                continue
            rows.append(row)

    return rows
