"""
データモデル定義

このモジュールは livestock_markets のドメイン層のデータモデルを定義します:
- AuctionSale / AuctionReport: 家畜オークション (セールバーン) の週次レポート
- CashPrice / CashPriceReport: 直接取引 (現物) 価格レポート
- SlaughterWeek: 週次と畜頭数
- FuturesContract / FuturesData: 生牛・フィーダー牛の先物相場
- SaleBarn: セールバーンの静的カタログエントリ

全モデルはリクエストごとに生成される不変 (frozen) な値オブジェクトです。
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PriceType(str, Enum):
    """現物価格の取引種別"""
    NEGOTIATED = "negotiated"
    FORMULA = "formula"
    FORWARD = "forward"
    NEGOTIATED_GRID = "negotiated_grid"


class Trend(str, Enum):
    """前週比の相場方向"""
    HIGHER = "higher"
    LOWER = "lower"
    STEADY = "steady"


class ValueRange(BaseModel):
    """下限・上限の組 (価格レンジ、体重レンジ)"""

    low: float = Field(default=0.0, description="下限")
    high: float = Field(default=0.0, description="上限")

    class Config:
        frozen = True


class AuctionSale(BaseModel):
    """
    マーケットレポート内の 1 区分 (クラス・等級) の取引

    avg_price が 0 以下の行はプレースホルダーとみなし、生成前に除外されます。
    """

    report_date: str = Field(..., description="レポート日付")
    market_location: str = Field(..., description="市場所在地")
    head_count: int = Field(default=0, description="頭数")
    avg_price: float = Field(..., gt=0, description="平均価格 ($/cwt)")
    price_range: ValueRange = Field(default_factory=ValueRange, description="価格レンジ ($/cwt)")
    weight_range: ValueRange = Field(default_factory=ValueRange, description="体重レンジ (lb)")
    category: str = Field(default="Mixed", description="クラス (Steers, Heifers など)")
    grade: Optional[str] = Field(default=None, description="等級")
    trend: Optional[Trend] = Field(default=None, description="相場方向 (不明なら None)")

    @field_validator("head_count")
    @classmethod
    def validate_head_count(cls, v: int) -> int:
        """
        頭数の負値チェックバリデーション

        Raises:
            ValueError: 負の値が渡された場合
        """
        if v < 0:
            raise ValueError(f"頭数は負の値にできません: {v}")
        return v

    class Config:
        frozen = True


class AuctionReport(BaseModel):
    """1 市場の週次オークションレポート"""

    report_date: str = Field(..., description="レポート日付")
    report_title: str = Field(..., description="レポートタイトル")
    market_name: str = Field(..., description="市場名")
    total_head_count: int = Field(default=0, description="総頭数 (各取引の頭数合計)")
    sales: List[AuctionSale] = Field(default_factory=list, description="取引一覧")
    commentary: Optional[str] = Field(default=None, description="市況コメント")

    @classmethod
    def from_sales(
        cls,
        report_date: str,
        report_title: str,
        market_name: str,
        sales: List[AuctionSale],
        commentary: Optional[str] = None,
    ) -> "AuctionReport":
        """
        取引一覧から総頭数を集計してレポートを生成

        Args:
            report_date: レポート日付
            report_title: レポートタイトル
            market_name: 市場名
            sales: 取引一覧
            commentary: 市況コメント

        Returns:
            AuctionReport: total_head_count = sum(sale.head_count) のレポート
        """
        return cls(
            report_date=report_date,
            report_title=report_title,
            market_name=market_name,
            total_head_count=sum(sale.head_count for sale in sales),
            sales=sales,
            commentary=commentary,
        )

    class Config:
        frozen = True


class CashPrice(BaseModel):
    """取引種別 × 地域ごとの現物価格"""

    report_date: str = Field(..., description="レポート日付")
    price_type: PriceType = Field(default=PriceType.NEGOTIATED, description="取引種別")
    region: str = Field(..., description="地域名")
    head_count: int = Field(default=0, ge=0, description="頭数")
    weighted_avg_price: float = Field(..., gt=0, description="加重平均価格 ($/cwt)")
    price_range: ValueRange = Field(default_factory=ValueRange, description="価格レンジ")
    avg_weight: float = Field(default=0.0, description="平均体重 (lb)")
    dressed_basis: Optional[float] = Field(default=None, description="枝肉ベース価格")

    class Config:
        frozen = True


class CashPriceReport(BaseModel):
    """現物価格レポート"""

    report_date: str
    prices: List[CashPrice] = Field(default_factory=list)

    class Config:
        frozen = True


def percent_change(current: float, prior: float) -> float:
    """
    前期比変化率 (%)

    prior が 0 以下の場合は 0 を返します。
    """
    if prior <= 0:
        return 0.0
    return (current - prior) / prior * 100


class SlaughterWeek(BaseModel):
    """週次と畜頭数"""

    week_ending: str = Field(..., description="週末日付")
    cattle_slaughter: int = Field(default=0, ge=0, description="と畜頭数")
    previous_week: int = Field(default=0, ge=0, description="前週頭数")
    previous_year: int = Field(default=0, ge=0, description="前年同週頭数")
    percent_change_week: float = Field(default=0.0, description="前週比 (%)")
    percent_change_year: float = Field(default=0.0, description="前年比 (%)")
    region: str = Field(default="National", description="地域ラベル")

    @classmethod
    def from_counts(
        cls,
        week_ending: str,
        cattle_slaughter: int,
        previous_week: int,
        previous_year: int,
        region: str,
    ) -> "SlaughterWeek":
        """頭数から変化率を導出して生成"""
        return cls(
            week_ending=week_ending,
            cattle_slaughter=cattle_slaughter,
            previous_week=previous_week,
            previous_year=previous_year,
            percent_change_week=percent_change(cattle_slaughter, previous_week),
            percent_change_year=percent_change(cattle_slaughter, previous_year),
            region=region,
        )

    class Config:
        frozen = True


class FuturesContract(BaseModel):
    """
    先物限月の相場

    synthetic=True の限月は期近の相場から推定した参考値であり、
    実際の取引所データではありません。
    """

    symbol: str = Field(..., description="限月シンボル (例: LEG25)")
    name: str = Field(..., description="商品名")
    contract_month: str = Field(..., description="限月表記 (例: February 2025)")
    last_price: float = Field(default=0.0, description="現在値")
    change: float = Field(default=0.0, description="前日比")
    change_percent: float = Field(default=0.0, description="前日比 (%)")
    open: float = Field(default=0.0, description="始値")
    high: float = Field(default=0.0, description="高値")
    low: float = Field(default=0.0, description="安値")
    volume: int = Field(default=0, ge=0, description="出来高")
    open_interest: Optional[int] = Field(default=None, description="建玉")
    last_updated: str = Field(..., description="更新時刻 (ISO 8601)")
    synthetic: bool = Field(default=False, description="推定値フラグ")

    class Config:
        frozen = True


class FuturesData(BaseModel):
    """生牛 (LE)・フィーダー牛 (GF) の限月一覧"""

    live_cattle: List[FuturesContract] = Field(default_factory=list)
    feeder_cattle: List[FuturesContract] = Field(default_factory=list)
    last_updated: str

    class Config:
        frozen = True


class PriceHistoryPoint(BaseModel):
    """チャート用の日次終値"""

    date: str
    price: float

    class Config:
        frozen = True


class TextReportRow(BaseModel):
    """テキストレポートから抽出した 1 行"""

    category: str
    head_count: int
    price: float

    class Config:
        frozen = True


class SaleBarn(BaseModel):
    """
    セールバーン (家畜市場) カタログエントリ

    slug は USDA MARS API のレポート番号に対応します。
    """

    slug: str = Field(..., description="レポート識別子")
    name: str = Field(..., description="表示名")
    city: str = Field(..., description="市")
    state: str = Field(..., description="州")
    sale_day: str = Field(..., description="競り曜日")
    report_day: str = Field(..., description="レポート公表曜日")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "slug": "1850",
                "name": "Ogallala Livestock Auction",
                "city": "Ogallala",
                "state": "NE",
                "sale_day": "Thursday",
                "report_day": "Thursday",
            }
        }
