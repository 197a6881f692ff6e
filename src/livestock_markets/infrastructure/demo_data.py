"""
デモデータプロバイダー

全上流ソースが利用できない場合の最終フォールバックです。
同期的に常に成功し、ドメインごとに固定のレコードセットを返します。
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from ..domain.models import (
    AuctionReport,
    AuctionSale,
    CashPrice,
    CashPriceReport,
    FuturesContract,
    PriceType,
    SlaughterWeek,
    Trend,
    ValueRange,
)

# (頭数, 平均価格, 価格下限, 価格上限, 体重下限, 体重上限, クラス, 等級, 相場方向)
_SaleRow = Tuple[int, float, float, float, int, int, str, str, Trend]

_AUCTION_MARKETS: Dict[str, Dict] = {
    "Ogallala Livestock Auction": {
        "location": "Ogallala, NE",
        "commentary": "Good demand for quality feeder cattle. Market steady to stronger on light calves.",
        "sales": [
            (425, 285.50, 275.0, 295.0, 400, 500, "Steers", "M&L 1-2", Trend.HIGHER),
            (380, 268.25, 260.0, 278.0, 500, 600, "Steers", "M&L 1-2", Trend.STEADY),
            (315, 245.75, 238.0, 255.0, 600, 700, "Steers", "M&L 1-2", Trend.HIGHER),
            (290, 265.50, 255.0, 275.0, 400, 500, "Heifers", "M&L 1-2", Trend.STEADY),
            (245, 248.25, 240.0, 258.0, 500, 600, "Heifers", "M&L 1-2", Trend.LOWER),
            (210, 228.00, 220.0, 238.0, 600, 700, "Heifers", "M&L 1-2", Trend.STEADY),
            (185, 125.50, 115.0, 135.0, 1200, 1600, "Slaughter Cows", "Breakers 75-80%", Trend.STEADY),
            (120, 118.75, 108.0, 128.0, 1100, 1400, "Slaughter Cows", "Boners 80-85%", Trend.LOWER),
            (95, 102.50, 92.0, 112.0, 900, 1200, "Slaughter Cows", "Lean 85-90%", Trend.STEADY),
            (75, 148.25, 138.0, 158.0, 1600, 2200, "Slaughter Bulls", "YG 1-2", Trend.HIGHER),
        ],
    },
    "Valentine Livestock Auction": {
        "location": "Valentine, NE",
        "commentary": "Active trade with good buyer attendance. Feeder cattle in high demand.",
        "sales": [
            (385, 288.75, 280.0, 298.0, 400, 500, "Steers", "M&L 1-2", Trend.HIGHER),
            (340, 270.50, 262.0, 280.0, 500, 600, "Steers", "M&L 1-2", Trend.STEADY),
            (275, 248.25, 240.0, 258.0, 600, 700, "Steers", "M&L 1-2", Trend.HIGHER),
            (260, 268.00, 258.0, 278.0, 400, 500, "Heifers", "M&L 1-2", Trend.HIGHER),
            (230, 252.50, 244.0, 262.0, 500, 600, "Heifers", "M&L 1-2", Trend.STEADY),
            (195, 232.75, 224.0, 242.0, 600, 700, "Heifers", "M&L 1-2", Trend.HIGHER),
            (160, 128.50, 118.0, 138.0, 1200, 1600, "Slaughter Cows", "Breakers 75-80%", Trend.HIGHER),
            (110, 120.25, 110.0, 130.0, 1100, 1400, "Slaughter Cows", "Boners 80-85%", Trend.STEADY),
            (80, 150.00, 140.0, 160.0, 1600, 2200, "Slaughter Bulls", "YG 1-2", Trend.HIGHER),
        ],
    },
}

_DEFAULT_MARKET = "Ogallala Livestock Auction"

# (取引種別, 地域, 頭数, 加重平均, 価格下限, 価格上限, 平均体重, 枝肉ベース)
_CashRow = Tuple[PriceType, str, int, float, float, float, float, Optional[float]]

_CASH_PRICES: List[_CashRow] = [
    (PriceType.NEGOTIATED, "Nebraska", 42500, 186.25, 184.0, 188.5, 1425, 294.5),
    (PriceType.NEGOTIATED, "Colorado", 18200, 185.75, 183.5, 188.0, 1415, 293.75),
    (PriceType.NEGOTIATED, "Iowa-Minnesota", 15800, 186.5, 184.5, 188.5, 1430, 295.0),
    (PriceType.FORMULA, "Nebraska", 156000, 293.85, 288.0, 298.0, 1435, None),
    (PriceType.FORMULA, "Colorado", 78500, 292.5, 287.0, 297.0, 1428, None),
    (PriceType.FORWARD, "5-Area", 32000, 188.5, 185.0, 192.0, 1400, None),
    (PriceType.NEGOTIATED_GRID, "Nebraska", 28500, 295.25, 290.0, 300.5, 1440, None),
]

_REGIONAL_CASH_PRICES: Dict[str, List[_CashRow]] = {
    "Nebraska": [
        (PriceType.NEGOTIATED, "Nebraska", 42500, 186.25, 184.0, 188.5, 1425, 294.5),
        (PriceType.FORMULA, "Nebraska", 156000, 293.85, 288.0, 298.0, 1435, None),
        (PriceType.NEGOTIATED_GRID, "Nebraska", 28500, 295.25, 290.0, 300.5, 1440, None),
    ],
    "Colorado": [
        (PriceType.NEGOTIATED, "Colorado", 18200, 185.75, 183.5, 188.0, 1415, 293.75),
        (PriceType.FORMULA, "Colorado", 78500, 292.5, 287.0, 297.0, 1428, None),
    ],
    "Iowa-Minnesota": [
        (PriceType.NEGOTIATED, "Iowa-Minnesota", 15800, 186.5, 184.5, 188.5, 1430, 295.0),
        (PriceType.FORMULA, "Iowa-Minnesota", 62000, 294.15, 289.0, 299.0, 1432, None),
    ],
    "5-Area": [
        (PriceType.NEGOTIATED, "5-Area", 95000, 186.15, 183.5, 188.5, 1422, 294.25),
        (PriceType.FORMULA, "5-Area", 320000, 293.45, 287.0, 299.0, 1433, None),
        (PriceType.FORWARD, "5-Area", 32000, 188.5, 185.0, 192.0, 1400, None),
        (PriceType.NEGOTIATED_GRID, "5-Area", 58000, 295.85, 290.0, 302.0, 1438, None),
    ],
}

_SLAUGHTER_BASE = 625000
_SLAUGHTER_VARIANCE = [4200, -3100, 6800, -1500, 2500, -5200, 900, -2600, 3300]
_SLAUGHTER_YEAR_AGO_RATIO = [1.021, 0.987, 1.034, 1.012, 0.978, 1.025, 1.008, 0.992]

# (シンボル, 限月, 現在値, 前日比, 前日比%, 始値, 高値, 安値, 出来高)
_FuturesRow = Tuple[str, str, float, float, float, float, float, float, int]

_LIVE_CATTLE: List[_FuturesRow] = [
    ("LEG25", "February 2025", 185.575, 0.825, 0.45, 185.0, 186.25, 184.75, 24532),
    ("LEJ25", "April 2025", 186.825, 0.65, 0.35, 186.25, 187.5, 185.75, 18234),
    ("LEM25", "June 2025", 183.4, 0.45, 0.25, 183.0, 184.0, 182.5, 12456),
    ("LEQ25", "August 2025", 181.85, 0.35, 0.19, 181.5, 182.5, 181.0, 8234),
]

_FEEDER_CATTLE: List[_FuturesRow] = [
    ("GFF25", "January 2025", 252.75, 1.125, 0.45, 251.75, 253.5, 251.25, 8432),
    ("GFH25", "March 2025", 252.25, 0.875, 0.35, 251.5, 253.0, 251.0, 6234),
    ("GFJ25", "April 2025", 251.5, 0.65, 0.26, 251.0, 252.25, 250.5, 4567),
    ("GFK25", "May 2025", 250.75, 0.45, 0.18, 250.5, 251.5, 250.0, 3245),
]


class DemoDataProvider:
    """
    静的デモデータ

    レポート日付は直近の金曜日 (と畜は土曜日) を基準に生成します。
    """

    def __init__(
        self,
        today: Optional[Callable[[], date]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            today: 基準日を返す関数。None の場合は now の日付
            now: 現在時刻を返す関数 (先物の更新時刻に使用)。
                 None の場合は today の 0 時 (UTC)、today もなければ UTC の現在時刻
        """
        if now is None and today is not None:
            now = lambda: datetime.combine(today(), time.min, tzinfo=timezone.utc)
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._today = today or (lambda: self._now().date())

    def _last_friday(self) -> str:
        """直近の金曜日 (当日が金曜なら当日)"""
        today = self._today()
        return (today - timedelta(days=(today.weekday() + 3) % 7)).isoformat()

    def auctions(self) -> List[AuctionReport]:
        """全デモ市場のオークションレポート"""
        return [self.auction_for_market(name) for name in _AUCTION_MARKETS]

    def auction_for_market(self, market_name: str) -> AuctionReport:
        """
        指定市場のデモレポート

        未知の市場名の場合は既定市場の取引を、指定された市場名で返します。
        """
        market = _AUCTION_MARKETS.get(market_name) or _AUCTION_MARKETS[_DEFAULT_MARKET]
        report_date = self._last_friday()

        sales = [
            AuctionSale(
                report_date=report_date,
                market_location=market["location"],
                head_count=head,
                avg_price=avg,
                price_range=ValueRange(low=p_low, high=p_high),
                weight_range=ValueRange(low=w_low, high=w_high),
                category=category,
                grade=grade,
                trend=trend,
            )
            for head, avg, p_low, p_high, w_low, w_high, category, grade, trend in market["sales"]
        ]

        return AuctionReport.from_sales(
            report_date=report_date,
            report_title=f"{market_name} - Weekly Livestock Auction",
            market_name=market_name,
            sales=sales,
            commentary=market["commentary"],
        )

    def cash_prices(self) -> CashPriceReport:
        """全地域のデモ現物価格"""
        return self._cash_report(_CASH_PRICES)

    def cash_prices_for_region(self, region_name: str) -> CashPriceReport:
        """指定地域のデモ現物価格 (未知の地域は Nebraska)"""
        rows = _REGIONAL_CASH_PRICES.get(region_name) or _REGIONAL_CASH_PRICES["Nebraska"]
        return self._cash_report(rows)

    def _cash_report(self, rows: List[_CashRow]) -> CashPriceReport:
        report_date = self._last_friday()
        prices = [
            CashPrice(
                report_date=report_date,
                price_type=price_type,
                region=region,
                head_count=head,
                weighted_avg_price=avg,
                price_range=ValueRange(low=low, high=high),
                avg_weight=weight,
                dressed_basis=dressed,
            )
            for price_type, region, head, avg, low, high, weight, dressed in rows
        ]
        return CashPriceReport(report_date=report_date, prices=prices)

    def slaughter(self) -> List[SlaughterWeek]:
        """直近 8 週のデモと畜頭数 (前半 4 週は Nebraska、後半は National)"""
        today = self._today()
        last_saturday = today - timedelta(days=(today.weekday() - 5) % 7)

        counts = [
            _SLAUGHTER_BASE + variance - i * 5000
            for i, variance in enumerate(_SLAUGHTER_VARIANCE)
        ]

        weeks = []
        for i, ratio in enumerate(_SLAUGHTER_YEAR_AGO_RATIO):
            weeks.append(
                SlaughterWeek.from_counts(
                    week_ending=(last_saturday - timedelta(weeks=i)).isoformat(),
                    cattle_slaughter=counts[i],
                    previous_week=counts[i + 1],
                    previous_year=round(counts[i] * ratio),
                    region="Nebraska" if i < 4 else "National",
                )
            )
        return weeks

    def live_cattle_futures(self) -> List[FuturesContract]:
        """生牛先物のデモ限月"""
        return self._futures("Live Cattle", _LIVE_CATTLE)

    def feeder_cattle_futures(self) -> List[FuturesContract]:
        """フィーダー牛先物のデモ限月"""
        return self._futures("Feeder Cattle", _FEEDER_CATTLE)

    def _futures(self, name: str, rows: List[_FuturesRow]) -> List[FuturesContract]:
        updated = self._now().isoformat()
        return [
            FuturesContract(
                symbol=symbol,
                name=name,
                contract_month=month,
                last_price=last,
                change=change,
                change_percent=change_pct,
                open=open_,
                high=high,
                low=low,
                volume=volume,
                last_updated=updated,
            )
            for symbol, month, last, change, change_pct, open_, high, low, volume in rows
        ]
