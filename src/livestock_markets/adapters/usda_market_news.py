"""
USDA Market News (MARS API) アダプター

https://mymarketnews.ams.usda.gov/mymarketnews-api

主なレポート:
- LM_CT155: Nebraska Weekly Direct Slaughter Cattle
- LM_CT169: 5-Area Weekly Weighted Average Direct Slaughter Cattle
- 18xx: ネブラスカ州の各セールバーンのオークションレポート (sale_barns 参照)
"""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from pydantic import ValidationError

from .market_feed_adapter import MarketFeedAdapter
from ..domain.coalesce import (
    Record,
    coalesce_int,
    coalesce_number,
    coalesce_optional_number,
    coalesce_optional_str,
    coalesce_str,
    unwrap_records,
)
from ..domain.models import (
    AuctionReport,
    AuctionSale,
    CashPrice,
    CashPriceReport,
    SaleBarn,
    TextReportRow,
    ValueRange,
)
from ..domain.normalizer import MarketNormalizer
from ..domain.sale_barns import get_barns_by_slugs
from ..domain.slugs import report_slug_for_region
from ..domain.text_report import parse_text_report

# 論理フィールドごとの候補フィールド名 (先に書いたものが優先)
REPORT_DATE_FIELDS = ["report_date", "published_date"]
HEAD_COUNT_FIELDS = ["head_count", "total_head"]
PRICE_LOW_FIELDS = ["price_low", "low_price", "low"]
PRICE_HIGH_FIELDS = ["price_high", "high_price", "high"]

# 現物価格
PRICE_TYPE_FIELDS = ["price_type", "purchase_type"]
WEIGHTED_AVG_FIELDS = ["wtd_avg_price", "wtd_avg", "weighted_average"]
AVG_WEIGHT_FIELDS = ["avg_weight", "average_weight"]
DRESSED_BASIS_FIELDS = ["dressed_basis"]
REGION_FIELDS = ["region"]

# オークション
MARKET_LOCATION_FIELDS = ["market_location", "market"]
AVG_PRICE_FIELDS = ["avg_price", "wtd_avg_price", "wtd_avg", "weighted_average"]
WEIGHT_LOW_FIELDS = ["weight_low", "low_weight"]
WEIGHT_HIGH_FIELDS = ["weight_high", "high_weight"]
CATEGORY_FIELDS = ["class", "category"]
GRADE_FIELDS = ["grade", "quality_grade"]
TREND_FIELDS = ["price_trend", "trend"]
REPORT_TITLE_FIELDS = ["report_title"]
COMMENTARY_FIELDS = ["market_comments", "commentary"]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MarsReportAdapter(MarketFeedAdapter):
    """MARS API のレポートを取得するアダプター基底"""

    source_name = "usda_mars"

    def _fetch_report(self, report_slug: str) -> List[Record]:
        """
        レポートのレコード一覧を取得

        Raises:
            NetworkError: HTTP エラー発生時
            ParsingError: レスポンスが JSON でない時
        """
        url = f"{self.settings.mars_api_base}/reports/{report_slug}"
        payload = self._get_json(url, auth=self.mars_auth)
        return unwrap_records(payload)


class AuctionReportAdapter(MarsReportAdapter):
    """
    セールバーン別オークションレポートアダプター

    要求された市場ごとに 1 リクエストを並列に発行し、成功した市場のレポートを統合します。
    一部の市場の失敗は他の市場の結果に影響しません。
    """

    source_name = "usda_mars_auctions"

    # 1 レポートあたりの処理上限
    MAX_RECORDS = 50

    async def fetch(self, slugs: Optional[Sequence[str]] = None) -> List[AuctionReport]:
        """
        指定市場のオークションレポートを取得

        Args:
            slugs: セールバーン slug 一覧。None または空の場合はカタログ全体

        Returns:
            List[AuctionReport]: 取得できた市場のレポート (カタログ順)
        """
        barns = get_barns_by_slugs(slugs)
        results = await asyncio.gather(
            *(self.fetch_market(barn) for barn in barns),
            return_exceptions=True,
        )

        reports = [result for result in results if isinstance(result, AuctionReport)]
        if not reports:
            self.telemetry.adapter_empty(self.source_name, "no market returned data", markets=len(barns))
        return reports

    async def fetch_market(self, barn: SaleBarn) -> Optional[AuctionReport]:
        """1 市場のレポートを取得 (失敗時は None)"""
        return await self._run(
            lambda: self._collect_market(barn),
            None,
            source=f"{self.source_name}:{barn.slug}",
        )

    def _collect_market(self, barn: SaleBarn) -> Optional[AuctionReport]:
        records = self._fetch_report(barn.slug)[: self.MAX_RECORDS]
        if not records:
            return None

        sales = [sale for sale in (self._to_sale(record) for record in records) if sale]
        if not sales:
            return None

        first = records[0]
        return AuctionReport.from_sales(
            report_date=coalesce_str(first, REPORT_DATE_FIELDS, _now_iso()),
            report_title=coalesce_str(first, REPORT_TITLE_FIELDS, f"{barn.name} ({barn.slug})"),
            market_name=coalesce_str(first, MARKET_LOCATION_FIELDS, barn.name),
            sales=sales,
            commentary=coalesce_optional_str(first, COMMENTARY_FIELDS),
        )

    def _to_sale(self, record: Record) -> Optional[AuctionSale]:
        """
        レコードを AuctionSale に変換

        Returns:
            Optional[AuctionSale]: 平均価格が 0 以下、または検証失敗の場合は None
        """
        avg_price = coalesce_number(record, AVG_PRICE_FIELDS)
        if avg_price <= 0:
            return None

        try:
            return AuctionSale(
                report_date=coalesce_str(record, REPORT_DATE_FIELDS, _now_iso()),
                market_location=coalesce_str(record, MARKET_LOCATION_FIELDS, "Nebraska"),
                head_count=max(coalesce_int(record, HEAD_COUNT_FIELDS), 0),
                avg_price=avg_price,
                price_range=ValueRange(
                    low=coalesce_number(record, PRICE_LOW_FIELDS),
                    high=coalesce_number(record, PRICE_HIGH_FIELDS),
                ),
                weight_range=ValueRange(
                    low=coalesce_number(record, WEIGHT_LOW_FIELDS),
                    high=coalesce_number(record, WEIGHT_HIGH_FIELDS),
                ),
                category=coalesce_str(record, CATEGORY_FIELDS, "Mixed"),
                grade=coalesce_optional_str(record, GRADE_FIELDS),
                trend=MarketNormalizer.trend(coalesce_str(record, TREND_FIELDS)),
            )
        except ValidationError as e:
            self.logger.debug(f"Skipping invalid auction record: {e}")
            return None


class CashPriceAdapter(MarsReportAdapter):
    """
    現物価格レポートアダプター基底

    加重平均価格が 0 以下の行は除外します。
    """

    source_name = "usda_mars_cash"

    REPORT_SLUG = ""
    MAX_RECORDS = 20
    DEFAULT_REGION = ""
    # True の場合はレコードの region を優先
    USE_RECORD_REGION = False

    async def fetch(self) -> Optional[CashPriceReport]:
        """
        現物価格レポートを取得

        Returns:
            Optional[CashPriceReport]: 有効な価格がない・取得失敗の場合は None
        """
        return await self._run(self._collect, None)

    def _collect(self) -> Optional[CashPriceReport]:
        records = self._fetch_report(self.REPORT_SLUG)[: self.MAX_RECORDS]
        if not records:
            return None

        prices = [price for price in (self._to_price(record) for record in records) if price]
        if not prices:
            return None

        return CashPriceReport(
            report_date=coalesce_str(records[0], REPORT_DATE_FIELDS, _now_iso()),
            prices=prices,
        )

    def _to_price(self, record: Record) -> Optional[CashPrice]:
        """
        レコードを CashPrice に変換

        Returns:
            Optional[CashPrice]: 加重平均価格が 0 以下、または検証失敗の場合は None
        """
        weighted_avg = coalesce_number(record, WEIGHTED_AVG_FIELDS)
        if weighted_avg <= 0:
            return None

        region = self.DEFAULT_REGION
        if self.USE_RECORD_REGION:
            region = coalesce_str(record, REGION_FIELDS, self.DEFAULT_REGION)

        try:
            return CashPrice(
                report_date=coalesce_str(record, REPORT_DATE_FIELDS, _now_iso()),
                price_type=MarketNormalizer.price_type(coalesce_str(record, PRICE_TYPE_FIELDS)),
                region=region,
                head_count=max(coalesce_int(record, HEAD_COUNT_FIELDS), 0),
                weighted_avg_price=weighted_avg,
                price_range=ValueRange(
                    low=coalesce_number(record, PRICE_LOW_FIELDS),
                    high=coalesce_number(record, PRICE_HIGH_FIELDS),
                ),
                avg_weight=coalesce_number(record, AVG_WEIGHT_FIELDS),
                dressed_basis=coalesce_optional_number(record, DRESSED_BASIS_FIELDS),
            )
        except ValidationError as e:
            self.logger.debug(f"Skipping invalid cash price record: {e}")
            return None


class NebraskaDirectSlaughterAdapter(CashPriceAdapter):
    """Nebraska Weekly Direct Slaughter Cattle (LM_CT155)"""

    source_name = "usda_mars_lm_ct155"
    REPORT_SLUG = "lm_ct155"
    MAX_RECORDS = 20
    DEFAULT_REGION = "Nebraska"


class FiveAreaWeeklyAdapter(CashPriceAdapter):
    """5-Area Weekly Weighted Average Direct Slaughter Cattle (LM_CT169)"""

    source_name = "usda_mars_lm_ct169"
    REPORT_SLUG = "lm_ct169"
    MAX_RECORDS = 30
    DEFAULT_REGION = "5-Area"
    USE_RECORD_REGION = True


class PublicTextReportAdapter(MarketFeedAdapter):
    """
    公開テキストレポートアダプター

    JSON API が使えない場合の最終手段です。結果は参考値として扱います。
    """

    source_name = "usda_public_text"

    async def fetch(self, region_slug: str = "nebraska") -> List[TextReportRow]:
        """
        地域のテキストレポートを取得して解析

        Args:
            region_slug: 地域 slug (レポート番号の解決に使用)

        Returns:
            List[TextReportRow]: 解析結果 (失敗時は空リスト)
        """
        report_slug = report_slug_for_region(region_slug)
        url = f"{self.settings.text_report_base}/{report_slug}.txt"
        return await self._run(lambda: self._collect(url), [])

    def _collect(self, url: str) -> List[TextReportRow]:
        response = self._get(url, headers={"User-Agent": self.settings.user_agent})
        return parse_text_report(response.text)
