"""市場データ集約サービス"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from ..adapters.futures_adapter import SYNTHETIC_NOTICE, FuturesAdapter
from ..adapters.usda_market_news import (
    AuctionReportAdapter,
    CashPriceAdapter,
    FiveAreaWeeklyAdapter,
    NebraskaDirectSlaughterAdapter,
    PublicTextReportAdapter,
)
from ..adapters.usda_slaughter import LmprSlaughterAdapter, NassSlaughterAdapter
from ..adapters.market_feed_adapter import MarketFeedAdapter
from ..domain.models import CashPriceReport, FuturesData, TextReportRow
from ..domain.slugs import market_name, region_name, to_slug
from ..infrastructure.demo_data import DemoDataProvider
from ..infrastructure.settings import FeedSettings
from ..infrastructure.telemetry import FeedTelemetry

FALLBACK_STATUS = "Using demo data - live feed unavailable"
DEMO_SOURCE = "demo"

# (ソース名, 取得関数)
ChainMember = Tuple[str, Callable[[], Awaitable[Any]]]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class FeedResult(BaseModel):
    """
    ドメインごとの集約結果

    Attributes:
        data: 正規化済みデータ (ライブまたはデモ)
        error: ライブデータの場合は None、デモデータの場合は状態メッセージ
        source: データを返したソース名 (デモの場合は "demo")
        using_fallback: デモデータを使用したか
        notes: 利用者に表示すべき注記 (推定値の注意書きなど)
        last_updated: 集約時刻 (ISO-8601 UTC)
    """
    data: Any = None
    error: Optional[str] = None
    source: str = DEMO_SOURCE
    using_fallback: bool = False
    notes: List[str] = Field(default_factory=list)
    last_updated: str = Field(default_factory=_now_iso)


class MarketSnapshot(BaseModel):
    """全ドメインの集約結果"""
    auctions: FeedResult
    cash_prices: FeedResult
    slaughter: FeedResult
    futures: FeedResult


def has_data(result: Any) -> bool:
    """
    アダプターの結果が空でないか判定

    None・空リスト・価格のない現物レポート・両商品とも空の先物データは空とみなします。
    """
    if result is None:
        return False
    if isinstance(result, CashPriceReport):
        return bool(result.prices)
    if isinstance(result, FuturesData):
        return bool(result.live_cattle or result.feeder_cattle)
    if isinstance(result, (list, tuple)):
        return len(result) > 0
    return True


def _count(result: Any) -> int:
    if isinstance(result, CashPriceReport):
        return len(result.prices)
    if isinstance(result, (list, tuple)):
        return len(result)
    return 1


class FallbackChain:
    """
    優先順フォールバックチェーン

    ソースを優先順に 1 つずつ呼び出し、最初に空でない結果を返したものを採用します。
    全ソースが空の場合はデモデータを状態メッセージ付きで返します。

    TRY_PRIMARY → TRY_SECONDARY → ... → USE_FALLBACK_DATA
    同一リクエスト内で同じソースを再試行しません。
    """

    def __init__(
        self,
        domain: str,
        sources: Sequence[ChainMember],
        fallback: Callable[[], Any],
        telemetry: Optional[FeedTelemetry] = None,
    ):
        """
        Args:
            domain: ドメイン名 (ログ用)
            sources: (ソース名, 取得関数) の優先順リスト
            fallback: デモデータを返す同期関数 (常に成功する)
            telemetry: 観測フック
        """
        self.domain = domain
        self.sources = list(sources)
        self.fallback = fallback
        self.telemetry = telemetry or FeedTelemetry()
        self.logger = logging.getLogger(__name__)

    async def run(self) -> FeedResult:
        """
        チェーンを実行

        Returns:
            FeedResult: ライブデータ (error=None) またはデモデータ (error=FALLBACK_STATUS)

        Invariants: 例外を送出しない
        """
        for name, fetch in self.sources:
            try:
                result = await fetch()
            except Exception as e:
                # アダプターは例外を送出しない契約だが、漏れた場合も空として扱う
                self.logger.error(f"{self.domain}: {name} raised {type(e).__name__}: {e}", exc_info=True)
                self.telemetry.adapter_failed(name, str(e), domain=self.domain)
                continue

            if has_data(result):
                self.telemetry.live_data_returned(self.domain, name, _count(result))
                return FeedResult(data=result, source=name)

        self.telemetry.fallback_triggered(self.domain, FALLBACK_STATUS)
        return FeedResult(
            data=self.fallback(),
            error=FALLBACK_STATUS,
            source=DEMO_SOURCE,
            using_fallback=True,
        )


class MarketDataAggregator:
    """
    市場データ集約のオーケストレーション

    Responsibilities:
    - ドメインごとのフォールバックチェーンの構築と実行
    - オークションの市場別ファンアウト、ドメイン横断の並列取得
    - デモデータへの最終フォールバック

    どの操作も例外を送出せず、最悪の場合はラベル付きのデモデータを返します。
    """

    def __init__(
        self,
        settings: Optional[FeedSettings] = None,
        demo_provider: Optional[DemoDataProvider] = None,
        telemetry: Optional[FeedTelemetry] = None,
        auction_adapter: Optional[AuctionReportAdapter] = None,
        cash_adapters: Optional[Sequence[CashPriceAdapter]] = None,
        slaughter_adapters: Optional[Sequence[MarketFeedAdapter]] = None,
        futures_adapters: Optional[Sequence[FuturesAdapter]] = None,
        text_adapter: Optional[PublicTextReportAdapter] = None,
    ):
        """
        MarketDataAggregator を初期化

        アダプターを省略した場合は settings と telemetry から既定の構成を組み立てます。

        Args:
            settings: 接続設定
            demo_provider: デモデータプロバイダー
            telemetry: 観測フック (全アダプターで共有)
            auction_adapter: オークションアダプター
            cash_adapters: 現物価格アダプター (優先順)
            slaughter_adapters: と畜統計アダプター (優先順)
            futures_adapters: 先物アダプター (LE, GF の順)
            text_adapter: テキストレポートアダプター
        """
        self.settings = settings or FeedSettings()
        self.telemetry = telemetry or FeedTelemetry()
        self.demo = demo_provider or DemoDataProvider()
        self.logger = logging.getLogger(__name__)

        self.auction_adapter = auction_adapter or AuctionReportAdapter(self.settings, self.telemetry)
        self.cash_adapters = list(cash_adapters) if cash_adapters is not None else [
            NebraskaDirectSlaughterAdapter(self.settings, self.telemetry),
            FiveAreaWeeklyAdapter(self.settings, self.telemetry),
        ]
        self.slaughter_adapters = list(slaughter_adapters) if slaughter_adapters is not None else [
            LmprSlaughterAdapter(self.settings, self.telemetry),
            NassSlaughterAdapter(self.settings, agg_level="STATE", state_name="NEBRASKA", telemetry=self.telemetry),
            NassSlaughterAdapter(self.settings, agg_level="NATIONAL", telemetry=self.telemetry),
        ]
        if futures_adapters is not None:
            self.live_cattle_adapter, self.feeder_cattle_adapter = futures_adapters
        else:
            self.live_cattle_adapter = FuturesAdapter(self.settings, product="LE", telemetry=self.telemetry)
            self.feeder_cattle_adapter = FuturesAdapter(self.settings, product="GF", telemetry=self.telemetry)
        self.text_adapter = text_adapter or PublicTextReportAdapter(self.settings, self.telemetry)

    def _chain(self, domain: str, sources: Sequence[ChainMember], fallback: Callable[[], Any]) -> FallbackChain:
        return FallbackChain(domain, sources, fallback, self.telemetry)

    async def auctions(self, slugs: Optional[Sequence[str]] = None) -> FeedResult:
        """
        セールバーン別オークションレポートを取得

        Args:
            slugs: セールバーン slug 一覧。None の場合はカタログ全体

        Returns:
            FeedResult: data は List[AuctionReport]
        """
        chain = self._chain(
            "auctions",
            [(self.auction_adapter.source_name, lambda: self.auction_adapter.fetch(slugs))],
            self.demo.auctions,
        )
        return await chain.run()

    async def auction_report_for_market(self, market_slug: str) -> FeedResult:
        """
        1 市場のオークションレポートを取得

        カタログ全体を取得し、市場名の slug が一致するレポートを選びます。

        Args:
            market_slug: 市場 slug (例: "ogallala-livestock-auction")

        Returns:
            FeedResult: data は AuctionReport
        """
        reports = await self.auction_adapter.fetch()
        for report in reports:
            if to_slug(report.market_name) == market_slug:
                self.telemetry.live_data_returned("auction_report", self.auction_adapter.source_name, len(report.sales))
                return FeedResult(data=report, source=self.auction_adapter.source_name)

        self.telemetry.fallback_triggered("auction_report", FALLBACK_STATUS)
        return FeedResult(
            data=self.demo.auction_for_market(market_name(market_slug)),
            error=FALLBACK_STATUS,
            using_fallback=True,
        )

    async def cash_prices(self) -> FeedResult:
        """
        現物価格を取得 (Nebraska 直接取引 → 5-Area の順)

        Returns:
            FeedResult: data は CashPriceReport
        """
        chain = self._chain(
            "cash_prices",
            [(adapter.source_name, adapter.fetch) for adapter in self.cash_adapters],
            self.demo.cash_prices,
        )
        return await chain.run()

    async def cash_prices_for_region(self, region_slug: str) -> FeedResult:
        """
        地域で絞り込んだ現物価格を取得

        全現物アダプターを並列に呼び出し、地域名が一致する価格を統合します (大文字小文字は区別しない)。

        Args:
            region_slug: 地域 slug (例: "nebraska", "5-area")

        Returns:
            FeedResult: data は CashPriceReport
        """
        region = region_name(region_slug)
        results = await asyncio.gather(
            *(adapter.fetch() for adapter in self.cash_adapters),
            return_exceptions=True,
        )

        prices = [
            price
            for result in results
            if isinstance(result, CashPriceReport)
            for price in result.prices
            if price.region.lower() == region.lower()
        ]
        if prices:
            self.telemetry.live_data_returned("cash_prices_region", "usda_mars_cash", len(prices))
            return FeedResult(
                data=CashPriceReport(report_date=prices[0].report_date, prices=prices),
                source="usda_mars_cash",
            )

        self.telemetry.fallback_triggered("cash_prices_region", FALLBACK_STATUS)
        return FeedResult(
            data=self.demo.cash_prices_for_region(region),
            error=FALLBACK_STATUS,
            using_fallback=True,
        )

    async def slaughter(self) -> FeedResult:
        """
        週次と畜頭数を取得 (LMPR → NASS 州 → NASS 全国の順)

        Returns:
            FeedResult: data は List[SlaughterWeek]
        """
        chain = self._chain(
            "slaughter",
            [(adapter.source_name, adapter.fetch) for adapter in self.slaughter_adapters],
            self.demo.slaughter,
        )
        return await chain.run()

    async def futures(self) -> FeedResult:
        """
        生牛・フィーダー牛の先物相場を取得

        商品ごとに独立したチェーンを並列に実行します。
        どちらかがデモデータになった場合は error を設定し、
        推定限月が含まれる場合は notes に注意書きを追加します。

        Returns:
            FeedResult: data は FuturesData
        """
        live_chain = self._chain(
            "futures_live_cattle",
            [(self.live_cattle_adapter.source_name, self.live_cattle_adapter.fetch)],
            self.demo.live_cattle_futures,
        )
        feeder_chain = self._chain(
            "futures_feeder_cattle",
            [(self.feeder_cattle_adapter.source_name, self.feeder_cattle_adapter.fetch)],
            self.demo.feeder_cattle_futures,
        )
        live, feeder = await asyncio.gather(live_chain.run(), feeder_chain.run())

        data = FuturesData(
            live_cattle=live.data,
            feeder_cattle=feeder.data,
            last_updated=_now_iso(),
        )

        notes = []
        if any(contract.synthetic for contract in data.live_cattle + data.feeder_cattle):
            notes.append(SYNTHETIC_NOTICE)

        using_fallback = live.using_fallback or feeder.using_fallback
        if live.using_fallback and feeder.using_fallback:
            source = DEMO_SOURCE
        else:
            source = ",".join(result.source for result in (live, feeder))

        return FeedResult(
            data=data,
            error=FALLBACK_STATUS if using_fallback else None,
            source=source,
            using_fallback=using_fallback,
            notes=notes,
            last_updated=data.last_updated,
        )

    async def text_report(self, region_slug: str = "nebraska") -> List[TextReportRow]:
        """
        公開テキストレポートの解析結果を取得

        参考値であり、JSON アダプターの結果の代わりには使用しません。

        Returns:
            List[TextReportRow]: 失敗時は空リスト
        """
        return await self.text_adapter.fetch(region_slug)

    async def snapshot(self, auction_slugs: Optional[Sequence[str]] = None) -> MarketSnapshot:
        """
        全ドメインを並列に集約

        1 ドメインの失敗は他のドメインを中断しません。

        Args:
            auction_slugs: オークション対象のセールバーン slug 一覧

        Returns:
            MarketSnapshot: 全ドメインの結果
        """
        domains: List[Tuple[str, Callable[[], Any]]] = [
            ("auctions", self.demo.auctions),
            ("cash_prices", self.demo.cash_prices),
            ("slaughter", self.demo.slaughter),
            ("futures", self._demo_futures),
        ]
        results = await asyncio.gather(
            self.auctions(auction_slugs),
            self.cash_prices(),
            self.slaughter(),
            self.futures(),
            return_exceptions=True,
        )

        settled = {}
        for (domain, fallback), result in zip(domains, results):
            if isinstance(result, BaseException):
                self.logger.error(f"{domain} aggregation raised {type(result).__name__}: {result}")
                self.telemetry.fallback_triggered(domain, FALLBACK_STATUS)
                result = FeedResult(data=fallback(), error=FALLBACK_STATUS, using_fallback=True)
            settled[domain] = result

        return MarketSnapshot(**settled)

    def _demo_futures(self) -> FuturesData:
        return FuturesData(
            live_cattle=self.demo.live_cattle_futures(),
            feeder_cattle=self.demo.feeder_cattle_futures(),
            last_updated=_now_iso(),
        )
