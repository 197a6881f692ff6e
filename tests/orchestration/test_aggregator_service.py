"""MarketDataAggregator・FallbackChain のユニットテスト"""

from datetime import date
from unittest.mock import AsyncMock, Mock

import pytest

from src.livestock_markets.adapters.futures_adapter import SYNTHETIC_NOTICE
from src.livestock_markets.domain.models import (
    AuctionReport,
    CashPrice,
    CashPriceReport,
    FuturesContract,
    FuturesData,
    SlaughterWeek,
    TextReportRow,
)
from src.livestock_markets.infrastructure.demo_data import DemoDataProvider
from src.livestock_markets.orchestration.aggregator_service import (
    FALLBACK_STATUS,
    FallbackChain,
    FeedResult,
    MarketDataAggregator,
    MarketSnapshot,
    has_data,
)


def mock_adapter(source_name, result=None, side_effect=None):
    adapter = Mock()
    adapter.source_name = source_name
    adapter.fetch = AsyncMock(return_value=result, side_effect=side_effect)
    return adapter


def make_week(week_ending: str, count: int = 600000) -> SlaughterWeek:
    return SlaughterWeek.from_counts(week_ending, count, count, count, "National")


def make_price(region: str, avg: float = 186.25) -> CashPrice:
    return CashPrice(report_date="2025-01-10", region=region, weighted_avg_price=avg)


def make_contract(symbol: str, synthetic: bool = False) -> FuturesContract:
    return FuturesContract(
        symbol=symbol,
        name="Live Cattle",
        contract_month="February 2025",
        last_price=186.0,
        last_updated="2025-01-15T00:00:00+00:00",
        synthetic=synthetic,
    )


@pytest.fixture
def demo():
    return DemoDataProvider(today=lambda: date(2025, 1, 15))


@pytest.fixture
def telemetry():
    return Mock()


@pytest.fixture
def build(demo, telemetry):
    """アダプターをモックに差し替えた集約サービスを生成"""

    def _build(**adapters):
        defaults = {
            "auction_adapter": mock_adapter("usda_mars_auctions", []),
            "cash_adapters": [mock_adapter("usda_mars_lm_ct155"), mock_adapter("usda_mars_lm_ct169")],
            "slaughter_adapters": [mock_adapter("usda_lmpr_slaughter", [])],
            "futures_adapters": [mock_adapter("delayed_quotes_le", []), mock_adapter("delayed_quotes_gf", [])],
            "text_adapter": mock_adapter("usda_public_text", []),
        }
        defaults.update(adapters)
        return MarketDataAggregator(demo_provider=demo, telemetry=telemetry, **defaults)

    return _build


class TestHasData:
    """has_data のテスト"""

    @pytest.mark.parametrize(
        "result,expected",
        [
            (None, False),
            ([], False),
            ([make_week("2025-01-11")], True),
            (CashPriceReport(report_date="2025-01-10", prices=[]), False),
            (CashPriceReport(report_date="2025-01-10", prices=[make_price("Nebraska")]), True),
            (FuturesData(last_updated="now"), False),
            (FuturesData(live_cattle=[make_contract("LEG25")], last_updated="now"), True),
        ],
    )
    def test_has_data(self, result, expected):
        """空結果の判定"""
        assert has_data(result) is expected


class TestFallbackChain:
    """FallbackChain のテスト"""

    @pytest.mark.asyncio
    async def test_primary_wins(self, telemetry):
        """優先ソースが空でなければ後続は呼ばれないこと"""
        primary = AsyncMock(return_value=[1, 2])
        secondary = AsyncMock(return_value=[3])

        result = await FallbackChain("test", [("a", primary), ("b", secondary)], lambda: ["demo"], telemetry).run()

        assert result.data == [1, 2]
        assert result.source == "a"
        assert result.error is None
        secondary.assert_not_called()
        telemetry.live_data_returned.assert_called_once_with("test", "a", 2)

    @pytest.mark.asyncio
    async def test_total_failure(self, telemetry):
        """全ソースが空ならデモデータと状態メッセージ"""
        chain = FallbackChain(
            "test",
            [("a", AsyncMock(return_value=[])), ("b", AsyncMock(return_value=None))],
            lambda: ["demo"],
            telemetry,
        )

        result = await chain.run()

        assert result.data == ["demo"]
        assert result.error == FALLBACK_STATUS
        assert result.source == "demo"
        assert result.using_fallback is True
        telemetry.fallback_triggered.assert_called_once_with("test", FALLBACK_STATUS)

    @pytest.mark.asyncio
    async def test_raising_source_treated_as_empty(self, telemetry):
        """例外を送出したソースは空として扱い次へ進むこと"""
        chain = FallbackChain(
            "test",
            [("a", AsyncMock(side_effect=RuntimeError("boom"))), ("b", AsyncMock(return_value=[3]))],
            lambda: ["demo"],
            telemetry,
        )

        result = await chain.run()

        assert result.data == [3]
        assert result.source == "b"
        telemetry.adapter_failed.assert_called_once()


class TestSlaughter:
    """と畜統計チェーンのテスト"""

    @pytest.mark.asyncio
    async def test_secondary_returns_records(self, build):
        """優先ソースが空で次のソースが 3 件返した場合はその 3 件を返すこと"""
        weeks = [make_week("2025-01-11"), make_week("2025-01-04"), make_week("2024-12-28")]
        national = mock_adapter("usda_nass_slaughter_national", [make_week("2025-01-11")])
        aggregator = build(
            slaughter_adapters=[
                mock_adapter("usda_lmpr_slaughter", []),
                mock_adapter("usda_nass_slaughter_state", weeks),
                national,
            ]
        )

        result = await aggregator.slaughter()

        assert result.data == weeks
        assert result.error is None
        assert result.using_fallback is False
        assert result.source == "usda_nass_slaughter_state"
        national.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_total_failure_uses_demo(self, build, demo):
        """全ソースが空ならデモの固定データと状態メッセージ"""
        aggregator = build(
            slaughter_adapters=[
                mock_adapter("usda_lmpr_slaughter", []),
                mock_adapter("usda_nass_slaughter_state", []),
                mock_adapter("usda_nass_slaughter_national", []),
            ]
        )

        result = await aggregator.slaughter()

        assert result.data == demo.slaughter()
        assert result.error == FALLBACK_STATUS

    def test_default_chain_order(self):
        """既定のチェーンは LMPR → NASS 州 → NASS 全国"""
        aggregator = MarketDataAggregator()

        assert [adapter.source_name for adapter in aggregator.slaughter_adapters] == [
            "usda_lmpr_slaughter",
            "usda_nass_slaughter_state",
            "usda_nass_slaughter_national",
        ]
        assert [adapter.source_name for adapter in aggregator.cash_adapters] == [
            "usda_mars_lm_ct155",
            "usda_mars_lm_ct169",
        ]


class TestCashPrices:
    """現物価格のテスト"""

    @pytest.mark.asyncio
    async def test_secondary_report(self, build):
        """Nebraska が利用不可なら 5-Area を返すこと"""
        report = CashPriceReport(report_date="2025-01-10", prices=[make_price("5-Area")] * 3)
        aggregator = build(
            cash_adapters=[mock_adapter("usda_mars_lm_ct155", None), mock_adapter("usda_mars_lm_ct169", report)]
        )

        result = await aggregator.cash_prices()

        assert result.data == report
        assert len(result.data.prices) == 3
        assert result.error is None

    @pytest.mark.asyncio
    async def test_fallback(self, build, demo):
        """全ソースが利用不可ならデモデータ"""
        result = await build().cash_prices()

        assert result.data == demo.cash_prices()
        assert result.error == FALLBACK_STATUS

    @pytest.mark.asyncio
    async def test_region_filter(self, build):
        """両アダプターの結果を統合し地域で絞り込むこと"""
        nebraska = CashPriceReport(report_date="2025-01-10", prices=[make_price("Nebraska", 186.0)])
        five_area = CashPriceReport(
            report_date="2025-01-09",
            prices=[make_price("Kansas"), make_price("NEBRASKA", 187.0)],
        )
        aggregator = build(
            cash_adapters=[
                mock_adapter("usda_mars_lm_ct155", nebraska),
                mock_adapter("usda_mars_lm_ct169", five_area),
            ]
        )

        result = await aggregator.cash_prices_for_region("nebraska")

        assert [price.weighted_avg_price for price in result.data.prices] == [186.0, 187.0]
        assert result.error is None

    @pytest.mark.asyncio
    async def test_region_fallback(self, build, demo):
        """該当地域の価格がなければデモの地域別データ"""
        report = CashPriceReport(report_date="2025-01-10", prices=[make_price("Nebraska")])
        aggregator = build(
            cash_adapters=[
                mock_adapter("usda_mars_lm_ct155", report),
                mock_adapter("usda_mars_lm_ct169", side_effect=RuntimeError("boom")),
            ]
        )

        result = await aggregator.cash_prices_for_region("5-area")

        assert result.data == demo.cash_prices_for_region("5-Area")
        assert result.using_fallback is True


class TestAuctions:
    """オークションのテスト"""

    @pytest.fixture
    def report(self, demo):
        return demo.auction_for_market("Burwell Livestock Market")

    @pytest.mark.asyncio
    async def test_live_reports(self, build, report):
        """ライブのレポートをそのまま返すこと"""
        adapter = mock_adapter("usda_mars_auctions", [report])
        aggregator = build(auction_adapter=adapter)

        result = await aggregator.auctions(["1851"])

        assert result.data == [report]
        assert result.error is None
        adapter.fetch.assert_awaited_once_with(["1851"])

    @pytest.mark.asyncio
    async def test_fallback(self, build, demo):
        """全市場が失敗した場合はデモレポート"""
        result = await build().auctions(["1851"])

        assert result.data == demo.auctions()
        assert result.error == FALLBACK_STATUS

    @pytest.mark.asyncio
    async def test_single_market(self, build, report):
        """市場名の slug が一致するレポートを選ぶこと"""
        aggregator = build(auction_adapter=mock_adapter("usda_mars_auctions", [report]))

        result = await aggregator.auction_report_for_market("burwell-livestock-market")

        assert isinstance(result.data, AuctionReport)
        assert result.data.market_name == "Burwell Livestock Market"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_single_market_fallback(self, build):
        """一致するレポートがなければデモの市場別レポート"""
        result = await build().auction_report_for_market("gordon-livestock-auction")

        assert result.data.market_name == "Gordon Livestock Auction"
        assert result.data.report_title == "Gordon Livestock Auction - Weekly Livestock Auction"
        assert result.error == FALLBACK_STATUS


class TestFutures:
    """先物のテスト"""

    @pytest.mark.asyncio
    async def test_live_with_synthetic_notice(self, build):
        """推定限月が含まれる場合は注意書きが付くこと"""
        live = [make_contract("LEG25"), make_contract("LEJ25", synthetic=True)]
        feeder = [make_contract("GFF25")]
        aggregator = build(
            futures_adapters=[mock_adapter("delayed_quotes_le", live), mock_adapter("delayed_quotes_gf", feeder)]
        )

        result = await aggregator.futures()

        assert isinstance(result.data, FuturesData)
        assert result.data.live_cattle == live
        assert result.data.feeder_cattle == feeder
        assert result.error is None
        assert result.notes == [SYNTHETIC_NOTICE]

    @pytest.mark.asyncio
    async def test_one_product_falls_back(self, build, demo):
        """片方の商品だけデモになった場合も error が設定されること"""
        live = [make_contract("LEG25")]
        aggregator = build(
            futures_adapters=[mock_adapter("delayed_quotes_le", live), mock_adapter("delayed_quotes_gf", [])]
        )

        result = await aggregator.futures()

        assert result.data.live_cattle == live
        assert [c.symbol for c in result.data.feeder_cattle] == [c.symbol for c in demo.feeder_cattle_futures()]
        assert result.error == FALLBACK_STATUS
        assert result.using_fallback is True
        assert result.notes == []

    @pytest.mark.asyncio
    async def test_total_failure(self, build):
        """両商品とも失敗した場合はデモデータ"""
        result = await build().futures()

        assert result.source == "demo"
        assert len(result.data.live_cattle) == 4
        assert len(result.data.feeder_cattle) == 4


class TestTextReportAndSnapshot:
    """テキストレポート・全体集約のテスト"""

    @pytest.mark.asyncio
    async def test_text_report(self, build):
        """テキストアダプターに委譲すること"""
        rows = [TextReportRow(category="Steers", head_count=120, price=186.25)]
        adapter = mock_adapter("usda_public_text", rows)

        assert await build(text_adapter=adapter).text_report("colorado") == rows
        adapter.fetch.assert_awaited_once_with("colorado")

    @pytest.mark.asyncio
    async def test_snapshot(self, build):
        """全ドメインの結果をまとめて返すこと"""
        weeks = [make_week("2025-01-11")]
        aggregator = build(slaughter_adapters=[mock_adapter("usda_lmpr_slaughter", weeks)])

        snapshot = await aggregator.snapshot()

        assert isinstance(snapshot, MarketSnapshot)
        assert snapshot.slaughter.data == weeks
        assert snapshot.slaughter.error is None
        assert snapshot.auctions.error == FALLBACK_STATUS
        assert snapshot.cash_prices.using_fallback is True
        assert snapshot.futures.using_fallback is True

    @pytest.mark.asyncio
    async def test_snapshot_survives_domain_exception(self, build, demo):
        """1 ドメインが例外を送出しても他のドメインは返ること"""
        weeks = [make_week("2025-01-11")]
        aggregator = build(slaughter_adapters=[mock_adapter("usda_lmpr_slaughter", weeks)])
        aggregator.cash_prices = AsyncMock(side_effect=RuntimeError("boom"))

        snapshot = await aggregator.snapshot()

        assert snapshot.slaughter.data == weeks
        assert snapshot.cash_prices.data == demo.cash_prices()
        assert snapshot.cash_prices.error == FALLBACK_STATUS

    def test_feed_result_defaults(self):
        """FeedResult の既定値"""
        result = FeedResult(data=[])

        assert result.error is None
        assert result.using_fallback is False
        assert result.notes == []
        assert result.last_updated
