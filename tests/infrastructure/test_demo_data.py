"""DemoDataProvider のユニットテスト"""

from datetime import date, datetime, timezone

import pytest

from src.livestock_markets.infrastructure.demo_data import DemoDataProvider


@pytest.fixture
def provider():
    # 2025-01-15 (水曜日)
    return DemoDataProvider(today=lambda: date(2025, 1, 15))


class TestDemoAuctions:
    """デモオークションのテスト"""

    def test_auctions(self, provider):
        """既知の全市場のレポートを返すこと"""
        reports = provider.auctions()

        assert [report.market_name for report in reports] == [
            "Ogallala Livestock Auction",
            "Valentine Livestock Auction",
        ]
        for report in reports:
            assert report.total_head_count == sum(sale.head_count for sale in report.sales)
            assert all(sale.avg_price > 0 for sale in report.sales)

    def test_report_date_is_last_friday(self, provider):
        """レポート日付は直近の金曜日"""
        assert provider.auctions()[0].report_date == "2025-01-10"

    def test_friday_is_own_report_date(self):
        """当日が金曜日なら当日"""
        provider = DemoDataProvider(today=lambda: date(2025, 1, 10))
        assert provider.auctions()[0].report_date == "2025-01-10"

    def test_unknown_market(self, provider):
        """未知の市場は既定市場の取引を指定名で返すこと"""
        report = provider.auction_for_market("Gordon Livestock Auction")

        assert report.market_name == "Gordon Livestock Auction"
        assert report.report_title == "Gordon Livestock Auction - Weekly Livestock Auction"
        assert len(report.sales) == 10


class TestDemoCashPrices:
    """デモ現物価格のテスト"""

    def test_cash_prices(self, provider):
        """全地域の価格が正の加重平均を持つこと"""
        report = provider.cash_prices()

        assert len(report.prices) == 7
        assert all(price.weighted_avg_price > 0 for price in report.prices)

    def test_region(self, provider):
        """地域別のデモ価格"""
        report = provider.cash_prices_for_region("5-Area")

        assert {price.region for price in report.prices} == {"5-Area"}
        assert len(report.prices) == 4

    def test_unknown_region_defaults_to_nebraska(self, provider):
        """未知の地域は Nebraska"""
        report = provider.cash_prices_for_region("Texas")

        assert {price.region for price in report.prices} == {"Nebraska"}


class TestDemoSlaughter:
    """デモと畜頭数のテスト"""

    def test_eight_weeks(self, provider):
        """直近 8 週を新しい順に返すこと"""
        weeks = provider.slaughter()

        assert len(weeks) == 8
        assert weeks[0].week_ending == "2025-01-11"
        assert weeks[1].week_ending == "2025-01-04"
        assert weeks[0].region == "Nebraska"
        assert weeks[-1].region == "National"

    def test_previous_week_chain(self, provider):
        """前週頭数が次の週の当週頭数と一致すること"""
        weeks = provider.slaughter()

        for newer, older in zip(weeks, weeks[1:]):
            assert newer.previous_week == older.cattle_slaughter


class TestDemoFutures:
    """デモ先物のテスト"""

    def test_products(self, provider):
        """両商品の限月を返し、推定値フラグはないこと"""
        live = provider.live_cattle_futures()
        feeder = provider.feeder_cattle_futures()

        assert [contract.symbol for contract in live] == ["LEG25", "LEJ25", "LEM25", "LEQ25"]
        assert all(contract.name == "Feeder Cattle" for contract in feeder)
        assert not any(contract.synthetic for contract in live + feeder)

    def test_timestamp_follows_injected_today(self, provider):
        """更新時刻は注入された基準日に従うこと"""
        contracts = provider.live_cattle_futures()

        assert {contract.last_updated for contract in contracts} == {"2025-01-15T00:00:00+00:00"}

    def test_timestamp_follows_injected_now(self):
        """now を注入した場合は更新時刻と基準日の両方に使われること"""
        now = datetime(2025, 1, 17, 14, 30, tzinfo=timezone.utc)
        provider = DemoDataProvider(now=lambda: now)

        assert provider.feeder_cattle_futures()[0].last_updated == now.isoformat()
        assert provider.cash_prices().report_date == "2025-01-17"
