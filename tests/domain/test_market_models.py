"""ドメインモデルのユニットテスト"""

import pytest
from pydantic import ValidationError

from src.livestock_markets.domain.models import (
    AuctionReport,
    AuctionSale,
    CashPrice,
    FuturesContract,
    PriceType,
    SlaughterWeek,
    ValueRange,
    percent_change,
)


def make_sale(head_count: int = 100, avg_price: float = 250.0) -> AuctionSale:
    return AuctionSale(
        report_date="2025-01-10",
        market_location="Ogallala, NE",
        head_count=head_count,
        avg_price=avg_price,
        price_range=ValueRange(low=240.0, high=260.0),
        weight_range=ValueRange(low=500, high=600),
        category="Steers",
    )


class TestAuctionSale:
    """AuctionSale モデルのテスト"""

    def test_valid_sale(self):
        """有効なデータでインスタンスが作成されること"""
        sale = make_sale()

        assert sale.avg_price == 250.0
        assert sale.grade is None
        assert sale.trend is None

    @pytest.mark.parametrize("avg_price", [0, -1.5])
    def test_non_positive_price_rejected(self, avg_price):
        """平均価格 0 以下は ValidationError"""
        with pytest.raises(ValidationError):
            make_sale(avg_price=avg_price)

    def test_negative_head_count_rejected(self):
        """負の頭数は ValidationError"""
        with pytest.raises(ValidationError):
            make_sale(head_count=-1)

    def test_frozen(self):
        """生成後に変更できないこと"""
        sale = make_sale()
        with pytest.raises(ValidationError):
            sale.avg_price = 1.0


class TestAuctionReport:
    """AuctionReport モデルのテスト"""

    def test_total_head_count_is_sum(self):
        """総頭数が各取引の頭数合計になること"""
        report = AuctionReport.from_sales(
            report_date="2025-01-10",
            report_title="Ogallala Weekly",
            market_name="Ogallala Livestock Auction",
            sales=[make_sale(head_count=100), make_sale(head_count=250)],
        )

        assert report.total_head_count == 350
        assert report.commentary is None

    def test_empty_sales(self):
        """取引がない場合の総頭数は 0"""
        report = AuctionReport.from_sales("2025-01-10", "t", "m", [])
        assert report.total_head_count == 0


class TestCashPrice:
    """CashPrice モデルのテスト"""

    def test_weighted_avg_must_be_positive(self):
        """加重平均価格 0 以下は ValidationError"""
        with pytest.raises(ValidationError):
            CashPrice(report_date="2025-01-10", region="Nebraska", weighted_avg_price=0)

    def test_defaults(self):
        """既定の取引種別は negotiated"""
        price = CashPrice(report_date="2025-01-10", region="Nebraska", weighted_avg_price=186.25)

        assert price.price_type == PriceType.NEGOTIATED
        assert price.dressed_basis is None


class TestSlaughterWeek:
    """SlaughterWeek モデルのテスト"""

    def test_percent_change(self):
        """変化率 = (当期 - 前期) / 前期 × 100"""
        assert percent_change(110, 100) == pytest.approx(10.0)
        assert percent_change(90, 100) == pytest.approx(-10.0)

    def test_percent_change_non_positive_prior(self):
        """前期が 0 以下の場合は 0"""
        assert percent_change(100, 0) == 0.0
        assert percent_change(100, -5) == 0.0

    def test_from_counts(self):
        """頭数から変化率が導出されること"""
        week = SlaughterWeek.from_counts(
            week_ending="2025-01-11",
            cattle_slaughter=630000,
            previous_week=600000,
            previous_year=630000,
            region="National",
        )

        assert week.percent_change_week == pytest.approx(5.0)
        assert week.percent_change_year == 0.0


class TestFuturesContract:
    """FuturesContract モデルのテスト"""

    def test_synthetic_defaults_false(self):
        """推定値フラグの既定は False"""
        contract = FuturesContract(
            symbol="LEG25",
            name="Live Cattle",
            contract_month="February 2025",
            last_price=185.5,
            last_updated="2025-01-10T00:00:00+00:00",
        )

        assert contract.synthetic is False
        assert contract.open_interest is None
