"""テキストレポートパーサーのユニットテスト"""

from src.livestock_markets.domain.models import TextReportRow
from src.livestock_markets.domain.text_report import parse_text_report


class TestParseTextReport:
    """parse_text_report のテスト"""

    def test_rows_after_divider(self):
        """区切り行より後の行のみ解析されること"""
        rows = parse_text_report("Steers  120  185.50\n---\nHeifers  95  172.25")

        assert rows == [TextReportRow(category="Heifers", head_count=95, price=172.25)]

    def test_realistic_report(self):
        """ヘッダー・空行・不正行を含むレポートを解析できること"""
        text = "\n".join(
            [
                "Nebraska Weekly Direct Slaughter Cattle",
                "Class        Head     Price",
                "=============================",
                "Steers       1,250    186.25",
                "",
                "Heifers      640      $185.75",
                "Dairy Bred   n/a      170.00",
                "Comments only here",
                "Cows         88",
            ]
        )

        rows = parse_text_report(text)

        assert [row.category for row in rows] == ["Steers", "Heifers"]
        assert rows[0].head_count == 1250
        assert rows[1].price == 185.75

    def test_later_dividers_keep_data_section(self):
        """2 本目以降の区切り行でもデータ部が継続すること"""
        text = "---\nSteers  10  180.0\n===\nHeifers  5  175.0"

        assert len(parse_text_report(text)) == 2

    def test_no_divider(self):
        """区切り行がない場合は空リスト"""
        assert parse_text_report("Steers  120  185.50") == []

    def test_single_space_is_not_separator(self):
        """1 文字の空白はカラム区切りにならないこと"""
        text = "---\nFeeder Steers  300  250.00"

        rows = parse_text_report(text)

        assert rows[0].category == "Feeder Steers"

    def test_empty_text(self):
        """空文字列は空リスト"""
        assert parse_text_report("") == []
