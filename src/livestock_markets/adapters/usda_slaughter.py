"""
と畜統計アダプター

- LMPR (Livestock Mandatory Price Reporting, MARS LM_CT100): 週次と畜サマリー
- NASS Quick Stats: 調査ベースの週次と畜頭数 (州・全国)
"""

from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from .market_feed_adapter import MarketFeedAdapter
from ..domain.coalesce import Record, coalesce_int, coalesce_str, parse_int, unwrap_records
from ..domain.models import SlaughterWeek
from ..infrastructure.settings import FeedSettings
from ..infrastructure.telemetry import FeedTelemetry

# LMPR の候補フィールド名
CURRENT_WEEK_FIELDS = ["current_week_slaughter", "head_count"]
PREVIOUS_WEEK_FIELDS = ["previous_week_slaughter", "prev_week"]
YEAR_AGO_FIELDS = ["year_ago_slaughter", "prev_year"]
WEEK_ENDING_FIELDS = ["week_ending", "report_date"]

# NASS の候補フィールド名
NASS_WEEK_FIELDS = ["week_ending", "end_code"]
NASS_REGION_FIELDS = ["state_name", "agg_level_desc"]

# NASS が非公開値に用いる記号
_WITHHELD_VALUES = {"(D)", "(NA)", "(X)", "(Z)"}

def _parse_week(text: str) -> date:
    """
    週末日付を解析

    対応形式: "YYYY-MM-DD" (時刻付き含む), "MM/DD/YYYY"。解析できない場合は最小日付
    """
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.strptime(text.strip(), "%m/%d/%Y").date()
    except ValueError:
        return date.min


class LmprSlaughterAdapter(MarketFeedAdapter):
    """
    LMPR 週次と畜アダプター

    前週・前年値が欠けている場合は当週値で代用します (変化率 0%)。
    """

    source_name = "usda_lmpr_slaughter"

    REPORT_SLUG = "lm_ct100"
    MAX_RECORDS = 8

    async def fetch(self) -> List[SlaughterWeek]:
        """
        週次と畜頭数を取得

        Returns:
            List[SlaughterWeek]: 直近週から順 (失敗時は空リスト)
        """
        return await self._run(self._collect, [])

    def _collect(self) -> List[SlaughterWeek]:
        url = f"{self.settings.mars_api_base}/reports/{self.REPORT_SLUG}"
        records = unwrap_records(self._get_json(url, auth=self.mars_auth))

        return [self._to_week(record) for record in records[: self.MAX_RECORDS]]

    def _to_week(self, record: Record) -> SlaughterWeek:
        current = max(coalesce_int(record, CURRENT_WEEK_FIELDS), 0)
        previous_week = max(coalesce_int(record, PREVIOUS_WEEK_FIELDS, current), 0)
        previous_year = max(coalesce_int(record, YEAR_AGO_FIELDS, current), 0)

        return SlaughterWeek.from_counts(
            week_ending=coalesce_str(record, WEEK_ENDING_FIELDS),
            cattle_slaughter=current,
            previous_week=previous_week,
            previous_year=previous_year,
            region=coalesce_str(record, ["region"], "National"),
        )


class NassSlaughterAdapter(MarketFeedAdapter):
    """
    NASS Quick Stats と畜アダプター

    階層的な記述子 (source/sector/group/commodity/...) でクエリします。
    API キーが未設定の場合は上流を呼ばずに空リストを返します。
    """

    source_name = "usda_nass_slaughter"

    MAX_RECORDS = 10

    def __init__(
        self,
        settings: Optional[FeedSettings] = None,
        agg_level: str = "STATE",
        state_name: Optional[str] = "NEBRASKA",
        telemetry: Optional[FeedTelemetry] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            settings: 接続設定
            agg_level: 集計レベル ("STATE" または "NATIONAL")
            state_name: 州名 (STATE の場合のみ使用)
            telemetry: 観測フック
            today: 基準日を返す関数 (クエリ年の決定に使用)
        """
        super().__init__(settings, telemetry)
        self.agg_level = agg_level
        self.state_name = state_name if agg_level == "STATE" else None
        self._today = today or (lambda: datetime.now(timezone.utc).date())
        self.source_name = f"usda_nass_slaughter_{agg_level.lower()}"

    def query_params(self) -> dict:
        """NASS クエリパラメータ"""
        params = {
            "key": self.settings.nass_api_key or "",
            "format": "JSON",
            "source_desc": "SURVEY",
            "sector_desc": "ANIMALS & PRODUCTS",
            "group_desc": "LIVESTOCK",
            "commodity_desc": "CATTLE",
            "statisticcat_desc": "SLAUGHTER",
            "unit_desc": "HEAD",
            "domain_desc": "TOTAL",
            "agg_level_desc": self.agg_level,
            "freq_desc": "WEEKLY",
            "year": str(self._today().year),
        }
        if self.state_name:
            params["state_name"] = self.state_name
        return params

    async def fetch(self) -> List[SlaughterWeek]:
        """
        週次と畜頭数を取得

        Returns:
            List[SlaughterWeek]: 直近週から順 (失敗時・キー未設定時は空リスト)
        """
        if not self.settings.nass_api_key:
            self.telemetry.adapter_empty(self.source_name, "NASS API key not configured")
            return []
        return await self._run(self._collect, [])

    def _collect(self) -> List[SlaughterWeek]:
        payload = self._get_json(self.settings.nass_api_base, params=self.query_params())
        records = unwrap_records(payload, container_keys=("data", "results"))

        # 非公開値 (D) などを除外し、新しい週から並べる
        valid = [
            (record, value)
            for record, value in ((record, self._value(record)) for record in records)
            if value is not None
        ]
        valid.sort(key=lambda pair: _parse_week(coalesce_str(pair[0], NASS_WEEK_FIELDS)), reverse=True)
        valid = valid[: self.MAX_RECORDS]

        weeks = []
        for index, (record, current) in enumerate(valid):
            previous = valid[index + 1][1] if index + 1 < len(valid) else current
            weeks.append(
                SlaughterWeek.from_counts(
                    week_ending=coalesce_str(record, NASS_WEEK_FIELDS),
                    cattle_slaughter=current,
                    previous_week=previous,
                    # 前年同週は別クエリが必要なため当週値を使用
                    previous_year=current,
                    region=coalesce_str(record, NASS_REGION_FIELDS, "National").title(),
                )
            )
        return weeks

    @staticmethod
    def _value(record: Record) -> Optional[int]:
        """Value 列の頭数 (欠損・非公開は None)"""
        raw = coalesce_str(record, ["Value"])
        if not raw or raw in _WITHHELD_VALUES:
            return None
        value = parse_int(raw)
        if value is None or value < 0:
            return None
        return value
