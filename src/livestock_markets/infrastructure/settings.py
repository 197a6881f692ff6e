"""フィード接続設定"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class FeedSettings(BaseModel):
    """
    上流 API の接続設定

    各アダプターと集約サービスの生成時に明示的に渡します。
    環境変数の読み込みは from_env() のみで行い、アダプター内部では参照しません。
    """

    mars_api_base: str = Field(
        default="https://marsapi.ams.usda.gov/services/v1.2",
        description="USDA MARS (Market News) API ベース URL",
    )
    mars_api_key: Optional[str] = Field(default=None, description="MARS API キー (任意)")
    nass_api_base: str = Field(
        default="https://quickstats.nass.usda.gov/api/api_GET",
        description="USDA NASS Quick Stats API URL",
    )
    nass_api_key: Optional[str] = Field(default=None, description="NASS API キー (必須、未設定なら NASS は空)")
    quote_api_base: str = Field(
        default="https://query1.finance.yahoo.com/v8/finance/chart",
        description="遅延相場 API ベース URL",
    )
    text_report_base: str = Field(
        default="https://www.ams.usda.gov/mnreports",
        description="公開テキストレポートのベース URL",
    )
    request_timeout: float = Field(default=10.0, description="HTTP タイムアウト (秒)")
    fetch_deadline: float = Field(default=20.0, description="アダプター 1 回あたりの上限時間 (秒)")
    user_agent: str = Field(
        default="LivestockMarkets/0.1 (USDA market data aggregation)",
        description="User-Agent ヘッダー",
    )

    @field_validator("request_timeout", "fetch_deadline")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """
        タイムアウトの正値チェック

        Raises:
            ValueError: 0 以下の値が渡された場合
        """
        if v <= 0:
            raise ValueError(f"タイムアウトは正の値である必要があります: {v}")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FeedSettings":
        """
        環境変数から設定を生成

        - USDA_MARKET_NEWS_API_KEY: MARS API キー
        - USDA_NASS_API_KEY: NASS API キー
        - LIVESTOCK_REQUEST_TIMEOUT: HTTP タイムアウト (秒)

        Args:
            environ: 環境変数マッピング。None の場合は os.environ

        Returns:
            FeedSettings: 設定
        """
        env = os.environ if environ is None else environ

        values = {
            "mars_api_key": env.get("USDA_MARKET_NEWS_API_KEY") or None,
            "nass_api_key": env.get("USDA_NASS_API_KEY") or None,
        }
        if env.get("LIVESTOCK_REQUEST_TIMEOUT"):
            values["request_timeout"] = float(env["LIVESTOCK_REQUEST_TIMEOUT"])

        return cls(**values)
