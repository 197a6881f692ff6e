"""FeedSettings のユニットテスト"""

import pytest
from pydantic import ValidationError

from src.livestock_markets.infrastructure.settings import FeedSettings


class TestFeedSettings:
    """FeedSettings のテスト"""

    def test_defaults(self):
        """既定値で生成できること"""
        settings = FeedSettings()

        assert settings.mars_api_base == "https://marsapi.ams.usda.gov/services/v1.2"
        assert settings.mars_api_key is None
        assert settings.nass_api_key is None
        assert settings.request_timeout == 10.0
        assert settings.fetch_deadline == 20.0

    @pytest.mark.parametrize("field", ["request_timeout", "fetch_deadline"])
    def test_non_positive_timeout_rejected(self, field):
        """0 以下のタイムアウトは ValidationError"""
        with pytest.raises(ValidationError):
            FeedSettings(**{field: 0})

    def test_from_env(self):
        """環境変数マッピングから生成されること"""
        settings = FeedSettings.from_env(
            {
                "USDA_MARKET_NEWS_API_KEY": "mars-key",
                "USDA_NASS_API_KEY": "nass-key",
                "LIVESTOCK_REQUEST_TIMEOUT": "5",
            }
        )

        assert settings.mars_api_key == "mars-key"
        assert settings.nass_api_key == "nass-key"
        assert settings.request_timeout == 5.0

    def test_from_env_empty_values(self):
        """空文字列のキーは未設定として扱うこと"""
        settings = FeedSettings.from_env({"USDA_MARKET_NEWS_API_KEY": ""})

        assert settings.mars_api_key is None
        assert settings.request_timeout == 10.0

    def test_from_env_reads_process_environment(self, monkeypatch):
        """引数省略時は os.environ を参照すること"""
        monkeypatch.setenv("USDA_NASS_API_KEY", "from-process")
        monkeypatch.delenv("USDA_MARKET_NEWS_API_KEY", raising=False)
        monkeypatch.delenv("LIVESTOCK_REQUEST_TIMEOUT", raising=False)

        settings = FeedSettings.from_env()

        assert settings.nass_api_key == "from-process"
