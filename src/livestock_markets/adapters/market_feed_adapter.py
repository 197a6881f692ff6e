"""
市場フィードアダプター抽象基底クラス

上流ソースごとのレスポンス形式の差異を吸収するための共通基盤を定義します。
新規ソース追加時は、このクラスを継承して具象アダプターを実装します。

アダプター内部の同期処理は NetworkError / ParsingError を送出し、
公開する非同期メソッドの境界でそれらを空結果に変換します。
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, TypeVar

import requests

from ..infrastructure.settings import FeedSettings
from ..infrastructure.telemetry import FeedTelemetry

T = TypeVar("T")


class NetworkError(Exception):
    """
    ネットワークエラー例外

    HTTP エラー、接続タイムアウト、DNS 解決失敗などのネットワーク関連エラーを表します。
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        """
        Args:
            message: エラーメッセージ
            url: エラーが発生した URL
            status_code: HTTP ステータスコード（該当する場合）
        """
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParsingError(Exception):
    """
    パースエラー例外

    レスポンスが JSON でない場合、必要なブロックが見つからない場合などを表します。
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        """
        Args:
            message: エラーメッセージ
            url: エラーが発生した URL
            detail: 欠けていた要素など
        """
        super().__init__(message)
        self.url = url
        self.detail = detail


class MarketFeedAdapter(ABC):
    """
    上流フィードアダプター抽象基底クラス

    1 つの上流エンドポイントを呼び出し、正規化済みレコードを返します。
    公開メソッドは例外を送出せず、失敗時は空リストまたは None を返します。
    アダプター内でのリトライは行いません (フォールバックチェーンの責務)。
    """

    source_name = "market_feed"

    def __init__(
        self,
        settings: Optional[FeedSettings] = None,
        telemetry: Optional[FeedTelemetry] = None,
    ):
        """
        Args:
            settings: 接続設定。None の場合は既定値
            telemetry: 観測フック。None の場合はログ出力のみ
        """
        self.settings = settings or FeedSettings()
        self.telemetry = telemetry or FeedTelemetry()
        self.logger = logging.getLogger(__name__)

    @abstractmethod
    async def fetch(self, *args: Any, **kwargs: Any) -> Any:
        """
        上流からデータを取得し正規化

        Returns:
            正規化済みレコード列、または利用不可を表す None

        Note: 例外を送出しない
        """
        pass

    @property
    def headers(self) -> Dict[str, str]:
        """HTTP リクエストヘッダー"""
        return {
            "Accept": "application/json",
            "User-Agent": self.settings.user_agent,
        }

    @property
    def mars_auth(self) -> Optional[Tuple[str, str]]:
        """MARS API の Basic 認証 (API キーをユーザー名、パスワードは空)"""
        if self.settings.mars_api_key:
            return (self.settings.mars_api_key, "")
        return None

    def _get(
        self,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        auth: Optional[Tuple[str, str]] = None,
    ) -> requests.Response:
        """
        HTTP GET を実行

        Raises:
            NetworkError: HTTP エラー・接続エラー発生時
        """
        try:
            response = requests.get(
                url,
                params=params,
                headers=dict(headers or self.headers),
                auth=auth,
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise NetworkError(
                f"HTTP error: {e}",
                url=url,
                status_code=response.status_code,
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error: {e}", url=url)

        return response

    def _get_json(
        self,
        url: str,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        auth: Optional[Tuple[str, str]] = None,
    ) -> Any:
        """
        HTTP GET を実行し JSON をデコード

        Raises:
            NetworkError: HTTP エラー・接続エラー発生時
            ParsingError: レスポンスが JSON でない時
        """
        response = self._get(url, params=params, headers=headers, auth=auth)
        try:
            return response.json()
        except ValueError as e:
            raise ParsingError(f"Malformed JSON: {e}", url=url)

    async def _run(
        self,
        collect: Callable[[], T],
        empty: T,
        source: Optional[str] = None,
    ) -> T:
        """
        同期の取得処理をワーカースレッドで実行し、失敗を空結果に変換

        Args:
            collect: 取得・正規化を行う同期関数
            empty: 失敗時に返す値 ([] または None)
            source: テレメトリ用のソース名 (既定は source_name)

        Returns:
            collect の戻り値、失敗・タイムアウト時は empty

        Invariants: 例外を送出しない
        """
        name = source or self.source_name
        self.telemetry.adapter_started(name)

        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(collect),
                timeout=self.settings.fetch_deadline,
            )
        except asyncio.TimeoutError:
            self.telemetry.adapter_failed(name, f"timed out after {self.settings.fetch_deadline}s")
            return empty
        except (NetworkError, ParsingError) as e:
            self.telemetry.adapter_failed(name, str(e), url=e.url)
            return empty
        except Exception as e:
            self.logger.error(f"Unexpected error in {name}: {str(e)}", exc_info=True)
            self.telemetry.adapter_failed(name, str(e))
            return empty

        if not result:
            self.telemetry.adapter_empty(name, "no usable records")
        return result
