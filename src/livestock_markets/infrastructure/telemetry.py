"""フィード取得テレメトリ"""

from typing import Any, Dict, Optional
from enum import Enum
import logging


class FeedEvent(str, Enum):
    """テレメトリイベント種別"""
    ADAPTER_STARTED = "adapter_started"
    ADAPTER_EMPTY = "adapter_empty"
    ADAPTER_FAILED = "adapter_failed"
    LIVE_DATA_RETURNED = "live_data_returned"
    FALLBACK_TRIGGERED = "fallback_triggered"


class FeedTelemetry:
    """
    アダプター・集約サービスの観測フック

    Responsibilities:
    - アダプター開始、空結果、失敗の記録
    - フォールバック発動、ライブデータ返却の記録
    - ログ出力先の集約 (アダプター内での print を排除)

    テストでは Mock に差し替えて呼び出しを検証します。
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        FeedTelemetry を初期化

        Args:
            logger: 出力先ロガー。None の場合はモジュールロガー
        """
        self.logger = logger or logging.getLogger(__name__)

    def adapter_started(self, source: str, **details: Any) -> None:
        """アダプターの上流呼び出し開始"""
        self._emit(logging.DEBUG, FeedEvent.ADAPTER_STARTED, f"Fetching {source}", source, details)

    def adapter_empty(self, source: str, reason: str, **details: Any) -> None:
        """
        アダプターが空結果を返した

        Args:
            source: アダプター名
            reason: 空になった理由 (例: "no records", "all records filtered")
            details: 追加情報
        """
        details["reason"] = reason
        self._emit(logging.INFO, FeedEvent.ADAPTER_EMPTY, f"{source} returned no data: {reason}", source, details)

    def adapter_failed(self, source: str, error: str, **details: Any) -> None:
        """アダプター内部の取得・解析エラー (空結果に変換済み)"""
        details["error"] = error
        self._emit(logging.WARNING, FeedEvent.ADAPTER_FAILED, f"{source} failed: {error}", source, details)

    def live_data_returned(self, domain: str, source: str, count: int) -> None:
        """優先順チェーンがライブデータを返した"""
        self._emit(
            logging.INFO,
            FeedEvent.LIVE_DATA_RETURNED,
            f"{domain}: returning live data from {source} ({count} records)",
            source,
            {"domain": domain, "count": count},
        )

    def fallback_triggered(self, domain: str, status: str) -> None:
        """全アダプターが空で静的データにフォールバックした"""
        self._emit(
            logging.WARNING,
            FeedEvent.FALLBACK_TRIGGERED,
            f"{domain}: falling back to demo data",
            "demo",
            {"domain": domain, "status": status},
        )

    def _emit(
        self,
        level: int,
        event: FeedEvent,
        message: str,
        source: str,
        details: Dict[str, Any],
    ) -> None:
        """
        ログレコードを出力

        Note: 出力失敗時も集約処理は継続（例外をスローしない）
        """
        try:
            self.logger.log(
                level,
                message,
                extra={"event": event.value, "source": source, "details": details},
            )
        except Exception as e:
            # best-effort: テレメトリ失敗は集約処理を止めない
            logging.getLogger(__name__).error(f"Failed to emit telemetry: {str(e)}")
