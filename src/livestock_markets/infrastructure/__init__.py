"""
インフラストラクチャ層

接続設定、テレメトリ、最終フォールバック用デモデータなどを提供します。
"""

from .demo_data import DemoDataProvider
from .settings import FeedSettings
from .telemetry import FeedEvent, FeedTelemetry

__all__ = ["DemoDataProvider", "FeedSettings", "FeedEvent", "FeedTelemetry"]
