"""
livestock_markets

USDA の市場レポート・と畜統計・遅延先物相場を取得し、
表示用の統一スキーマに正規化する集約コアです。
"""

__version__ = "0.1.0"
