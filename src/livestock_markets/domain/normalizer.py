"""
カテゴリ正規化ロジック

上流の自由記述 (取引種別、相場方向、家畜クラス) を小さな閉じた列挙値に変換します。
いずれも大文字小文字を区別しない部分一致で判定し、例外を送出しません。
"""

from typing import Optional

from .models import PriceType, Trend


class MarketNormalizer:
    """
    市場用語の正規化クラス

    レポートごとに異なる表記を統一値に正規化する静的メソッドを提供します。
    """

    # 正規化パターン定義 (判定順に意味がある)
    _PRICE_TYPE_PATTERNS = [
        ("formula", PriceType.FORMULA),
        ("forward", PriceType.FORWARD),
        ("grid", PriceType.NEGOTIATED_GRID),
    ]

    _TREND_HIGHER_PATTERNS = ["higher", "up"]
    _TREND_LOWER_PATTERNS = ["lower", "down"]
    _TREND_STEADY_PATTERNS = ["steady", "unchanged", "unch"]

    @staticmethod
    def price_type(raw_type: Optional[str]) -> PriceType:
        """
        取引種別を正規化

        "formula" → formula, "forward" → forward, "grid" → negotiated_grid,
        それ以外 (空文字含む) → negotiated

        Args:
            raw_type: 正規化前の取引種別 (例: "Negotiated Cash")

        Returns:
            PriceType: 正規化済み取引種別
        """
        lower = (raw_type or "").lower()

        for pattern, price_type in MarketNormalizer._PRICE_TYPE_PATTERNS:
            if pattern in lower:
                return price_type

        # ラベルなしは相対取引が最も多い
        return PriceType.NEGOTIATED

    @staticmethod
    def trend(raw_trend: Optional[str]) -> Optional[Trend]:
        """
        相場方向を正規化

        相場方向の記載がないことと "steady" は区別し、判定できない場合は None を返します。

        Args:
            raw_trend: 正規化前の相場方向 (例: "Steady to 2.00 higher", "UNCH")

        Returns:
            Optional[Trend]: higher / lower / steady、判定不能なら None
        """
        lower = (raw_trend or "").lower()

        for pattern in MarketNormalizer._TREND_HIGHER_PATTERNS:
            if pattern in lower:
                return Trend.HIGHER

        for pattern in MarketNormalizer._TREND_LOWER_PATTERNS:
            if pattern in lower:
                return Trend.LOWER

        for pattern in MarketNormalizer._TREND_STEADY_PATTERNS:
            if pattern in lower:
                return Trend.STEADY

        return None

    @staticmethod
    def category(raw_category: str) -> str:
        """
        家畜クラスを比較表示用に正規化

        複合語の誤分類を避けるため、判定順は固定です:
        - 親子ペア判定は一般の cow 判定より先
        - と畜用 bull 判定は一般の bull 判定より先

        正規化済みの値を再度渡しても同じ値を返します (冪等)。

        Args:
            raw_category: 正規化前のクラス (例: "Feeder Steers", "Bred Cows w/ calf")

        Returns:
            str: Steers, Heifers, Cow-Calf Pairs, Slaughter Bulls, Slaughter Cows,
                 Bulls, Cows のいずれか。該当なしは元の文字列
        """
        lower = raw_category.lower()

        if "steer" in lower:
            return "Steers"
        if "heifer" in lower:
            return "Heifers"
        if "cow" in lower and "calf" in lower:
            return "Cow-Calf Pairs"
        if "bull" in lower and "slaught" in lower:
            return "Slaughter Bulls"
        if "cow" in lower and ("break" in lower or "slaught" in lower):
            return "Slaughter Cows"
        if "bull" in lower:
            return "Bulls"
        if "cow" in lower:
            return "Cows"

        return raw_category
