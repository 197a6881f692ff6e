"""
テキストレポートパーサー

USDA の固定幅プレーンテキストレポートから {クラス, 頭数, 価格} を抽出します。
JSON アダプターが使えない場合の最終手段であり、結果はベストエフォートです。
"""

import re
from typing import List

from .coalesce import parse_int, parse_number
from .models import TextReportRow

# 2 文字以上の空白がカラム区切り
_COLUMN_SEPARATOR = re.compile(r"\s{2,}")


def _is_divider(line: str) -> bool:
    """'-' または '=' の繰り返しのみからなる区切り行か"""
    stripped = line.strip()
    if len(stripped) < 3:
        return False
    return set(stripped) <= {"-", "=", " "} and ("---" in stripped or "===" in stripped)


def parse_text_report(text: str) -> List[TextReportRow]:
    """
    固定幅テキストレポートを解析

    区切り行以降をデータ部とみなし、各行を 2 文字以上の空白で分割して
    先頭から クラス / 頭数 / 価格 として解釈します。
    3 カラムに満たない行、頭数・価格が数値でない行は捨てます。

    Args:
        text: レポート本文

    Returns:
        List[TextReportRow]: 抽出結果 (区切り行より前の内容は対象外)

    Example:
        >>> parse_text_report("Steers  120  185.50\\n---\\nHeifers  95  172.25")
        [TextReportRow(category='Heifers', head_count=95, price=172.25)]
    """
    rows: List[TextReportRow] = []
    in_data_section = False

    for line in text.splitlines():
        if _is_divider(line):
            in_data_section = True
            continue

        if not in_data_section or not line.strip():
            continue

        columns = _COLUMN_SEPARATOR.split(line.strip())
        if len(columns) < 3:
            continue

        head_count = parse_int(columns[1])
        price = parse_number(columns[2])
        if head_count is None or price is None:
            continue

        rows.append(
            TextReportRow(
                category=columns[0].strip(),
                head_count=head_count,
                price=price,
            )
        )

    return rows
