"""
フィールド合体 (Field Coalescer)

上流 API のレコードはレポートや時期によってフィールド名が揺れます
(例: wtd_avg / wtd_avg_price / weighted_average)。
候補フィールド名を優先順に試し、最初に有効な値を返すユーティリティを提供します。

全関数は副作用がなく、例外を送出しません。不正なデータは既定値に落ちます。
"""

import math
import re
from typing import Any, List, Mapping, Optional, Sequence

# 先頭の数値部分 (例: "185.50", "-1.2e3", ".5")
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

Record = Mapping[str, Any]


def parse_number(value: Any) -> Optional[float]:
    """
    値を数値 (float) に変換

    対応形式:
    - int / float → そのまま (NaN, 無限大は無効)
    - "1,234.50" → 1234.5 (桁区切りカンマを除去)
    - "$185.50" → 185.5
    - "185.50 est" → 185.5 (先頭の数値部分のみ)

    Args:
        value: 任意の値

    Returns:
        Optional[float]: 変換結果、変換できない場合は None
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            # float に収まらない巨大な整数
            return None
    elif isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$").strip()
        match = _NUMBER_PREFIX.match(text)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_int(value: Any) -> Optional[int]:
    """
    値を整数に変換 (小数部は切り捨て)

    Returns:
        Optional[int]: 変換結果、変換できない場合は None
    """
    number = parse_number(value)
    if number is None:
        return None
    return int(number)


def _is_present(value: Any) -> bool:
    """値が存在し空でないか"""
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _candidate_values(record: Any, candidates: Sequence[str]) -> List[Any]:
    """候補フィールドのうち存在する値を優先順に列挙"""
    if not isinstance(record, Mapping):
        return []
    return [record[name] for name in candidates if _is_present(record.get(name))]


def coalesce_number(record: Any, candidates: Sequence[str], default: float = 0.0) -> float:
    """
    候補フィールドから最初に数値変換できた値を返す

    存在するが数値変換できない候補はスキップし、次の候補を試します。

    Args:
        record: 上流レコード (型不定)
        candidates: 候補フィールド名 (優先順)
        default: いずれの候補も有効でない場合の既定値

    Returns:
        float: 数値

    Example:
        >>> coalesce_number({"price_low": "1,234.50"}, ["priceLow", "price_low"])
        1234.5
    """
    for value in _candidate_values(record, candidates):
        number = parse_number(value)
        if number is not None:
            return number
    return default


def coalesce_int(record: Any, candidates: Sequence[str], default: int = 0) -> int:
    """候補フィールドから最初に整数変換できた値を返す"""
    for value in _candidate_values(record, candidates):
        number = parse_int(value)
        if number is not None:
            return number
    return default


def coalesce_optional_number(record: Any, candidates: Sequence[str]) -> Optional[float]:
    """
    任意項目用: 有効な非ゼロ値がなければ None

    0 は「値なし」と同じ扱いです (枝肉ベース価格など)。
    """
    number = coalesce_number(record, candidates, default=0.0)
    return number if number != 0 else None


def coalesce_str(record: Any, candidates: Sequence[str], default: str = "") -> str:
    """
    候補フィールドから最初の非空文字列を返す

    数値は文字列化します。dict や list は無効として扱います。
    """
    for value in _candidate_values(record, candidates):
        if isinstance(value, bool) or isinstance(value, (Mapping, list, tuple)):
            continue
        text = str(value).strip()
        if text:
            return text
    return default


def coalesce_optional_str(record: Any, candidates: Sequence[str]) -> Optional[str]:
    """任意項目用: 有効な文字列がなければ None"""
    text = coalesce_str(record, candidates)
    return text or None


def unwrap_records(
    payload: Any,
    container_keys: Sequence[str] = ("results",),
) -> List[Record]:
    """
    上流レスポンスからレコード一覧を取り出す

    上流は一覧をそのまま返す場合と、{"results": [...]} のように
    オブジェクトで包んで返す場合があるため、両方に対応します。
    dict 以外の要素は捨てます。

    Args:
        payload: JSON デコード済みレスポンス
        container_keys: 一覧を包むキーの候補

    Returns:
        List[Record]: レコード一覧 (該当なしは空リスト)
    """
    items: Any = payload
    if isinstance(payload, Mapping):
        items = None
        for key in container_keys:
            if isinstance(payload.get(key), list):
                items = payload[key]
                break

    if not isinstance(items, list):
        return []

    return [item for item in items if isinstance(item, Mapping)]
