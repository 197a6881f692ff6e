"""
地域名・市場名の slug 変換

表示名と URL 用 slug の相互変換、および既知の地域・市場の対応表を提供します。
"""

import re
from typing import Dict

REGION_MAP: Dict[str, str] = {
    "nebraska": "Nebraska",
    "colorado": "Colorado",
    "iowa-minnesota": "Iowa-Minnesota",
    "5-area": "5-Area",
    "kansas": "Kansas",
    "texas": "Texas",
}

# 地域 → USDA レポート番号
REGION_REPORT_SLUGS: Dict[str, str] = {
    "nebraska": "lm_ct155",
    "colorado": "lm_ct155",
    "iowa-minnesota": "lm_ct155",
    "5-area": "lm_ct169",
}

DEFAULT_REPORT_SLUG = "lm_ct155"

MARKET_MAP: Dict[str, str] = {
    "ogallala-livestock-auction": "Ogallala Livestock Auction",
    "valentine-livestock-auction": "Valentine Livestock Auction",
    "alliance-livestock-auction": "Alliance Livestock Auction",
    "gordon-livestock-auction": "Gordon Livestock Auction",
    "burwell-livestock-market": "Burwell Livestock Market",
    "north-platte-livestock-auction": "North Platte Livestock Auction",
}


def to_slug(name: str) -> str:
    """
    表示名を URL 用 slug に変換

    Example:
        >>> to_slug("Iowa & Minnesota")
        'iowa-and-minnesota'
    """
    slug = name.lower().replace("&", "and")
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    return slug.strip("-")


def from_slug(slug: str) -> str:
    """
    slug を表示名に戻す

    Example:
        >>> from_slug("iowa-and-minnesota")
        'Iowa & Minnesota'
    """
    name = slug.replace("-", " ")
    name = re.sub(r"\band\b", "&", name)
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), name)


def region_name(slug: str) -> str:
    """地域 slug の表示名 (対応表になければ from_slug)"""
    return REGION_MAP.get(slug) or from_slug(slug)


def market_name(slug: str) -> str:
    """市場 slug の表示名 (対応表になければ from_slug)"""
    return MARKET_MAP.get(slug) or from_slug(slug)


def report_slug_for_region(region_slug: str) -> str:
    """地域 slug に対応する USDA レポート番号"""
    return REGION_REPORT_SLUGS.get(region_slug, DEFAULT_REPORT_SLUG)
