"""
ネブラスカ州セールバーンカタログ

slug は mymarketnews.ams.usda.gov のレポート番号に対応します。
"1860" は州内全市場をまとめた週次サマリーです。
"""

from typing import List, Optional, Sequence

from .models import SaleBarn


NEBRASKA_SALE_BARNS: List[SaleBarn] = [
    SaleBarn(slug="1860", name="Nebraska Weekly Summary", city="Statewide",
             state="NE", sale_day="Various", report_day="Friday"),
    SaleBarn(slug="1836", name="Bassett Livestock Auction", city="Bassett",
             state="NE", sale_day="Wednesday", report_day="Wednesday"),
    SaleBarn(slug="1851", name="Burwell Livestock Market", city="Burwell",
             state="NE", sale_day="Friday", report_day="Friday"),
    SaleBarn(slug="1838", name="Crawford Livestock Market", city="Crawford",
             state="NE", sale_day="Friday", report_day="Friday"),
    SaleBarn(slug="1852", name="Ericson Livestock Market", city="Ericson",
             state="NE", sale_day="Saturday", report_day="Saturday"),
    SaleBarn(slug="1839", name="Huss Livestock Market", city="Kearney",
             state="NE", sale_day="Wednesday", report_day="Wednesday"),
    SaleBarn(slug="1853", name="Imperial Auction Market", city="Imperial",
             state="NE", sale_day="Tuesday", report_day="Tuesday"),
    SaleBarn(slug="1854", name="Lexington Livestock Market", city="Lexington",
             state="NE", sale_day="Friday", report_day="Friday"),
    SaleBarn(slug="1850", name="Ogallala Livestock Auction", city="Ogallala",
             state="NE", sale_day="Thursday", report_day="Thursday"),
    SaleBarn(slug="1855", name="Sheridan Livestock Auction", city="Rushville",
             state="NE", sale_day="Wednesday", report_day="Wednesday"),
    SaleBarn(slug="1856", name="Tri-State Livestock Auction", city="McCook",
             state="NE", sale_day="Monday", report_day="Monday"),
    SaleBarn(slug="1857", name="Valentine Livestock Auction", city="Valentine",
             state="NE", sale_day="Thursday", report_day="Thursday"),
]


def get_barn_by_slug(slug: str) -> Optional[SaleBarn]:
    """slug からセールバーンを取得 (該当なしは None)"""
    for barn in NEBRASKA_SALE_BARNS:
        if barn.slug == slug:
            return barn
    return None


def get_barns_by_slugs(slugs: Optional[Sequence[str]]) -> List[SaleBarn]:
    """
    slug 一覧からセールバーンを取得

    Args:
        slugs: slug 一覧。None または空の場合はカタログ全体

    Returns:
        List[SaleBarn]: カタログ順のセールバーン一覧 (未知の slug は無視)
    """
    if not slugs:
        return list(NEBRASKA_SALE_BARNS)
    wanted = set(slugs)
    return [barn for barn in NEBRASKA_SALE_BARNS if barn.slug in wanted]
