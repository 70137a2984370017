from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from newsrank.core.dates import to_unix
from newsrank.core.models import Category, Partition
from newsrank.crawl.aggregator import AggregationState, CommentPolicy, GrowingWindowPolicy
from newsrank.sources.base import SourceAdapter, get_ci

BASE_URL = "https://vnexpress.net"
COMMENT_API_URL = "https://usi-saas.vnexpress.net/index/get"
COMMENT_BASE_LIMIT = 1000
SITE_ID = 1000000

CATEGORIES: List[Category] = [
    Category("Thời sự", 1001005, "thoisu", "/thoi-su"),
    Category("Góc nhìn", 1003450, "gocnhin", "/goc-nhin"),
    Category("Thế giới", 1001002, "thegioi", "/the-gioi"),
    Category("Kinh doanh", 1003159, "kinhdoanh", "/kinh-doanh"),
    Category("Podcasts", 1004685, "podcasts", "/podcast"),
    Category("Bất động sản", 1005628, "kinhdoanh", "/bat-dong-san"),
    Category("Khoa học", 1001009, "khoahoc", "/khoa-hoc"),
    Category("Giải trí", 1002691, "giaitri", "/giai-tri"),
    Category("Thể thao", 1002565, "thethao", "/the-thao"),
    Category("Pháp luật", 1001007, "phapluat", "/phap-luat"),
    Category("Giáo dục", 1003497, "giaoduc", "/giao-duc"),
    Category("Sức khỏe", 1003750, "suckhoe", "/suc-khoe"),
    Category("Đời sống", 1002966, "doisong", "/doi-song"),
    Category("Du lịch", 1003231, "dulich", "/du-lich"),
    Category("Số hóa", 1002592, "sohoa", "/so-hoa"),
    Category("Xe", 1001006, "xe", "/oto-xe-may"),
    Category("Ý kiến", 1001012, "ykien", "/y-kien"),
    Category("Tâm sự", 1001014, "tamsu", "/tam-su"),
    Category("Thư giãn", 1001011, "cuoi", "/thu-gian"),
]


class VnExpressDecoder:
    """``{"data": {"items": [{"userlike": 3}, ...]}}``"""

    def decode(self, body: str) -> Optional[List[Any]]:
        try:
            payload = json.loads(body)
        except ValueError:
            return None
        items = get_ci(get_ci(payload, "data"), "items")
        return items if isinstance(items, list) else None

    def likes(self, item: Any) -> int:
        try:
            return int(get_ci(item, "userlike") or 0)
        except (TypeError, ValueError):
            return 0


class VnExpressAdapter(SourceAdapter):
    name = "vnexpress"
    base_url = BASE_URL
    listing_selector = "article.item-news.item-news-common"
    comment_selector = "span.number_cmt.txt_num_comment.num_cmt_detail"
    sequential_partitions = False

    def __init__(self, categories: Optional[List[Category]] = None) -> None:
        self.categories = list(categories if categories is not None else CATEGORIES)
        self._decoder = VnExpressDecoder()

    def partitions(self, start: datetime, end: datetime) -> List[Partition]:
        from_unix, to_unix_ = to_unix(start), to_unix(end)
        return [
            Partition(key=c.class_name + ":" + str(c.id), category_id=c.id, from_unix=from_unix, to_unix=to_unix_)
            for c in self.categories
        ]

    def listing_url(self, partition: Partition, page: int) -> str:
        return (
            f"{BASE_URL}/category/day/cateid/{partition.category_id}"
            f"/fromdate/{partition.from_unix}/todate/{partition.to_unix}/allcate/0/page/{page}"
        )

    @staticmethod
    def comment_url(state: AggregationState) -> str:
        params = {
            "offset": state.offset,
            "limit": state.limit,
            "sort_by": "like",
            "objectid": state.endpoint.object_id,
            "objecttype": state.endpoint.object_type,
            "siteid": SITE_ID,
        }
        return f"{COMMENT_API_URL}?{urlencode(params)}"

    def comment_policy(self, max_pages: Optional[int] = None) -> CommentPolicy:
        # The window grows on its own and ends on the first short page.
        return GrowingWindowPolicy(self.comment_url, base_limit=COMMENT_BASE_LIMIT)

    @property
    def decoder(self) -> VnExpressDecoder:
        return self._decoder

    def default_limits(self) -> Dict[str, int]:
        return {"partitions": 1, "pages": 1, "articles": 3}
