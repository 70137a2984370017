from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from newsrank.core.dates import days_between
from newsrank.core.models import Partition
from newsrank.crawl.aggregator import AggregationState, CommentPolicy, UnboundedPagePolicy
from newsrank.sources.base import SourceAdapter, get_ci

BASE_URL = "https://tuoitre.vn"
COMMENT_API_URL = "https://id.tuoitre.vn/api/getlist-comment.api"


class TuoiTreDecoder:
    """The API wraps the comment list as a JSON string in ``Data``.

    Each comment carries a ``reactions`` map (reaction name -> count) and its
    weight is the sum of all counters.
    """

    def decode(self, body: str) -> Optional[List[Any]]:
        try:
            payload = json.loads(body)
        except ValueError:
            return None
        data = get_ci(payload, "data")
        if isinstance(data, str):
            if not data.strip():
                return None
            try:
                data = json.loads(data)
            except ValueError:
                return None
        return data if isinstance(data, list) else None

    def likes(self, item: Any) -> int:
        reactions = get_ci(item, "reactions")
        if not isinstance(reactions, dict):
            return 0
        total = 0
        for v in reactions.values():
            try:
                total += max(0, int(v or 0))
            except (TypeError, ValueError):
                continue
        return total


class TuoiTreAdapter(SourceAdapter):
    name = "tuoitre"
    base_url = BASE_URL
    listing_selector = "li.news-item"
    comment_selector = "section.comment-wrapper"
    sequential_partitions = True

    def __init__(self) -> None:
        self._decoder = TuoiTreDecoder()

    def partitions(self, start: datetime, end: datetime) -> List[Partition]:
        return [Partition(key=d.isoformat(), day=d) for d in days_between(start, end)]

    def listing_url(self, partition: Partition, page: int) -> str:
        return f"{BASE_URL}/timeline-xem-theo-ngay/0/{partition.label}/trang-{page}.htm"

    @staticmethod
    def comment_url(state: AggregationState) -> str:
        params = {
            "pageindex": state.page,
            "objId": state.endpoint.object_id,
            "objType": state.endpoint.object_type,
            "sort": 2,
        }
        return f"{COMMENT_API_URL}?{urlencode(params)}"

    def comment_policy(self, max_pages: Optional[int] = None) -> CommentPolicy:
        return UnboundedPagePolicy(self.comment_url, max_pages=max_pages)

    @property
    def decoder(self) -> TuoiTreDecoder:
        return self._decoder

    def default_limits(self) -> Dict[str, int]:
        return {"partitions": 1, "pages": 1, "articles": 5}
