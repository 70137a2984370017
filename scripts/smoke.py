"""Lightweight smoke check that doesn't hit the network.

Run: python scripts/smoke.py
"""

from __future__ import annotations

import json
from datetime import date

from newsrank.core.dates import resolve_range
from newsrank.core.models import CommentEndpoint, FetchResult
from newsrank.crawl.aggregator import AggregationState
from newsrank.services.crawling import crawl, format_summary
from newsrank.sources.tuoitre import TuoiTreAdapter


class _CannedFetcher:
    def __init__(self, pages: dict) -> None:
        self.pages = pages

    def fetch(self, url: str) -> FetchResult:
        body = self.pages.get(url)
        return FetchResult(url=url, ok=body is not None, status=200 if body is not None else 404, body=body or "")


def check_offline_crawl() -> None:
    day = date(2024, 5, 1)
    adapter = TuoiTreAdapter()
    (partition,) = adapter.partitions(*resolve_range(day, day))
    comments = TuoiTreAdapter.comment_url(AggregationState(endpoint=CommentEndpoint("1", "1"), page=1))
    fetcher = _CannedFetcher(
        {
            adapter.listing_url(partition, 1): '<ul><li class="news-item"><a href="/a.htm" title="Smoke">x</a></li></ul>',
            "https://tuoitre.vn/a.htm": '<section class="comment-wrapper" data-objectid="1" data-objecttype="1"></section>',
            comments: json.dumps({"Data": json.dumps([{"reactions": {"like": 2}}])}),
        }
    )
    summary = crawl("tuoitre", day, day, fetcher=fetcher)
    assert summary.total == 1 and summary.top[0].total_likes == 2
    print("\n".join(format_summary(summary)))


def main() -> None:
    check_offline_crawl()
    print("smoke ok")


if __name__ == "__main__":
    main()
