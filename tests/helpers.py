"""Fakes and HTML builders shared by the tests."""
from __future__ import annotations

import threading
from typing import Dict, List, Union

from newsrank.core.models import FetchResult


Route = Union[str, FetchResult, BaseException]


class FakeFetcher:
    """In-memory PageFetcher: url -> body, FetchResult or exception. Unknown urls give 404."""

    def __init__(self, routes: Dict[str, Route] = None) -> None:
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def add(self, url: str, route: Route) -> None:
        self.routes[url] = route

    def fetch(self, url: str) -> FetchResult:
        with self._lock:
            self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FetchResult(url=url, ok=False, status=404)
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, FetchResult):
            return route
        return FetchResult(url=url, ok=True, status=200, body=route)

    def count(self, url: str) -> int:
        with self._lock:
            return self.calls.count(url)


def vnexpress_listing(links) -> str:
    items = "".join(
        f'<article class="item-news item-news-common"><h3><a href="{href}" title="{title}">{title}</a></h3></article>'
        for href, title in links
    )
    return f"<html><body><div class='list'>{items}</div></body></html>"


def tuoitre_listing(links) -> str:
    items = "".join(f'<li class="news-item"><a href="{href}" title="{title}">{title}</a></li>' for href, title in links)
    return f"<html><body><ul>{items}</ul></body></html>"


def vnexpress_article(object_id: str = None, object_type: str = "1") -> str:
    if object_id is None:
        return "<html><body><p>no comments here</p></body></html>"
    return (
        "<html><body><span class='number_cmt txt_num_comment num_cmt_detail' "
        f"data-objectid='{object_id}' data-objecttype='{object_type}'>12</span></body></html>"
    )


def tuoitre_article(object_id: str = None, object_type: str = "1") -> str:
    if object_id is None:
        return "<html><body><p>no comments here</p></body></html>"
    return (
        f"<html><body><section class='comment-wrapper' data-objectid='{object_id}' "
        f"data-objecttype='{object_type}'></section></body></html>"
    )


