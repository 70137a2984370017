from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from newsrank.core.errors import MissingCommentIdentity
from newsrank.core.models import ArticleLink, CommentEndpoint, Partition
from newsrank.crawl.aggregator import CommentDecoder, CommentPolicy
from newsrank.scrape.parser import DocumentHandle

logger = logging.getLogger(__name__)


def get_ci(obj: Any, key: str) -> Any:
    """dict lookup that tolerates the API changing the key's case."""
    if not isinstance(obj, dict):
        return None
    if key in obj:
        return obj[key]
    lowered = key.lower()
    for k, v in obj.items():
        if isinstance(k, str) and k.lower() == lowered:
            return v
    return None


class SourceAdapter(ABC):
    """Everything that differs between news sources.

    URL templates, selectors, comment paging and concurrency defaults live
    here; the crawl engine never branches on the source name.
    """

    name: str = ""
    base_url: str = ""
    listing_selector: str = ""
    link_selector: str = "a"
    comment_selector: str = ""
    # Day partitions are walked one at a time in calendar order.
    sequential_partitions: bool = False

    @abstractmethod
    def partitions(self, start: datetime, end: datetime) -> List[Partition]: ...

    @abstractmethod
    def listing_url(self, partition: Partition, page: int) -> str: ...

    @abstractmethod
    def comment_policy(self, max_pages: Optional[int] = None) -> CommentPolicy: ...

    @property
    @abstractmethod
    def decoder(self) -> CommentDecoder: ...

    @abstractmethod
    def default_limits(self) -> Dict[str, int]: ...

    def count_listing_items(self, document: DocumentHandle) -> int:
        return len(document.select(self.listing_selector))

    def article_url(self, href: str) -> str:
        return urljoin(self.base_url + "/", href)

    def extract_links(self, document: DocumentHandle) -> List[ArticleLink]:
        """Article links of a listing page.

        Entries without an href or title are dropped silently (best effort).
        """
        out: List[ArticleLink] = []
        skipped = 0
        for item in document.select(self.listing_selector):
            link = item.select_one(self.link_selector)
            href = link.attribute("href") if link is not None else None
            title = link.attribute("title") if link is not None else None
            if not href or not title:
                skipped += 1
                continue
            out.append(ArticleLink(url=self.article_url(href.strip()), title=title.strip()))
        if skipped:
            logger.debug("%s: skipped %d listing items without link/title", self.name, skipped)
        return out

    def comment_endpoint(self, document: DocumentHandle, url: str = "") -> Optional[CommentEndpoint]:
        """Comment identity of an article page, or None when it has no comment section."""
        section = document.select_one(self.comment_selector)
        if section is None:
            return None
        object_id = section.attribute("data-objectid")
        object_type = section.attribute("data-objecttype")
        if not object_id or not object_type:
            raise MissingCommentIdentity(url)
        return CommentEndpoint(object_id=object_id, object_type=object_type)
