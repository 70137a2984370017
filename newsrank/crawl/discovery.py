from __future__ import annotations

import logging
import threading
from typing import Iterator, Optional

from newsrank.core.models import ListingPage, Partition
from newsrank.scrape.http_client import PageFetcher
from newsrank.scrape.parser import PageParser
from newsrank.sources.base import SourceAdapter


class PaginationDiscoverer:
    """Walks the listing pages of one partition until they run out.

    The page count is unknown up front. After handing out page N the
    discoverer probes page N+1; an error status or a page without listing
    items ends the walk. The probe's content becomes page N+1, so every page
    is fetched exactly once. A ``TransportError`` is not caught here and ends
    the partition.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        parser: PageParser,
        adapter: SourceAdapter,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.fetcher = fetcher
        self.parser = parser
        self.adapter = adapter
        self.logger = logger or logging.getLogger(__name__)
        self.probe_count = 0

    def _load(self, partition: Partition, number: int) -> Optional[ListingPage]:
        url = self.adapter.listing_url(partition, number)
        res = self.fetcher.fetch(url)
        if not res.ok:
            self.logger.warning(
                "listing page %d of %s returned status %s, stopping", number, partition.label, res.status
            )
            return None
        document = self.parser.parse(res.body)
        return ListingPage(number=number, url=url, document=document)

    def pages(self, partition: Partition, cancel: Optional[threading.Event] = None) -> Iterator[ListingPage]:
        page = self._load(partition, 1)
        while page is not None:
            yield page
            if cancel is not None and cancel.is_set():
                self.logger.info("cancelled after page %d of %s", page.number, partition.label)
                return
            self.probe_count += 1
            nxt = self._load(partition, page.number + 1)
            if nxt is None:
                return
            if self.adapter.count_listing_items(nxt.document) == 0:
                self.logger.debug("page %d of %s is empty, %d pages found", nxt.number, partition.label, page.number)
                return
            page = nxt
