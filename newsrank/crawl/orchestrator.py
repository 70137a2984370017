"""Top-level crawl driver.

For every partition of a source the orchestrator walks the listing pages,
hands each page to a background page unit and keeps probing for the next
page. A page unit extracts article links and runs one pipeline per article:
fetch, find the comment endpoint, aggregate likes, record.

Failure isolation:
- an exception inside one article pipeline is logged and skipped
- an exception inside one page unit is logged and does not touch sibling pages
- a transport error while discovering pages ends that partition only; pages
  already handed out still finish and keep their articles
"""

from __future__ import annotations

import contextvars
import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from newsrank.core.errors import MissingCommentIdentity, TransportError
from newsrank.core.models import Article, ArticleLink, ListingPage, Partition
from newsrank.core.utils import elapsed_ms
from newsrank.crawl.aggregator import CommentAggregator
from newsrank.crawl.discovery import PaginationDiscoverer
from newsrank.crawl.governor import ConcurrencyGovernor, ConcurrencyLimits
from newsrank.crawl.ranking import RankingStore
from newsrank.infra.logging import log_error, log_performance, log_task_end, log_task_start, mdc_scope
from newsrank.scrape.http_client import PageFetcher
from newsrank.scrape.parser import PageParser
from newsrank.sources.base import SourceAdapter


@dataclass
class CrawlStats:
    partitions_ok: int = 0
    partitions_failed: int = 0
    pages: int = 0
    articles_recorded: int = 0
    articles_skipped: int = 0
    articles_failed: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def bump(self, name: str, n: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + n)

    def to_dict(self) -> Dict[str, int]:
        with self._lock:
            return {f.name: getattr(self, f.name) for f in fields(self) if not f.name.startswith("_")}


def _submit(ex: ThreadPoolExecutor, fn: Callable[..., Any], *args: Any) -> Future:
    # carry the MDC of the submitting thread into the worker
    return ex.submit(contextvars.copy_context().run, fn, *args)


class CrawlOrchestrator:
    def __init__(
        self,
        adapter: SourceAdapter,
        fetcher: PageFetcher,
        parser: PageParser,
        store: RankingStore,
        limits: Optional[ConcurrencyLimits] = None,
        logger: Optional[logging.Logger] = None,
        max_comment_pages: Optional[int] = None,
    ) -> None:
        self.adapter = adapter
        self.fetcher = fetcher
        self.parser = parser
        self.store = store
        self.limits = limits or ConcurrencyLimits.from_defaults(adapter.default_limits())
        self.governor = ConcurrencyGovernor(self.limits)
        self.logger = logger or logging.getLogger(__name__)
        self.max_comment_pages = max_comment_pages
        self.aggregator = CommentAggregator(fetcher, adapter.decoder, self.logger)
        self.stats = CrawlStats()
        self._cancel: Optional[threading.Event] = None

    def _cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    # ---------------- entry point ----------------

    def run(self, start: datetime, end: datetime, cancel: Optional[threading.Event] = None) -> CrawlStats:
        """Crawl every partition between ``start`` and ``end``.

        ``cancel`` is an optional event owned by the caller; once set, no new
        page probe or article pipeline starts and in-flight work drains.
        """
        self._cancel = cancel
        partitions = self.adapter.partitions(start, end)
        t0 = time.perf_counter()
        log_task_start(
            self.logger,
            "crawl",
            {"source": self.adapter.name, "partitions": len(partitions), "limits": asdict(self.limits)},
        )
        with mdc_scope(source=self.adapter.name):
            if self.adapter.sequential_partitions:
                for partition in partitions:
                    if self._cancelled():
                        break
                    self._run_partition(partition)
            else:
                with ThreadPoolExecutor(
                    max_workers=self.limits.partitions, thread_name_prefix=f"{self.adapter.name}-part"
                ) as ex:
                    futures = [_submit(ex, self._run_partition, p) for p in partitions]
                    wait(futures)
        log_task_end(
            self.logger,
            "crawl",
            self.stats.partitions_failed == 0,
            {**self.stats.to_dict(), "elapsed_ms": elapsed_ms(t0), "gates": self.governor.stats()},
        )
        return self.stats

    # ---------------- partitions ----------------

    def _run_partition(self, partition: Partition) -> None:
        t0 = time.perf_counter()
        with mdc_scope(partition=partition.label), self.governor.partition:
            try:
                pages = self._discover_and_dispatch(partition)
            except TransportError as e:
                self.stats.bump("partitions_failed")
                self.logger.error("aborting %s: %s", partition.label, e)
                return
            except Exception as e:
                self.stats.bump("partitions_failed")
                log_error(self.logger, e, f"error processing {partition.label}")
                return
            self.stats.bump("partitions_ok")
            log_performance(self.logger, "partition_ms", elapsed_ms(t0), {"partition": partition.label, "pages": pages})

    def _discover_and_dispatch(self, partition: Partition) -> int:
        discoverer = PaginationDiscoverer(self.fetcher, self.parser, self.adapter, self.logger)
        futures: List[Future] = []
        with ThreadPoolExecutor(
            max_workers=self.limits.pages, thread_name_prefix=f"{self.adapter.name}-page"
        ) as page_ex:
            pages = discoverer.pages(partition, self._cancel)
            page = next(pages, None)
            while page is not None:
                with self.governor.page:
                    futures.append(_submit(page_ex, self._process_page, partition, page))
                    # the next() call is the existence probe for the following page
                    page = next(pages, None)
                # discovery may run at most one parsed page ahead of the page pool
                pending = [f for f in futures if not f.done()]
                while page is not None and len(pending) > self.limits.pages:
                    _, not_done = wait(pending, return_when=FIRST_COMPLETED)
                    pending = list(not_done)
            # leaving the executor waits for every dispatched page, also when
            # discovery raised above
        return len(futures)

    # ---------------- pages ----------------

    def _process_page(self, partition: Partition, page: ListingPage) -> None:
        t0 = time.perf_counter()
        try:
            links = self.adapter.extract_links(page.document)
            self.stats.bump("pages")
            if links:
                self._fan_out(links)
            log_performance(
                self.logger,
                "page_ms",
                elapsed_ms(t0),
                {"partition": partition.label, "page": page.number, "articles": len(links)},
            )
        except Exception as e:
            log_error(self.logger, e, f"error processing page {page.number} of {partition.label}")

    def _fan_out(self, links: List[ArticleLink]) -> None:
        with ThreadPoolExecutor(
            max_workers=self.limits.articles, thread_name_prefix=f"{self.adapter.name}-article"
        ) as ex:
            futures = [_submit(ex, self._run_article, link) for link in links]
            wait(futures)

    # ---------------- articles ----------------

    def _run_article(self, link: ArticleLink) -> None:
        if self._cancelled():
            self.stats.bump("articles_skipped")
            return
        t0 = time.perf_counter()
        with self.governor.article:
            try:
                article = self.process_article(link)
            except Exception as e:
                self.stats.bump("articles_failed")
                log_error(self.logger, e, f"error processing article {link.title}")
                return
        if article is None:
            self.stats.bump("articles_skipped")
            return
        self.store.record(article)
        self.stats.bump("articles_recorded")
        log_performance(self.logger, "article_ms", elapsed_ms(t0), {"title": link.title})

    def process_article(self, link: ArticleLink) -> Optional[Article]:
        """Full pipeline for one article; None means it is skipped."""
        res = self.fetcher.fetch(link.url)
        if not res.ok or not res.body.strip():
            self.logger.error("empty or failed response (status %s) for %s", res.status, link.url)
            return None
        document = self.parser.parse(res.body)
        try:
            endpoint = self.adapter.comment_endpoint(document, link.url)
        except MissingCommentIdentity as e:
            self.logger.warning("%s", e)
            return None
        if endpoint is None:
            self.logger.warning("No comment section found for %s", link.url)
            return Article(title=link.title, url=link.url, total_likes=0)

        t0 = time.perf_counter()
        policy = self.adapter.comment_policy(self.max_comment_pages)
        total = self.aggregator.aggregate(endpoint, policy)
        log_performance(self.logger, "comments_ms", elapsed_ms(t0), {"title": link.title, "likes": total})
        return Article(title=link.title, url=link.url, total_likes=total)
