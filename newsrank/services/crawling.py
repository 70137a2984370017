from __future__ import annotations

import threading
import time
from datetime import date
from typing import Any, Dict, List, Optional

from newsrank.core.config import CrawlConfig
from newsrank.core.dates import resolve_range
from newsrank.core.models import CrawlSummary
from newsrank.crawl.governor import ConcurrencyLimits
from newsrank.crawl.orchestrator import CrawlOrchestrator
from newsrank.crawl.ranking import RankingStore
from newsrank.infra.logging import get_unified_logger, unified_print
from newsrank.scrape.http_client import HttpFetcher, PageFetcher
from newsrank.scrape.parser import PageParser, SoupParser
from newsrank.sources.registry import get_adapter


def limits_for(adapter_defaults: Dict[str, int], cfg: CrawlConfig) -> ConcurrencyLimits:
    return ConcurrencyLimits.from_defaults(
        adapter_defaults,
        {"partitions": cfg.max_partitions, "pages": cfg.max_pages, "articles": cfg.max_articles},
    )


def crawl(
    source: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    conf: Optional[Dict[str, Any]] = None,
    fetcher: Optional[PageFetcher] = None,
    parser: Optional[PageParser] = None,
    cancel: Optional[threading.Event] = None,
) -> CrawlSummary:
    """Crawl ``source`` between two dates and return the ranked summary.

    The source name is validated before anything is fetched.
    """
    adapter = get_adapter(source)
    cfg = CrawlConfig.from_mapping(conf or {})
    start_dt, end_dt = resolve_range(start, end)
    unified_print(f"Crawl from {start_dt} to {end_dt} using {adapter.name} crawler.", "crawl", adapter.name)

    own_fetcher = fetcher is None
    http = fetcher or HttpFetcher(timeout=cfg.timeout, pool_size=cfg.pool_size, user_agents=cfg.user_agents)
    logger = get_unified_logger("crawl", adapter.name)
    store = RankingStore(get_unified_logger("ranking", adapter.name))
    orchestrator = CrawlOrchestrator(
        adapter,
        http,
        parser or SoupParser(),
        store,
        limits=limits_for(adapter.default_limits(), cfg),
        logger=logger,
        max_comment_pages=cfg.max_comment_pages,
    )
    t0 = time.perf_counter()
    try:
        stats = orchestrator.run(start_dt, end_dt, cancel=cancel)
    finally:
        if own_fetcher and isinstance(http, HttpFetcher):
            http.close()
    elapsed = round(time.perf_counter() - t0, 3)
    unified_print(f"Crawling completed in {elapsed} seconds.", "crawl", adapter.name)

    return CrawlSummary(
        source=adapter.name,
        start=start_dt.isoformat(),
        end=end_dt.isoformat(),
        total=store.count(),
        elapsed=elapsed,
        partitions_ok=stats.partitions_ok,
        partitions_failed=stats.partitions_failed,
        top=store.top(cfg.top_n),
    )


def format_summary(summary: CrawlSummary) -> List[str]:
    lines = [f"Total articles: {summary.total}"]
    for a in summary.top:
        lines.append(f"{a.total_likes} - {a.title} | {a.url}")
    return lines
