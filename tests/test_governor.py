from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from newsrank.crawl.governor import ConcurrencyGovernor, ConcurrencyLimits


def test_article_gate_bounds_parallelism():
    gov = ConcurrencyGovernor(ConcurrencyLimits(partitions=1, pages=1, articles=3))
    running = 0
    seen_max = 0
    lock = threading.Lock()

    def work(_: int) -> None:
        nonlocal running, seen_max
        with gov.article:
            with lock:
                running += 1
                seen_max = max(seen_max, running)
            time.sleep(0.01)
            with lock:
                running -= 1

    with ThreadPoolExecutor(max_workers=10) as ex:
        list(ex.map(work, range(30)))

    assert seen_max <= 3
    assert gov.article.peak <= 3
    assert gov.article.admitted == 30
    assert gov.article.in_use == 0


def test_gate_released_when_work_raises():
    gov = ConcurrencyGovernor(ConcurrencyLimits(partitions=1, pages=1, articles=1))
    for _ in range(3):
        with pytest.raises(RuntimeError):
            with gov.article:
                raise RuntimeError("boom")
    assert gov.article.in_use == 0
    # capacity is still available
    with gov.article:
        pass


def test_gates_must_be_taken_in_level_order():
    gov = ConcurrencyGovernor()
    with gov.partition, gov.page, gov.article:
        pass
    with gov.article:
        with pytest.raises(RuntimeError, match="gate order"):
            gov.page.acquire()
    assert gov.page.in_use == 0


def test_limits_validation_and_defaults():
    with pytest.raises(ValueError):
        ConcurrencyLimits(articles=0)
    limits = ConcurrencyLimits.from_defaults({"partitions": 1, "pages": 1, "articles": 5}, {"articles": None, "pages": 2})
    assert (limits.partitions, limits.pages, limits.articles) == (1, 2, 5)
