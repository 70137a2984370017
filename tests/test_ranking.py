from __future__ import annotations

import threading

import pytest

from newsrank.core.models import Article
from newsrank.crawl.ranking import RankingStore


def _a(title: str, likes: int) -> Article:
    return Article(title=title, url=f"https://example.vn/{title}", total_likes=likes)


def test_top_sorted_desc_ties_keep_insertion_order():
    store = RankingStore()
    for a in [_a("a", 5), _a("b", 9), _a("c", 5), _a("d", 0), _a("e", 9)]:
        store.record(a)

    ranked = store.top()
    assert [a.title for a in ranked] == ["b", "e", "a", "c", "d"]


@pytest.mark.parametrize("k,expected", [(0, 0), (2, 2), (3, 3), (10, 3)])
def test_top_returns_min_k_count(k, expected):
    store = RankingStore()
    for i in range(3):
        store.record(_a(str(i), i))
    assert len(store.top(k)) == expected


def test_top_does_not_mutate_store():
    store = RankingStore()
    store.record(_a("low", 1))
    store.record(_a("high", 100))
    store.top(1)
    assert [a.title for a in store.snapshot()] == ["low", "high"]
    assert len(store) == 2


def test_concurrent_records_are_all_kept():
    store = RankingStore()

    def worker(n: int) -> None:
        for i in range(50):
            store.record(_a(f"{n}-{i}", i))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.count() == 400
    assert store.top(1)[0].total_likes == 49


def test_article_rejects_negative_likes():
    with pytest.raises(ValueError):
        Article(title="x", url="u", total_likes=-1)
