from __future__ import annotations

import json

from helpers import FakeFetcher
from newsrank.core.models import CommentEndpoint, FetchResult
from newsrank.crawl.aggregator import (
    AggregationState,
    CommentAggregator,
    GrowingWindowPolicy,
    UnboundedPagePolicy,
)
from newsrank.sources.tuoitre import TuoiTreAdapter, TuoiTreDecoder
from newsrank.sources.vnexpress import VnExpressAdapter, VnExpressDecoder

EP = CommentEndpoint(object_id="4711", object_type="1")


def _vne_body(likes) -> str:
    return json.dumps({"data": {"items": [{"userlike": n} for n in likes]}})


def _tt_body(reactions) -> str:
    return json.dumps({"Data": json.dumps([{"reactions": r} for r in reactions])})


def _vne_url(offset: int, limit: int) -> str:
    return VnExpressAdapter.comment_url(AggregationState(endpoint=EP, offset=offset, limit=limit))


def _tt_url(page: int) -> str:
    return TuoiTreAdapter.comment_url(AggregationState(endpoint=EP, page=page))


def test_growing_window_requests_and_sum():
    # limits grow 1000, 2000, 3000; the third batch is short and ends the walk
    fetcher = FakeFetcher(
        {
            _vne_url(0, 1000): _vne_body([1] * 1000),
            _vne_url(1000, 2000): _vne_body([2] * 2000),
            _vne_url(3000, 3000): _vne_body([3] * 437),
        }
    )
    agg = CommentAggregator(fetcher, VnExpressDecoder())
    total = agg.aggregate(EP, VnExpressAdapter().comment_policy())

    assert total == 1000 * 1 + 2000 * 2 + 437 * 3
    assert fetcher.calls == [_vne_url(0, 1000), _vne_url(1000, 2000), _vne_url(3000, 3000)]


def test_growing_window_stops_when_count_below_limit():
    # a full page of the previous size is short for the grown limit
    fetcher = FakeFetcher(
        {
            _vne_url(0, 1000): _vne_body([1] * 1000),
            _vne_url(1000, 2000): _vne_body([1] * 1000),
        }
    )
    agg = CommentAggregator(fetcher, VnExpressDecoder())
    assert agg.aggregate(EP, VnExpressAdapter().comment_policy()) == 2000
    assert len(fetcher.calls) == 2


def test_growing_window_small_base_limit():
    def url(state: AggregationState) -> str:
        return f"c?o={state.offset}&l={state.limit}"

    fetcher = FakeFetcher(
        {
            "c?o=0&l=2": _vne_body([5, 5]),
            "c?o=2&l=4": _vne_body([1, 1, 1, 1]),
            "c?o=6&l=6": _vne_body([7]),
        }
    )
    agg = CommentAggregator(fetcher, VnExpressDecoder())
    assert agg.aggregate(EP, GrowingWindowPolicy(url, base_limit=2)) == 21


def test_unbounded_pages_until_empty():
    fetcher = FakeFetcher(
        {
            _tt_url(1): _tt_body([{"like": 3, "love": 2}, {"haha": 1}]),
            _tt_url(2): _tt_body([{"like": 10}]),
            _tt_url(3): _tt_body([{}, {"sad": 4}]),
            _tt_url(4): _tt_body([]),
            _tt_url(5): _tt_body([{"like": 999}]),
        }
    )
    agg = CommentAggregator(fetcher, TuoiTreDecoder())
    assert agg.aggregate(EP, TuoiTreAdapter().comment_policy()) == 6 + 10 + 4
    assert _tt_url(5) not in fetcher.calls


def test_unbounded_page_ceiling_truncates():
    fetcher = FakeFetcher({_tt_url(p): _tt_body([{"like": 1}]) for p in range(1, 50)})
    agg = CommentAggregator(fetcher, TuoiTreDecoder())
    assert agg.aggregate(EP, TuoiTreAdapter().comment_policy(max_pages=3)) == 3
    assert len(fetcher.calls) == 3


def test_transport_failure_keeps_partial_total(transport_error):
    fetcher = FakeFetcher(
        {
            _tt_url(1): _tt_body([{"like": 4}]),
            _tt_url(2): transport_error(_tt_url(2)),
        }
    )
    agg = CommentAggregator(fetcher, TuoiTreDecoder())
    assert agg.aggregate(EP, TuoiTreAdapter().comment_policy()) == 4


def test_undecodable_and_empty_responses_stop():
    fetcher = FakeFetcher(
        {
            _tt_url(1): _tt_body([{"like": 2}]),
            _tt_url(2): "<html>not json</html>",
        }
    )
    agg = CommentAggregator(fetcher, TuoiTreDecoder())
    assert agg.aggregate(EP, TuoiTreAdapter().comment_policy()) == 2

    fetcher = FakeFetcher({_vne_url(0, 1000): FetchResult(url="x", ok=True, status=200, body="  ")})
    agg = CommentAggregator(fetcher, VnExpressDecoder())
    assert agg.aggregate(EP, VnExpressAdapter().comment_policy()) == 0


def test_error_status_on_first_page_gives_zero():
    agg = CommentAggregator(FakeFetcher(), VnExpressDecoder())
    assert agg.aggregate(EP, VnExpressAdapter().comment_policy()) == 0


def test_negative_weights_are_ignored():
    fetcher = FakeFetcher({_vne_url(0, 1000): _vne_body([3, -5, 2])})
    agg = CommentAggregator(fetcher, VnExpressDecoder())
    assert agg.aggregate(EP, VnExpressAdapter().comment_policy()) == 5
