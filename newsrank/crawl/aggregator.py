"""Comment-thread aggregation.

An article's comment API is paginated; the aggregator walks it with a
source-specific :class:`CommentPolicy` and sums the per-comment like weight.
Empty, missing or undecodable responses end the walk with whatever total has
accumulated, and so does a transport failure at any depth.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from newsrank.core.errors import TransportError
from newsrank.core.models import CommentEndpoint
from newsrank.scrape.http_client import PageFetcher


class CommentDecoder(Protocol):
    def decode(self, body: str) -> Optional[List[Any]]:
        """Return the comment items of one API response, or None if undecodable."""
        ...

    def likes(self, item: Any) -> int:
        """Reaction weight of one decoded comment."""
        ...


@dataclass
class AggregationState:
    endpoint: CommentEndpoint
    offset: int = 0
    limit: int = 0
    page: int = 1
    total_likes: int = 0
    requests: int = 0
    truncated: bool = False


class CommentPolicy(ABC):
    """How to request the next comment page and when to stop."""

    def __init__(self, url_builder: Callable[[AggregationState], str]) -> None:
        self._url_builder = url_builder

    @abstractmethod
    def start(self, endpoint: CommentEndpoint) -> AggregationState: ...

    def request_url(self, state: AggregationState) -> str:
        return self._url_builder(state)

    @abstractmethod
    def advance(self, state: AggregationState, item_count: int) -> bool:
        """Move the cursor past a page of ``item_count`` items; False means stop."""


class GrowingWindowPolicy(CommentPolicy):
    """offset/limit paging where the limit itself grows by ``base_limit`` each round.

    A full page (``item_count == limit``) continues with ``offset += limit`` and
    ``limit += base_limit``; anything shorter is the last page.
    """

    def __init__(self, url_builder: Callable[[AggregationState], str], base_limit: int = 1000) -> None:
        super().__init__(url_builder)
        if base_limit < 1:
            raise ValueError("base_limit must be >= 1")
        self.base_limit = base_limit

    def start(self, endpoint: CommentEndpoint) -> AggregationState:
        return AggregationState(endpoint=endpoint, offset=0, limit=self.base_limit)

    def advance(self, state: AggregationState, item_count: int) -> bool:
        if item_count != state.limit:
            return False
        state.offset += state.limit
        state.limit += self.base_limit
        return True


class UnboundedPagePolicy(CommentPolicy):
    """page=1,2,3... until a page comes back empty.

    ``max_pages`` is an optional ceiling against endpoints that never return
    an empty page; hitting it marks the state as truncated.
    """

    def __init__(
        self, url_builder: Callable[[AggregationState], str], max_pages: Optional[int] = None
    ) -> None:
        super().__init__(url_builder)
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self.max_pages = max_pages

    def start(self, endpoint: CommentEndpoint) -> AggregationState:
        return AggregationState(endpoint=endpoint, page=1)

    def advance(self, state: AggregationState, item_count: int) -> bool:
        if item_count <= 0:
            return False
        if self.max_pages is not None and state.page >= self.max_pages:
            state.truncated = True
            return False
        state.page += 1
        return True


class CommentAggregator:
    def __init__(
        self, fetcher: PageFetcher, decoder: CommentDecoder, logger: Optional[logging.Logger] = None
    ) -> None:
        self.fetcher = fetcher
        self.decoder = decoder
        self.logger = logger or logging.getLogger(__name__)

    def _page_likes(self, items: List[Any]) -> int:
        total = 0
        for item in items:
            total += max(0, int(self.decoder.likes(item) or 0))
        return total

    def aggregate(self, endpoint: CommentEndpoint, policy: CommentPolicy) -> int:
        state = policy.start(endpoint)
        while True:
            url = policy.request_url(state)
            try:
                res = self.fetcher.fetch(url)
            except TransportError as e:
                self.logger.warning("comment request failed, keeping partial total %d: %s", state.total_likes, e)
                break
            state.requests += 1
            if not res.ok or not res.body.strip():
                self.logger.warning("empty comment response (status %s) for %s", res.status, url)
                break
            items = self.decoder.decode(res.body)
            if not items:
                break
            state.total_likes += self._page_likes(items)
            if not policy.advance(state, len(items)):
                break

        if state.truncated:
            self.logger.warning(
                "comment page ceiling reached for %s/%s after %d requests",
                endpoint.object_id,
                endpoint.object_type,
                state.requests,
            )
        self.logger.debug(
            "aggregated %d likes for %s in %d requests", state.total_likes, endpoint.object_id, state.requests
        )
        return state.total_likes
