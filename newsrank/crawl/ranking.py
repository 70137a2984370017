from __future__ import annotations

import logging
import threading
from typing import List, Optional

from newsrank.core.models import Article


class RankingStore:
    """Append-only, thread-safe collection of articles with a ranked view."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._articles: List[Article] = []
        self._lock = threading.Lock()
        self.logger = logger or logging.getLogger(__name__)

    def record(self, article: Article) -> None:
        with self._lock:
            self._articles.append(article)
        self.logger.info("Added article: %d - %s - %s", article.total_likes, article.title, article.url)

    def snapshot(self) -> List[Article]:
        with self._lock:
            return list(self._articles)

    def top(self, n: Optional[int] = None) -> List[Article]:
        """The ``n`` most liked articles (all when ``n`` is None).

        ``sorted`` is stable, so equal scores keep their insertion order.
        """
        ranked = sorted(self.snapshot(), key=lambda a: a.total_likes, reverse=True)
        if n is None:
            return ranked
        return ranked[: max(0, n)]

    def count(self) -> int:
        with self._lock:
            return len(self._articles)

    def __len__(self) -> int:
        return self.count()
