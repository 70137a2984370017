from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Article:
    """A ranked article. Created once per processed article, never updated."""

    title: str
    url: str
    total_likes: int = 0

    def __post_init__(self) -> None:
        if self.total_likes < 0:
            raise ValueError(f"total_likes must be >= 0, got {self.total_likes}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Category:
    name: str
    id: int
    class_name: str
    share_url: str


@dataclass(frozen=True)
class Partition:
    """Pagination scope for one source: a category over a unix range, or one day."""

    key: str
    category_id: Optional[int] = None
    from_unix: Optional[int] = None
    to_unix: Optional[int] = None
    day: Optional[date] = None

    @property
    def label(self) -> str:
        if self.day is not None:
            return self.day.strftime("%d-%m-%Y")
        return f"category {self.category_id}"


@dataclass(frozen=True)
class CommentEndpoint:
    object_id: str
    object_type: str


@dataclass(frozen=True)
class ArticleLink:
    url: str
    title: str


@dataclass(frozen=True)
class FetchResult:
    url: str
    ok: bool
    status: int
    body: str = ""


@dataclass
class ListingPage:
    number: int
    url: str
    document: Any


@dataclass
class CrawlSummary:
    source: str
    start: str
    end: str
    total: int
    elapsed: float
    partitions_ok: int = 0
    partitions_failed: int = 0
    top: List[Article] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "start": self.start,
            "end": self.end,
            "total": self.total,
            "elapsed": self.elapsed,
            "partitions_ok": self.partitions_ok,
            "partitions_failed": self.partitions_failed,
            "top": [a.to_dict() for a in self.top],
        }
