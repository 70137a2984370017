"""Admission gates bounding how much crawl work runs at once.

Three levels exist: partition, page and article. Each is a counting
semaphore entered with ``with gate:`` so release happens on every exit path.
A thread must take gates in level order (partition, page, article); taking a
lower level while holding a higher one is refused.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

PARTITION, PAGE, ARTICLE = 0, 1, 2
LEVEL_NAMES = {PARTITION: "partition", PAGE: "page", ARTICLE: "article"}


@dataclass(frozen=True)
class ConcurrencyLimits:
    partitions: int = 1
    pages: int = 1
    articles: int = 3

    def __post_init__(self) -> None:
        for name in ("partitions", "pages", "articles"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} limit must be >= 1")

    @classmethod
    def from_defaults(
        cls, defaults: Mapping[str, int], overrides: Optional[Mapping[str, Optional[int]]] = None
    ) -> "ConcurrencyLimits":
        merged: Dict[str, int] = dict(defaults)
        for k, v in (overrides or {}).items():
            if v is not None:
                merged[k] = v
        return cls(
            partitions=int(merged.get("partitions", 1)),
            pages=int(merged.get("pages", 1)),
            articles=int(merged.get("articles", 3)),
        )


class Gate:
    def __init__(self, name: str, level: int, capacity: int, governor: "ConcurrencyGovernor") -> None:
        if capacity < 1:
            raise ValueError(f"gate {name} needs capacity >= 1")
        self.name = name
        self.level = level
        self.capacity = capacity
        self._sem = threading.BoundedSemaphore(capacity)
        self._governor = governor
        self._stats_lock = threading.Lock()
        self.in_use = 0
        self.peak = 0
        self.admitted = 0

    def acquire(self) -> None:
        self._governor._check_order(self.level)
        self._sem.acquire()
        with self._stats_lock:
            self.in_use += 1
            self.admitted += 1
            self.peak = max(self.peak, self.in_use)
        self._governor._push(self.level)

    def release(self) -> None:
        self._governor._pop(self.level)
        with self._stats_lock:
            self.in_use -= 1
        self._sem.release()

    def __enter__(self) -> "Gate":
        self.acquire()
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()


class ConcurrencyGovernor:
    def __init__(self, limits: Optional[ConcurrencyLimits] = None) -> None:
        self.limits = limits or ConcurrencyLimits()
        self._held = threading.local()
        self.partition = Gate("partition", PARTITION, self.limits.partitions, self)
        self.page = Gate("page", PAGE, self.limits.pages, self)
        self.article = Gate("article", ARTICLE, self.limits.articles, self)

    def _stack(self) -> List[int]:
        stack = getattr(self._held, "levels", None)
        if stack is None:
            stack = []
            self._held.levels = stack
        return stack

    def _check_order(self, level: int) -> None:
        stack = self._stack()
        if stack and stack[-1] >= level:
            raise RuntimeError(
                f"gate order violation: {LEVEL_NAMES[level]} requested while holding {LEVEL_NAMES[stack[-1]]}"
            )

    def _push(self, level: int) -> None:
        self._stack().append(level)

    def _pop(self, level: int) -> None:
        stack = self._stack()
        if stack and stack[-1] == level:
            stack.pop()
        elif level in stack:
            stack.remove(level)

    def stats(self) -> Dict[str, Dict[str, int]]:
        return {
            g.name: {"capacity": g.capacity, "peak": g.peak, "admitted": g.admitted}
            for g in (self.partition, self.page, self.article)
        }
