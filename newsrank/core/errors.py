from __future__ import annotations

from typing import Optional


class NewsRankError(Exception):
    """Base class for crawler errors."""


class TransportError(NewsRankError):
    """The request never produced an HTTP response (DNS, connect, timeout...)."""

    def __init__(self, url: str, cause: Optional[BaseException] = None) -> None:
        self.url = url
        self.cause = cause
        msg = f"transport failure for {url}"
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)


class MissingCommentIdentity(NewsRankError):
    """Comment section exists but carries no object id/type."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"comment section without object id/type: {url}")


class UnknownSourceError(NewsRankError):
    def __init__(self, name: str, known: tuple) -> None:
        self.name = name
        self.known = known
        super().__init__(
            f"Invalid crawler type {name!r}. Please specify one of: {', '.join(known)}."
        )
