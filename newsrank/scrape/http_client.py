"""HTTP fetching for listing pages, article pages and comment APIs."""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence

import requests
from requests.adapters import HTTPAdapter

from newsrank.core.config import DEFAULT_POOL_SIZE, DEFAULT_TIMEOUT, DEFAULT_USER_AGENTS
from newsrank.core.errors import TransportError
from newsrank.core.models import FetchResult


class PageFetcher(Protocol):
    def fetch(self, url: str) -> FetchResult:
        """Return the response for ``url``; raise TransportError if none arrives."""
        ...


class HttpFetcher:
    """:mod:`requests` session shared by all crawler threads.

    Retries are disabled: a failed request truncates the unit that issued it.
    """

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        pool_size: int = DEFAULT_POOL_SIZE,
        user_agents: Optional[Sequence[str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agents: List[str] = list(user_agents or DEFAULT_USER_AGENTS)
        self.session = session or requests.Session()
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _headers(self) -> dict:
        return {
            "User-Agent": random.choice(self.user_agents),
            "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
            "Accept-Language": "vi-VN,vi;q=0.9,en;q=0.8",
        }

    def fetch(self, url: str) -> FetchResult:
        try:
            r = self.session.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(url, e) from e
        if not r.encoding or r.encoding.lower() == "iso-8859-1":
            r.encoding = r.apparent_encoding or "utf-8"
        return FetchResult(url=url, ok=r.ok, status=r.status_code, body=r.text if r.ok else "")

    def close(self) -> None:
        self.session.close()
