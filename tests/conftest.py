# -*- coding: utf-8 -*-
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root (newsrank) and this directory (helpers) are importable
_HERE = Path(__file__).resolve().parent
for _p in (_HERE.parent, _HERE):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

import pytest  # noqa: E402

from helpers import FakeFetcher  # noqa: E402
from newsrank.core.errors import TransportError  # noqa: E402


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def transport_error():
    def _make(url: str) -> TransportError:
        return TransportError(url, ConnectionError("connection reset"))

    return _make
