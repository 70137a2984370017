from __future__ import annotations

from typing import Callable, Dict, Tuple

from newsrank.core.errors import UnknownSourceError
from newsrank.sources.base import SourceAdapter
from newsrank.sources.tuoitre import TuoiTreAdapter
from newsrank.sources.vnexpress import VnExpressAdapter

ADAPTERS: Dict[str, Callable[[], SourceAdapter]] = {
    VnExpressAdapter.name: VnExpressAdapter,
    TuoiTreAdapter.name: TuoiTreAdapter,
}


def source_names() -> Tuple[str, ...]:
    return tuple(ADAPTERS)


def get_adapter(name: str) -> SourceAdapter:
    key = (name or "").strip().lower()
    factory = ADAPTERS.get(key)
    if factory is None:
        raise UnknownSourceError(name, source_names())
    return factory()
