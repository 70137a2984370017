from __future__ import annotations

import time
from pathlib import Path
from typing import Union


def now_stamp() -> str:
    """Return a YYYYMMDD_HHMMSS timestamp."""
    return time.strftime("%Y%m%d_%H%M%S")


def ensure_directory(path: Union[str, Path]) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def elapsed_ms(t0: float) -> float:
    return round((time.perf_counter() - t0) * 1000.0, 1)
