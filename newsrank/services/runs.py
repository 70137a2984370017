from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from newsrank.core.models import CrawlSummary
from newsrank.core.utils import ensure_directory, now_stamp


def runs_base_dir() -> Path:
    """Directory holding one sub-directory per run (``NR_RUNS_DIR`` or ./runs)."""
    return Path(os.getenv("NR_RUNS_DIR") or "runs")


def new_run_dir(base: Optional[Path] = None, stamp: Optional[str] = None) -> Path:
    return ensure_directory((base or runs_base_dir()) / (stamp or now_stamp()))


def save_ranking_json(summary: CrawlSummary, stamp: Optional[str] = None, base: Optional[Path] = None) -> Path:
    """Write ``runs/<stamp>/ranking.json`` and return its path."""
    out_path = new_run_dir(base, stamp) / "ranking.json"
    out_path.write_text(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    return out_path
