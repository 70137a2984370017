from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

DEFAULT_TIMEOUT: int = 30
DEFAULT_POOL_SIZE: int = 128
DEFAULT_TOP_N: int = 10

# Desktop browser strings rotated per request.
DEFAULT_USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

_ENV_KEYS = {
    "NR_TIMEOUT": "timeout",
    "NR_POOL_SIZE": "pool_size",
    "NR_MAX_PARTITIONS": "max_partitions",
    "NR_MAX_PAGES": "max_pages",
    "NR_MAX_ARTICLES": "max_articles",
    "NR_MAX_COMMENT_PAGES": "max_comment_pages",
    "NR_TOP_N": "top_n",
}


def load_config_file(path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    """Load a YAML or JSON config file into a dict; missing file gives {}."""
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}

    with p.open("r", encoding="utf-8") as f:
        if p.suffix.lower() in (".yml", ".yaml"):
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"invalid YAML in {p}: {e}") from e
        else:
            data = json.load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config root must be a mapping: {p}")
    return data


def load_env() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for env_name, key in _ENV_KEYS.items():
        v = os.getenv(env_name)
        if v is None or not v.strip():
            continue
        try:
            out[key] = int(v)
        except ValueError:
            raise ValueError(f"{env_name} must be an integer, got {v!r}") from None
    return out


def merge_config(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Merge config layers left to right; later non-None values win."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        for k, v in (layer or {}).items():
            if v is not None:
                merged[k] = v
    return merged


@dataclass
class CrawlConfig:
    timeout: int = DEFAULT_TIMEOUT
    pool_size: int = DEFAULT_POOL_SIZE
    # None means "use the source's tuned default"
    max_partitions: Optional[int] = None
    max_pages: Optional[int] = None
    max_articles: Optional[int] = None
    max_comment_pages: Optional[int] = None
    top_n: int = DEFAULT_TOP_N
    user_agents: List[str] = field(default_factory=lambda: list(DEFAULT_USER_AGENTS))

    @classmethod
    def from_mapping(cls, conf: Mapping[str, Any]) -> "CrawlConfig":
        def _opt_int(key: str) -> Optional[int]:
            v = conf.get(key)
            return int(v) if v is not None else None

        agents = conf.get("user_agents")
        cfg = cls(
            timeout=int(conf.get("timeout") or DEFAULT_TIMEOUT),
            pool_size=int(conf.get("pool_size") or DEFAULT_POOL_SIZE),
            max_partitions=_opt_int("max_partitions"),
            max_pages=_opt_int("max_pages"),
            max_articles=_opt_int("max_articles"),
            max_comment_pages=_opt_int("max_comment_pages"),
            top_n=int(conf.get("top_n") or DEFAULT_TOP_N),
            user_agents=[str(a) for a in agents] if isinstance(agents, list) and agents else list(DEFAULT_USER_AGENTS),
        )
        for name in ("max_partitions", "max_pages", "max_articles", "max_comment_pages"):
            v = getattr(cfg, name)
            if v is not None and v < 1:
                raise ValueError(f"{name} must be >= 1, got {v}")
        return cfg
