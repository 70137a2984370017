from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor

from newsrank.infra.logging import (
    JSONFormatter,
    MDCFilter,
    build_logging_config,
    get_unified_logger,
    mdc_get,
    mdc_scope,
)
from newsrank.crawl.orchestrator import _submit


def test_mdc_scope_nests_and_restores():
    assert mdc_get("source") is None
    with mdc_scope(source="vnexpress"):
        with mdc_scope(partition="category 1"):
            assert mdc_get("source") == "vnexpress"
            assert mdc_get("partition") == "category 1"
        assert mdc_get("partition") is None
    assert mdc_get("source") is None


def test_mdc_is_carried_into_worker_threads():
    with mdc_scope(partition="01-05-2024"), ThreadPoolExecutor(max_workers=1) as ex:
        fut = _submit(ex, mdc_get, "partition")
        assert fut.result() == "01-05-2024"


def test_json_formatter_includes_mdc():
    record = logging.LogRecord("newsrank.crawl.tuoitre", logging.INFO, __file__, 1, "Added %s", ("x",), None)
    with mdc_scope(source="tuoitre"):
        MDCFilter().filter(record)
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Added x"
    assert payload["mdc"] == {"source": "tuoitre"}
    assert record.mdc_suffix == " | source=tuoitre"


def test_build_config_from_env(monkeypatch):
    monkeypatch.setenv("NR_LOG_LEVEL", "trace")
    monkeypatch.setenv("NR_LOG_JSON", "1")
    conf = build_logging_config()
    assert conf["root"]["level"] == 5
    assert conf["handlers"]["console"]["formatter"] == "json"


def test_unified_logger_names():
    assert get_unified_logger("crawl", "vnexpress").name == "newsrank.crawl.vnexpress"
