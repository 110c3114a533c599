import json
import logging

import pytest

from smartassist.logging_utils import JsonLineFormatter, log_kv, setup_logger
from smartassist.timing import timed_block, timeit


def _read(name, tmp_path):
    for h in logging.getLogger(f"smartassist.{name}").handlers:
        h.flush()
    return (tmp_path / f"{name}.log").read_text(encoding="utf-8")


def test_log_kv_quotes_values_with_spaces(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    log = setup_logger("kvtest")
    log_kv(log, event="validation-error", detail="issue: field required", n=3)
    line = _read("kvtest", tmp_path).strip().splitlines()[-1]
    assert line.endswith('event=validation-error detail="issue: field required" n=3')


def test_setup_logger_is_idempotent(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    first = setup_logger("dedup")
    second = setup_logger("dedup")
    assert first is second
    assert len([h for h in first.handlers if getattr(h, "_smartassist_logfile", None)]) == 1


def test_timed_block_logs_outcome(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    with timed_block("unit-ok", model="m1"):
        pass
    with pytest.raises(ValueError):
        with timed_block("unit-fail"):
            raise ValueError("boom")

    text = _read("upstream", tmp_path)
    assert "event=start stage=unit-ok model=m1" in text
    assert "stage=unit-ok outcome=ok" in text
    assert "stage=unit-fail outcome=error" in text


def test_timeit_returns_wrapped_value(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))

    @timeit("unit-decorated")
    def add(a, b):
        return a + b

    assert add(2, 3) == 5
    assert "stage=unit-decorated outcome=ok" in _read("upstream", tmp_path)


def test_json_formatter_escapes_message():
    record = logging.LogRecord("smartassist.x", logging.INFO, __file__, 1, 'said "hi"', None, None)
    entry = json.loads(JsonLineFormatter().format(record))
    assert entry["msg"] == 'said "hi"'
    assert entry["lv"] == "INFO"
