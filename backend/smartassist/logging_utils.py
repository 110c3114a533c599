# smartassist/logging_utils.py
"""
Two kinds of logs:
  - module loggers (logging.getLogger(__name__) under "smartassist.*") go to
    stderr once configure_logging() has run, which create_app() does;
  - named channels from setup_logger("upstream"), setup_logger("api") each get
    their own file <LOG_DIR>/<name>.log and do not propagate.

Env: LOG_DIR (default 'logs'), LOG_LEVEL (default 'INFO'), LOG_FORMAT ('plain' or 'json').
"""
import json
import logging
import os
from pathlib import Path

PACKAGE_LOGGER = "smartassist"
PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per line; the message is escaped properly."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "t": self.formatTime(record),
            "lv": record.levelname,
            "lg": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _level() -> int:
    value = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    return value if isinstance(value, int) else logging.INFO


def _formatter() -> logging.Formatter:
    if os.getenv("LOG_FORMAT", "plain").lower() == "json":
        return JsonLineFormatter()
    return logging.Formatter(PLAIN_FORMAT)


def configure_logging() -> logging.Logger:
    """Attach a single stderr handler to the package logger (idempotent)."""
    root = logging.getLogger(PACKAGE_LOGGER)
    root.setLevel(_level())
    if not any(getattr(h, "_smartassist_console", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler._smartassist_console = True
        handler.setFormatter(_formatter())
        root.addHandler(handler)
    return root


def setup_logger(name: str) -> logging.Logger:
    """
    Create or return the file-backed channel logger "smartassist.<name>".
    Safe to call repeatedly (uvicorn --reload, per-request calls).
    """
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    logfile = str(log_dir / f"{name}.log")

    logger = logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
    logger.setLevel(_level())
    logger.propagate = False

    if not any(getattr(h, "_smartassist_logfile", None) == logfile for h in logger.handlers):
        fh = logging.FileHandler(logfile, encoding="utf-8")
        fh._smartassist_logfile = logfile
        fh.setFormatter(_formatter())
        logger.addHandler(fh)
    return logger


def _kv_value(value) -> str:
    text = str(value)
    return json.dumps(text) if (not text or " " in text or "=" in text) else text


def log_kv(logger: logging.Logger, level: int = logging.INFO, **kv):
    """
    One line of key=val pairs; values with spaces are quoted.
    Example: log_kv(log, event="end", stage="ai-diagnose", outcome="ok", elapsed_ms=1234)
    """
    logger.log(level, " ".join(f"{k}={_kv_value(v)}" for k, v in kv.items()))
