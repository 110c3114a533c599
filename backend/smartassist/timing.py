# smartassist/timing.py
from time import perf_counter
from functools import wraps
from contextlib import contextmanager
from .logging_utils import setup_logger, log_kv

LOGGER_NAME = "upstream"

def timeit(stage: str):
    """
    Decorator that logs start/end + elapsed_ms of a call to logs/upstream.log.
    Usage:
        @timeit("recompute-rating")
        def recompute(...): ...
    """
    def _decorator(fn):
        @wraps(fn)
        def _wrapped(*args, **kwargs):
            with timed_block(stage):
                return fn(*args, **kwargs)
        return _wrapped
    return _decorator

@contextmanager
def timed_block(stage: str, **extra):
    """
    Context manager for ad-hoc blocks, mostly calls to external services:
        with timed_block("ai-diagnose", model=model):
            ... call the API ...
    An exception is logged as outcome=error and re-raised.
    """
    log = setup_logger(LOGGER_NAME)
    log_kv(log, event="start", stage=stage, **extra)
    start = perf_counter()
    outcome = "ok"
    try:
        yield
    except Exception:
        outcome = "error"
        raise
    finally:
        elapsed_ms = int((perf_counter() - start) * 1000)
        log_kv(log, event="end", stage=stage, outcome=outcome, elapsed_ms=elapsed_ms)
