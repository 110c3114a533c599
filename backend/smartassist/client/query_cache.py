# smartassist/client/query_cache.py
from typing import Any, Callable, Dict, Hashable, Tuple, Union

QueryKey = Tuple[Hashable, ...]


def _as_key(key: Union[str, QueryKey]) -> QueryKey:
    return (key,) if isinstance(key, str) else tuple(key)


class QueryCache:
    """
    Explicit query cache shared by the pages that are given it.

    Keys are tuples whose first element is the endpoint path, e.g.
    ("/api/technicians", "Oakland", "hvac"). Invalidating "/api/technicians"
    drops every key under that path. Failed fetches are never stored.
    """

    def __init__(self) -> None:
        self._entries: Dict[QueryKey, Any] = {}
        self.fetch_count = 0

    def __contains__(self, key) -> bool:
        return _as_key(key) in self._entries

    def get(self, key, default=None):
        return self._entries.get(_as_key(key), default)

    def fetch(self, key, fn: Callable[[], Any]) -> Any:
        k = _as_key(key)
        if k in self._entries:
            return self._entries[k]
        value = fn()
        self.fetch_count += 1
        self._entries[k] = value
        return value

    def invalidate(self, prefix) -> int:
        p = _as_key(prefix)
        stale = [k for k in self._entries if k[:len(p)] == p]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
