# app/clients/query_cache.py
"""
Small keyed cache for server state (roles, permissions).

Keys are tuples; invalidate/cancel match by prefix, so ("roles",) covers
("roles", 3) too.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.clients.api_client import ApiClientError

logger = logging.getLogger(__name__)

QueryKey = Tuple[Any, ...]


@dataclass
class _Entry:
    data: Any = None
    has_data: bool = False
    stale: bool = True
    fetcher: Optional[Callable[[], Any]] = None
    generation: int = 0


class QueryCache:
    def __init__(self) -> None:
        self._entries: Dict[QueryKey, _Entry] = {}

    def _entry(self, key: QueryKey) -> _Entry:
        return self._entries.setdefault(tuple(key), _Entry())

    def _matching(self, key: QueryKey) -> List[QueryKey]:
        prefix = tuple(key)
        return [k for k in self._entries if k[:len(prefix)] == prefix]

    def _run(self, key: QueryKey) -> Any:
        entry = self._entry(key)
        generation = entry.generation
        result = entry.fetcher()
        if entry.generation != generation:
            logger.debug("Discarding cancelled fetch for %s", key)
            return entry.data
        entry.data = result
        entry.has_data = True
        entry.stale = False
        return result

    def fetch_query(self, key: QueryKey, fetcher: Callable[[], Any]) -> Any:
        """Fresh cached data, else run (and remember) the fetcher. Errors propagate."""
        entry = self._entry(key)
        entry.fetcher = fetcher
        if entry.has_data and not entry.stale:
            return entry.data
        return self._run(key)

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(tuple(key))
        return entry.data if entry else None

    def set_query_data(self, key: QueryKey, value: Any) -> Any:
        """`value` may be a callable taking the old data (updater form)."""
        entry = self._entry(key)
        new = value(entry.data) if callable(value) else value
        entry.data = new
        entry.has_data = True
        return new

    def cancel_queries(self, key: QueryKey) -> None:
        for k in self._matching(key):
            self._entries[k].generation += 1

    def invalidate_queries(self, key: QueryKey) -> None:
        for k in self._matching(key):
            entry = self._entries[k]
            entry.stale = True
            if entry.fetcher is None:
                continue
            try:
                self._run(k)
            except ApiClientError as e:
                logger.warning("Refetch of %s failed, keeping stale data: %s", k, e)
