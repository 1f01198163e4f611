"""
Thread-safe cache for computed metrics.

Keyed by strings built from the snapshot ID, lookback period, benchmark and
metric kind so that identical requests against the same snapshot reuse
earlier results.
"""

from typing import Any, Dict, Optional
import logging
import threading

logger = logging.getLogger(__name__)


def cache_key(snapshot_id: Optional[str], period: Optional[str], benchmark_name: str, kind: str,
              *params: Any) -> str:
    """Key for one result; ``params`` are the analysis settings the result depends on."""
    key = f"{kind}:{snapshot_id or 'anonymous'}:{period or 'ALL'}:{benchmark_name}"
    if params:
        key += ":" + ":".join(str(p) for p in params)
    return key


class MetricsCache:
    """Key/value store guarded by a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        """Cached value for ``key`` or None."""
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug(f"Cleared {count} cached metric entries")

    def clear_key(self, key: str) -> bool:
        """Drop one entry; True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
