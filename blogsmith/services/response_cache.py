from __future__ import annotations

import time
from collections import OrderedDict
from typing import Any, Dict, Tuple

from blogsmith.core.config import settings


class ResponseCache:
    """Per-process cache of public post payloads, keyed by post id.

    Entries expire ``ttl_seconds`` after being stored; past ``max_entries`` the
    least recently read post is dropped. Writers call ``invalidate`` after
    changing or deleting a post.
    """

    def __init__(self, max_entries: int = 256, ttl_seconds: int = 900) -> None:
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        # post id -> (deadline, payload)
        self._entries: "OrderedDict[str, Tuple[float, Dict[str, Any]]]" = OrderedDict()

    def get(self, post_id: str) -> Dict[str, Any] | None:
        entry = self._entries.get(post_id)
        if entry is None:
            return None
        deadline, payload = entry
        if time.monotonic() >= deadline:
            del self._entries[post_id]
            return None
        self._entries.move_to_end(post_id)
        return payload

    def set(self, post_id: str, payload: Dict[str, Any]) -> None:
        self._entries[post_id] = (time.monotonic() + self._ttl_seconds, payload)
        self._entries.move_to_end(post_id)
        if len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, post_id: str) -> None:
        self._entries.pop(post_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


response_cache = ResponseCache(
    max_entries=settings.RESPONSE_CACHE_MAX_ENTRIES,
    ttl_seconds=settings.RESPONSE_CACHE_TTL_SECONDS,
)
