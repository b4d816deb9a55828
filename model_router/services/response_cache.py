"""In-memory cache for completed (non-streaming) generations."""

import hashlib
import json
import logging
import time
from dataclasses import dataclass
from typing import Callable

from model_router.providers.base import GenerateRequest, GenerateResponse

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached response and the time it was stored."""

    response: GenerateResponse
    stored_at: float


class ResponseCache:
    """
    Bounded TTL cache keyed by model and request parameters.

    When full, the oldest entry is evicted. Expired entries are dropped
    when read.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(model_id: str, request: GenerateRequest) -> str:
        """Hash the parameters that determine a generation's output."""
        key_data = {
            "model": model_id,
            "messages": request.to_openai_messages(),
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "tools": request.tools,
        }
        encoded = json.dumps(key_data, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()

    def get(self, key: str) -> GenerateResponse | None:
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._clock() - entry.stored_at > self.ttl_seconds:
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return entry.response

    def set(self, key: str, response: GenerateResponse) -> None:
        if self.max_size <= 0:
            return
        if key in self._entries:
            del self._entries[key]
        elif len(self._entries) >= self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug(f"Evicted cache entry {oldest[:12]}")
        self._entries[key] = CacheEntry(response=response, stored_at=self._clock())

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)
