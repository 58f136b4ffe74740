from __future__ import annotations

import hashlib
from collections import OrderedDict

from moderation_service.domain.models import ValidationResult

DEFAULT_CACHE_SIZE = 10_000


def fingerprint(content: str, context: str) -> str:
    """128-bit BLAKE2b digest of a (context, content) pair."""
    digest = hashlib.blake2b(digest_size=16)
    digest.update(f"{len(context)}:{context}".encode("utf-8"))
    digest.update(content.encode("utf-8", errors="surrogatepass"))
    return digest.hexdigest()


class ResultCache:
    """Least-recently-used store of validation results.

    No locking: concurrent misses on the same key both compute the result,
    and the last write wins.
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {capacity}.")
        self._capacity = capacity
        self._entries: OrderedDict[str, ValidationResult] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: str) -> ValidationResult | None:
        result = self._entries.get(key)
        if result is not None:
            self._entries.move_to_end(key)
        return result

    def put(self, key: str, result: ValidationResult) -> None:
        self._entries[key] = result
        self._entries.move_to_end(key)
        while len(self._entries) > self._capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
