"""In-memory stand-ins for the feed, the dead-letter channel and the cache."""

import json
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from orderstream.errors import CacheError
from orderstream.infrastructure.cache import CachePort, LRUCache
from orderstream.infrastructure.feed import DeadLetterChannelPort, FeedMessage, FeedPort


class InMemoryFeed(FeedPort):
    """Queue-backed feed that records acknowledgements."""

    def __init__(self):
        self.pending: List[FeedMessage] = []
        self.acked: List[str] = []
        self.closed = False
        self._next_id = 1

    def publish(self, payload, key: Optional[str] = None) -> FeedMessage:
        """Enqueue a payload (bytes, str, or a JSON-serializable object)."""
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        elif not isinstance(payload, bytes):
            payload = json.dumps(payload).encode("utf-8")
        message = FeedMessage(id=f"{self._next_id}-0", payload=payload, key=key)
        self._next_id += 1
        self.pending.append(message)
        return message

    def redeliver(self, message: FeedMessage) -> FeedMessage:
        """Hand an unacknowledged message out again, as a reclaim pass would."""
        again = replace(message, delivery_count=message.delivery_count + 1)
        self.pending.append(again)
        return again

    def fetch(self) -> Optional[FeedMessage]:
        if not self.pending:
            return None
        return self.pending.pop(0)

    def ack(self, message: FeedMessage) -> None:
        self.acked.append(message.id)

    def close(self) -> None:
        self.closed = True


class InMemoryDeadLetterChannel(DeadLetterChannelPort):
    """Records published payloads; can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.published: List[Dict] = []

    def publish(self, payload, key, reason, source_id=None, detail="") -> None:
        if self.fail:
            raise ConnectionError("dead-letter channel unavailable")
        self.published.append({
            "payload": payload,
            "key": key,
            "reason": reason,
            "source_id": source_id,
            "detail": detail,
        })


class FailingCache(CachePort):
    """Cache whose every operation raises CacheError."""

    def get(self, key):
        raise CacheError("cache down")

    def set(self, key, value):
        raise CacheError("cache down")

    def delete(self, key):
        raise CacheError("cache down")

    def keys(self):
        raise CacheError("cache down")


class RecordingCache(LRUCache):
    """LRU cache that logs every call as (operation, key)."""

    def __init__(self, capacity: int = 100):
        super().__init__(capacity)
        self.calls: List[Tuple[str, str]] = []

    def get(self, key):
        self.calls.append(("get", key))
        return super().get(key)

    def set(self, key, value):
        self.calls.append(("set", key))
        super().set(key, value)

    def delete(self, key):
        self.calls.append(("delete", key))
        super().delete(key)
