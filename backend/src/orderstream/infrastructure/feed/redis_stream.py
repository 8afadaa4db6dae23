"""Redis Streams adapters for the order feed and the dead-letter channel.

The feed is a consumer group on ORDER_STREAM: XREADGROUP delivers new
entries, XACK acknowledges them, and entries left unacknowledged for longer
than reclaim_idle_ms are taken back with XAUTOCLAIM and delivered again.
That reclaim pass is what gives at-least-once redelivery of messages the
worker declined to acknowledge. XAUTOCLAIM bumps the entry's delivery
counter, which is read back from XPENDING and reported on the message.
"""

import logging
import time
from typing import Optional

import redis
from redis.exceptions import ResponseError

from ...config import Settings
from .port import DeadLetterChannelPort, FeedMessage, FeedPort

logger = logging.getLogger(__name__)

PAYLOAD_FIELD = b"payload"
KEY_FIELD = b"key"


def create_redis_client(settings: Settings) -> redis.Redis:
    """Create a Redis client whose socket timeout outlasts a blocking read.

    Args:
        settings: Application settings

    Returns:
        redis.Redis: Client returning raw bytes
    """
    socket_timeout = max(
        settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        settings.FEED_BLOCK_MS / 1000 + 1,
    )
    return redis.Redis.from_url(
        settings.REDIS_URL,
        socket_timeout=socket_timeout,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        decode_responses=False,
    )


def _text(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


class RedisStreamFeed(FeedPort):
    """Consumer-group reader over a Redis stream.

    Args:
        client: Redis client (decode_responses=False)
        stream: Stream key
        group: Consumer group name
        consumer: Consumer name within the group
        block_ms: Longest a single fetch may block
        reclaim_idle_ms: Pending entries idle at least this long are
            reclaimed and redelivered; 0 disables reclaiming
    """

    def __init__(
        self,
        client: redis.Redis,
        stream: str,
        group: str,
        consumer: str,
        block_ms: int = 1000,
        reclaim_idle_ms: int = 60_000,
    ):
        self.client = client
        self.stream = stream
        self.group = group
        self.consumer = consumer
        self.block_ms = block_ms
        self.reclaim_idle_ms = reclaim_idle_ms
        self._reclaim_cursor = "0-0"
        self._next_reclaim_at = 0.0

    @classmethod
    def from_settings(cls, client: redis.Redis, settings: Settings) -> "RedisStreamFeed":
        return cls(
            client=client,
            stream=settings.ORDER_STREAM,
            group=settings.ORDER_CONSUMER_GROUP,
            consumer=settings.ORDER_CONSUMER_NAME,
            block_ms=settings.FEED_BLOCK_MS,
            reclaim_idle_ms=settings.FEED_RECLAIM_IDLE_MS,
        )

    def ensure_group(self) -> None:
        """Create the consumer group (and the stream) if missing."""
        try:
            self.client.xgroup_create(self.stream, self.group, id="0", mkstream=True)
            logger.info(f"Created consumer group '{self.group}' on stream '{self.stream}'")
        except ResponseError as e:
            if "BUSYGROUP" not in str(e):
                raise

    def fetch(self) -> Optional[FeedMessage]:
        message = self._reclaim_idle()
        if message is not None:
            return message

        response = self.client.xreadgroup(
            self.group,
            self.consumer,
            {self.stream: ">"},
            count=1,
            block=self.block_ms,
        )
        if not response:
            return None

        _stream, entries = response[0]
        if not entries:
            return None

        entry_id, fields = entries[0]
        return self._to_message(entry_id, fields, delivery_count=1)

    def ack(self, message: FeedMessage) -> None:
        self.client.xack(self.stream, self.group, message.id)

    def close(self) -> None:
        self.client.close()
        logger.info(f"Feed consumer '{self.consumer}' closed")

    def _reclaim_idle(self) -> Optional[FeedMessage]:
        """Take over one pending entry that has been idle too long.

        A full scan of the pending list is started at most once per idle
        window; within a scan the cursor advances one entry per fetch.
        """
        if not self.reclaim_idle_ms:
            return None

        now = time.monotonic()
        if self._reclaim_cursor == "0-0" and now < self._next_reclaim_at:
            return None

        response = self.client.xautoclaim(
            self.stream,
            self.group,
            self.consumer,
            min_idle_time=self.reclaim_idle_ms,
            start_id=self._reclaim_cursor,
            count=1,
        )
        next_cursor, entries = response[0], response[1]
        self._reclaim_cursor = _text(next_cursor)
        if self._reclaim_cursor == "0-0":
            self._next_reclaim_at = now + self.reclaim_idle_ms / 1000

        for entry_id, fields in entries:
            if not fields:
                # Entry was trimmed from the stream; nothing left to deliver
                self.client.xack(self.stream, self.group, entry_id)
                continue
            delivery_count = self._delivery_count(entry_id)
            logger.info(
                f"Reclaimed idle message {_text(entry_id)} for redelivery "
                f"(delivery {delivery_count})"
            )
            return self._to_message(entry_id, fields, delivery_count=delivery_count)

        return None

    def _delivery_count(self, entry_id) -> int:
        """Times the group has delivered an entry, counting the claim just made."""
        pending = self.client.xpending_range(
            self.stream, self.group, min=entry_id, max=entry_id, count=1
        )
        if not pending:
            return 2
        return int(pending[0]["times_delivered"])

    @staticmethod
    def _to_message(entry_id, fields: dict, delivery_count: int) -> FeedMessage:
        key = fields.get(KEY_FIELD)
        return FeedMessage(
            id=_text(entry_id),
            payload=fields.get(PAYLOAD_FIELD, b""),
            key=_text(key) if key else None,
            delivery_count=delivery_count,
        )


class RedisDeadLetterChannel(DeadLetterChannelPort):
    """Appends rejected payloads to a capped Redis stream.

    Args:
        client: Redis client
        stream: Dead-letter stream key
        maxlen: Approximate cap on the stream length
    """

    def __init__(self, client: redis.Redis, stream: str, maxlen: int = 100_000):
        self.client = client
        self.stream = stream
        self.maxlen = maxlen

    def publish(
        self,
        payload: bytes,
        key: Optional[str],
        reason: str,
        source_id: Optional[str] = None,
        detail: str = "",
    ) -> None:
        self.client.xadd(
            self.stream,
            {
                "payload": payload,
                "key": key or "",
                "reason": reason,
                "source_id": source_id or "",
                "detail": detail,
            },
            maxlen=self.maxlen,
            approximate=True,
        )
