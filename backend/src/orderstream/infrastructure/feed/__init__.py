"""Message feed and dead-letter channel adapters"""

from .port import FeedMessage, FeedPort, DeadLetterChannelPort
from .redis_stream import RedisStreamFeed, RedisDeadLetterChannel, create_redis_client

__all__ = [
    "FeedMessage",
    "FeedPort",
    "DeadLetterChannelPort",
    "RedisStreamFeed",
    "RedisDeadLetterChannel",
    "create_redis_client",
]
