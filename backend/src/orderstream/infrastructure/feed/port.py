"""Ports for the inbound order feed and the dead-letter channel"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FeedMessage:
    """One message pulled from the feed.

    Attributes:
        id: Feed-assigned message id, used to acknowledge it
        payload: Raw message bytes (UTF-8 JSON)
        key: Producer-supplied key, if any
        delivery_count: How many times the feed has handed this message out
    """
    id: str
    payload: bytes
    key: Optional[str] = None
    delivery_count: int = 1


class FeedPort(ABC):
    """At-least-once message feed.

    Messages that are never acknowledged are delivered again later.
    """

    @abstractmethod
    def fetch(self) -> Optional[FeedMessage]:
        """Block for a bounded time waiting for the next message.

        Returns:
            The next message, or None if none arrived within the block window
        """
        pass

    @abstractmethod
    def ack(self, message: FeedMessage) -> None:
        """Acknowledge a fully processed message."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release consumer resources."""
        pass


class DeadLetterChannelPort(ABC):
    """Secondary channel receiving payloads that cannot be ingested."""

    @abstractmethod
    def publish(
        self,
        payload: bytes,
        key: Optional[str],
        reason: str,
        source_id: Optional[str] = None,
        detail: str = "",
    ) -> None:
        """Publish a payload. May raise on transport failure."""
        pass
