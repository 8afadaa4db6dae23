"""Best-effort forwarding of rejected payloads to the dead-letter channel."""

import logging
from typing import Optional

from ..infrastructure.feed import DeadLetterChannelPort
from ..observability.metrics import dead_letters_total

logger = logging.getLogger(__name__)

REASON_MALFORMED = "malformed"
REASON_INVALID = "invalid"
# Store kept failing until the feed's delivery limit was reached
REASON_EXHAUSTED = "exhausted"


class DeadLetterRouter:
    """Forwards payloads to a dead-letter channel without ever failing the caller.

    Publish failures are logged and counted, never raised or retried. The
    channel itself bounds how long a publish may block (socket timeout).
    """

    def __init__(self, channel: DeadLetterChannelPort):
        self.channel = channel

    def send(
        self,
        payload: bytes,
        key: Optional[str],
        reason: str,
        source_id: Optional[str] = None,
        detail: str = "",
    ) -> bool:
        """Forward a payload.

        Args:
            payload: Original raw message bytes
            key: Order UID when known
            reason: Short machine-readable reason (malformed, invalid, ...)
            source_id: Feed message id the payload came from
            detail: Human-readable explanation, e.g. the rule violations

        Returns:
            bool: True if the channel accepted the payload
        """
        try:
            self.channel.publish(payload, key, reason, source_id, detail)
        except Exception as e:
            dead_letters_total.labels(reason=reason, status="failed").inc()
            logger.error(
                f"Failed to forward payload to dead-letter channel (key={key}, reason={reason}): {e}",
                extra={"order_uid": key or "", "message_id": source_id or ""}
            )
            return False

        dead_letters_total.labels(reason=reason, status="sent").inc()
        logger.warning(
            f"Payload forwarded to dead-letter channel (key={key}, reason={reason})",
            extra={"order_uid": key or "", "message_id": source_id or ""}
        )
        return True
