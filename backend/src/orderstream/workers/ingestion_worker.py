"""Ingestion worker: feed -> decode -> validate -> store.

Each feed message holds either one order or an array of orders. Orders that
fail validation are forwarded to the dead-letter channel individually; the
rest are written one at a time through the cached repository. The message is
acknowledged only once every valid order in it has been stored. Anything
left unacknowledged is redelivered by the feed, and the idempotent upsert
makes the second pass cheap.

Rejected payloads are dead-lettered on the first delivery only. A message
still unacknowledged when its delivery count reaches max_deliveries is
acknowledged and dropped; if it was held back by store failures its payload
is dead-lettered first so nothing is lost silently.
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ..config import Settings
from ..domain.validation import OrderValidator, ValidatorPort
from ..errors import DecodeError, StoreError
from ..infrastructure.feed import FeedMessage, FeedPort, RedisDeadLetterChannel, RedisStreamFeed
from ..observability.metrics import messages_consumed_total, orders_processed_total
from ..observability.request_id import set_request_id
from ..orders.cache_coordinator import CachedOrderRepository
from .dead_letter import REASON_EXHAUSTED, REASON_INVALID, REASON_MALFORMED, DeadLetterRouter
from .decoding import decode_orders

logger = logging.getLogger(__name__)

# Pause after a feed error before fetching again
FETCH_ERROR_BACKOFF_SECONDS = 1.0

DEFAULT_MAX_DELIVERIES = 5


@dataclass
class MessageOutcome:
    """What happened to one feed message."""
    message_id: str
    acknowledged: bool = False
    malformed: bool = False
    stored: int = 0
    unchanged: int = 0
    rejected: int = 0
    failed: int = 0
    gave_up: bool = False


class IngestionWorker:
    """Consumes order messages from a feed until told to stop.

    Args:
        feed: At-least-once message feed
        repository: Cache-coordinated order repository
        dead_letter: Router for payloads that cannot be ingested
        validator: Order validator (defaults to the built-in rule set)
        max_deliveries: Delivery count at which an unacknowledged message is
            given up; 0 or None keeps redelivering forever
    """

    def __init__(
        self,
        feed: FeedPort,
        repository: CachedOrderRepository,
        dead_letter: DeadLetterRouter,
        validator: Optional[ValidatorPort] = None,
        max_deliveries: Optional[int] = DEFAULT_MAX_DELIVERIES,
    ):
        self.feed = feed
        self.repository = repository
        self.dead_letter = dead_letter
        self.validator = validator or OrderValidator()
        self.max_deliveries = max_deliveries
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        repository: CachedOrderRepository,
        redis_client,
    ) -> "IngestionWorker":
        """Wire a worker onto the Redis order stream and dead-letter stream."""
        feed = RedisStreamFeed.from_settings(redis_client, settings)
        feed.ensure_group()
        channel = RedisDeadLetterChannel(
            redis_client,
            stream=settings.DEAD_LETTER_STREAM,
            maxlen=settings.DEAD_LETTER_MAXLEN,
        )
        return cls(
            feed, repository, DeadLetterRouter(channel),
            max_deliveries=settings.FEED_MAX_DELIVERIES,
        )

    def handle_message(self, message: FeedMessage) -> MessageOutcome:
        """Process one feed message and acknowledge it when fully stored.

        Args:
            message: Message pulled from the feed

        Returns:
            MessageOutcome describing the per-order results
        """
        set_request_id(message.id)
        outcome = MessageOutcome(message_id=message.id)
        log_extra = {"message_id": message.id, "component": "ingestion"}
        first_delivery = message.delivery_count <= 1

        try:
            candidates = decode_orders(message.payload)
        except DecodeError as e:
            logger.warning(f"Malformed message {message.id}: {e}", extra=log_extra)
            if first_delivery:
                self.dead_letter.send(
                    message.payload, message.key, REASON_MALFORMED,
                    source_id=message.id, detail=str(e),
                )
            outcome.malformed = True
            return self._withhold(message, outcome, log_extra)

        batch = []
        for order in candidates:
            result = self.validator.validate(order)
            if result.is_valid:
                batch.append(order)
                continue

            outcome.rejected += 1
            orders_processed_total.labels(result="rejected").inc()
            logger.warning(
                f"Order {order.order_uid or '<no uid>'} rejected with "
                f"{len(result.violations)} violation(s): "
                + "; ".join(str(v) for v in result.violations),
                extra={**log_extra, "order_uid": order.order_uid, "outcome": "rejected"}
            )
            if first_delivery:
                self.dead_letter.send(
                    message.payload, order.order_uid or None, REASON_INVALID,
                    source_id=message.id, detail=json.dumps(result.to_dict()),
                )

        if not batch:
            logger.info(f"Message {message.id} has no valid orders", extra=log_extra)
            return self._withhold(message, outcome, log_extra)

        for order in batch:
            order_extra = {**log_extra, "order_uid": order.order_uid}
            try:
                result = self.repository.upsert(order)
            except StoreError as e:
                outcome.failed += 1
                orders_processed_total.labels(result="failed").inc()
                logger.error(
                    f"Failed to store order {order.order_uid}: {e}",
                    extra={**order_extra, "outcome": "failed"}
                )
                continue
            except Exception as e:
                outcome.failed += 1
                orders_processed_total.labels(result="failed").inc()
                logger.error(
                    f"Unexpected error storing order {order.order_uid}: {e}",
                    exc_info=True,
                    extra={**order_extra, "outcome": "failed"}
                )
                continue

            if result.changed:
                outcome.stored += 1
                orders_processed_total.labels(result="stored").inc()
                logger.info(f"Stored order {order.order_uid}", extra={**order_extra, "outcome": "stored"})
            else:
                outcome.unchanged += 1
                orders_processed_total.labels(result="unchanged").inc()
                logger.info(f"Order {order.order_uid} unchanged", extra={**order_extra, "outcome": "unchanged"})

        if outcome.failed:
            logger.warning(
                f"Message {message.id}: {outcome.failed} order(s) failed to store",
                extra=log_extra
            )
            return self._withhold(message, outcome, log_extra)

        self._ack(message, outcome, "acked")
        logger.debug(f"Acknowledged message {message.id}", extra=log_extra)
        return outcome

    def _withhold(self, message: FeedMessage, outcome: MessageOutcome, log_extra: dict) -> MessageOutcome:
        """Leave a message pending for redelivery, unless its deliveries are used up."""
        if not self.max_deliveries or message.delivery_count < self.max_deliveries:
            # Left pending; the feed hands it out again after the idle window
            logger.info(
                f"Not acknowledging message {message.id} "
                f"(delivery {message.delivery_count})",
                extra=log_extra
            )
            messages_consumed_total.labels(outcome="not_acked").inc()
            return outcome

        logger.error(
            f"Giving up on message {message.id} after {message.delivery_count} deliveries",
            extra=log_extra
        )
        if outcome.failed:
            self.dead_letter.send(
                message.payload, message.key, REASON_EXHAUSTED,
                source_id=message.id,
                detail=f"{outcome.failed} order(s) failed to store on delivery {message.delivery_count}",
            )
        outcome.gave_up = True
        self._ack(message, outcome, "gave_up")
        return outcome

    def _ack(self, message: FeedMessage, outcome: MessageOutcome, label: str) -> None:
        self.feed.ack(message)
        outcome.acknowledged = True
        messages_consumed_total.labels(outcome=label).inc()

    def run(self, stop_event: Optional[threading.Event] = None) -> None:
        """Fetch and handle messages until stop_event is set.

        The stop flag is checked between fetches; a fetch blocks for at most
        the feed's block window, which bounds shutdown latency.
        """
        stop_event = stop_event or self._stop_event
        logger.info("Ingestion worker started", extra={"component": "ingestion"})

        try:
            while not stop_event.is_set():
                try:
                    message = self.feed.fetch()
                except Exception as e:
                    logger.error(f"Feed fetch failed: {e}", extra={"component": "ingestion"})
                    stop_event.wait(FETCH_ERROR_BACKOFF_SECONDS)
                    continue

                if message is None:
                    continue

                try:
                    self.handle_message(message)
                except Exception as e:
                    # Unacknowledged, so the feed redelivers it
                    logger.error(
                        f"Unexpected error handling message {message.id}: {e}",
                        exc_info=True,
                        extra={"message_id": message.id, "component": "ingestion"}
                    )
                finally:
                    set_request_id(None)
        finally:
            self.feed.close()
            logger.info("Ingestion worker stopped", extra={"component": "ingestion"})

    def start(self) -> threading.Thread:
        """Run the worker on a daemon thread."""
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run,
            args=(self._stop_event,),
            name="ingestion-worker",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Signal the worker to stop and wait for it.

        Returns:
            bool: True if the worker thread exited within timeout
        """
        self._stop_event.set()
        if self._thread is None:
            return True
        self._thread.join(timeout)
        stopped = not self._thread.is_alive()
        if not stopped:
            logger.warning("Ingestion worker did not stop within the shutdown timeout")
        return stopped
