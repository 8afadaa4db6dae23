"""Background ingestion of orders from the message feed"""

from .dead_letter import DeadLetterRouter, REASON_EXHAUSTED, REASON_INVALID, REASON_MALFORMED
from .decoding import decode_orders
from .ingestion_worker import IngestionWorker, MessageOutcome

__all__ = [
    "DeadLetterRouter",
    "REASON_EXHAUSTED",
    "REASON_INVALID",
    "REASON_MALFORMED",
    "decode_orders",
    "IngestionWorker",
    "MessageOutcome",
]
