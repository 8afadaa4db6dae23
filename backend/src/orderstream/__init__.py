"""OrderStream - order ingestion, storage and lookup service.

Consumes order aggregates from a Redis stream, validates them, persists them
transactionally and serves cached point lookups over HTTP.
"""

__version__ = "0.1.0"
