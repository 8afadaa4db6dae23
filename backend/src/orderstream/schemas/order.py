"""Pydantic schemas for the order aggregate.

The same models describe the inbound feed payload, the value returned by the
store and the body of the lookup endpoint. They check JSON *shape* only
(types, nesting); field constraints are enforced by the validation engine so
that one bad field rejects a single order instead of the whole message.

Missing fields take zero values, mirroring how the producers serialize
optional data.
"""

import hashlib
import json
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Delivery(BaseModel):
    """Delivery details of an order"""
    name: str = ""
    phone: str = ""
    zip: str = ""
    city: str = ""
    address: str = ""
    region: str = ""
    email: str = ""

    model_config = ConfigDict(from_attributes=True)


class Payment(BaseModel):
    """Payment details of an order"""
    transaction: str = ""
    request_id: str = ""
    currency: str = ""
    provider: str = ""
    amount: int = 0
    payment_dt: int = 0
    bank: str = ""
    delivery_cost: int = 0
    goods_total: int = 0
    custom_fee: int = 0

    model_config = ConfigDict(from_attributes=True)


class Item(BaseModel):
    """Order line item, identified within its order by rid"""
    chrt_id: int = 0
    track_number: str = ""
    price: int = 0
    rid: str = ""
    name: str = ""
    sale: int = 0
    size: str = ""
    total_price: int = 0
    nm_id: int = 0
    brand: str = ""
    status: int = 0

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    """Order aggregate: header fields plus delivery, payment and items"""
    order_uid: str = ""
    track_number: str = ""
    entry: str = ""
    delivery: Delivery = Field(default_factory=Delivery)
    payment: Payment = Field(default_factory=Payment)
    items: List[Item] = Field(default_factory=list)
    locale: str = ""
    internal_signature: str = ""
    customer_id: str = ""
    delivery_service: str = ""
    shardkey: str = ""
    sm_id: int = 0
    date_created: Optional[datetime] = None
    oof_shard: str = ""

    model_config = ConfigDict(from_attributes=True)

    @field_validator("date_created")
    @classmethod
    def normalize_to_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Store and compare timestamps in UTC.

        Naive values (SQLite round-trips, producers without offset) are
        taken to be UTC already.
        """
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def fingerprint(self, only_rids: Optional[Iterable[str]] = None) -> str:
        """Content hash of the full aggregate.

        Items are hashed in rid order so that storage order does not matter.

        Args:
            only_rids: If given, only items with these rids take part in the
                hash. Used to ignore stored items an incoming revision does
                not mention.

        Returns:
            str: Hex SHA-256 digest of the canonical JSON form
        """
        data = self.model_dump(mode="json")
        items = data.pop("items")
        if only_rids is not None:
            wanted = set(only_rids)
            items = [item for item in items if item["rid"] in wanted]
        data["items"] = sorted(items, key=lambda item: item["rid"])

        canonical = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
