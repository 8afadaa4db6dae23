#!/usr/bin/env python3
"""Sample Order Generator for OrderStream.

Writes three JSON files of orders and a list of their UIDs:
- orders_good.json: valid orders
- orders_update.json: the same orders with a changed first item price
- orders_bad.json: copies with a fresh UID and a negative payment amount

Usage:
    # Write sample files
    python scripts/generate_orders.py --output-dir sample_data --count 6

    # Also publish every file to the order stream, one array per message
    python scripts/generate_orders.py --publish --redis-url redis://localhost:6379/0
"""

import argparse
import os
import random
import string
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List

# Add backend/src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pydantic import TypeAdapter

from orderstream.domain.validation import OrderValidator
from orderstream.errors import OrderValidationError
from orderstream.schemas.order import Delivery, Item, Order, Payment

GOOD_FILE = "orders_good.json"
UPDATE_FILE = "orders_update.json"
BAD_FILE = "orders_bad.json"
UID_FILE = "uids.txt"

_ORDER_LIST = TypeAdapter(List[Order])


def rand_string(rng: random.Random, n: int) -> str:
    return "".join(rng.choice(string.ascii_letters + string.digits) for _ in range(n))


def created_at(rng: random.Random) -> datetime:
    return datetime(2021, 11, 20 + rng.randint(0, 8), 6, 22, 19, tzinfo=timezone.utc)


def new_order(rng: random.Random) -> Order:
    """Build one random order that passes validation."""
    uid = "b563" + rand_string(rng, 12)
    track = "WBILM" + rand_string(rng, 8)

    return Order(
        order_uid=uid,
        track_number=track,
        entry="WBIL",
        locale="en",
        internal_signature=rand_string(rng, 10),
        customer_id="customer" + rand_string(rng, 5),
        delivery_service="meest",
        shardkey=str(rng.randint(1, 10)),
        sm_id=rng.randint(1, 100),
        date_created=created_at(rng),
        oof_shard="1",
        delivery=Delivery(
            name="Test " + rand_string(rng, 5),
            phone=f"+972{rng.randrange(10_000_000):07d}",
            zip=f"{rng.randrange(10_000_000):07d}",
            city="City" + rand_string(rng, 3),
            address="Street " + rand_string(rng, 4),
            region="Region " + rand_string(rng, 3),
            email=f"test{rand_string(rng, 5).lower()}@gmail.com",
        ),
        payment=Payment(
            transaction=uid,
            currency="USD",
            provider="wbpay",
            amount=rng.randint(200, 2199),
            payment_dt=int(time.time()),
            bank="alpha",
            delivery_cost=rng.randint(100, 1099),
            goods_total=rng.randint(100, 1099),
            custom_fee=0,
        ),
        items=[
            Item(
                chrt_id=rng.randrange(1_000_000),
                track_number=track,
                price=rng.randint(100, 599),
                rid=uid + "item1",
                name="Product " + rand_string(rng, 5),
                sale=rng.randint(0, 29),
                size=rng.choice(["S", "M", "L", "XL"]),
                total_price=rng.randint(100, 599),
                nm_id=rng.randint(1, 1_000_000),
                brand="Brand" + rand_string(rng, 3),
                status=202,
            )
        ],
    )


def update_orders(orders: List[Order], rng: random.Random) -> List[Order]:
    """Same UIDs and rids, bumped first-item price and a new timestamp."""
    updates = []
    for order in orders:
        updated = order.model_copy(deep=True)
        updated.items[0].price += rng.randint(1, 199)
        updated.date_created = created_at(rng)
        updates.append(updated)
    return updates


def bad_orders(orders: List[Order]) -> List[Order]:
    """Copies with a fresh UID and a negative payment amount."""
    bad = []
    for index, order in enumerate(orders, start=1):
        copy = order.model_copy(deep=True)
        copy.order_uid = f"invalid{index:03d}"
        copy.payment.transaction = copy.order_uid
        copy.payment.amount = -100
        bad.append(copy)
    return bad


def check_valid(orders: List[Order]) -> None:
    validator = OrderValidator()
    for order in orders:
        validator.validate(order).raise_if_invalid()


def main():
    parser = argparse.ArgumentParser(description="Generate sample order files")
    parser.add_argument("--output-dir", default="sample_data", help="Directory for the JSON files")
    parser.add_argument("--count", type=int, default=6, help="Number of valid orders")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument("--publish", action="store_true", help="Publish the files to the order stream")
    parser.add_argument("--redis-url", default=os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    parser.add_argument("--stream", default=os.getenv("ORDER_STREAM", "orders"))
    args = parser.parse_args()

    rng = random.Random(args.seed)
    good = [new_order(rng) for _ in range(args.count)]
    updates = update_orders(good, rng)
    bad = bad_orders(good)

    try:
        check_valid(good + updates)
    except OrderValidationError as e:
        print(f"ERROR: generated an invalid sample order: {e}", file=sys.stderr)
        sys.exit(1)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    files = {GOOD_FILE: good, UPDATE_FILE: updates, BAD_FILE: bad}
    for filename, orders in files.items():
        (output_dir / filename).write_bytes(_ORDER_LIST.dump_json(orders, indent=2))
        print(f"Wrote {len(orders)} orders to {output_dir / filename}")

    uids = [order.order_uid for orders in files.values() for order in orders]
    (output_dir / UID_FILE).write_text("\n".join(uids) + "\n")

    if args.publish:
        import redis

        client = redis.Redis.from_url(args.redis_url)
        for filename, orders in files.items():
            message_id = client.xadd(args.stream, {
                "payload": _ORDER_LIST.dump_json(orders),
                "key": filename,
            })
            print(f"Published {filename} to '{args.stream}' as {message_id.decode()}")
        client.close()


if __name__ == "__main__":
    main()
