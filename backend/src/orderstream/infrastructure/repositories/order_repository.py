"""Order repository for database operations"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from ...database import session_scope
from ...errors import StoreError
from ...models.order import OrderRow, DeliveryRow, PaymentRow, ItemRow
from ...schemas.order import Order

logger = logging.getLogger(__name__)

# Dialect-native INSERT constructs supporting ON CONFLICT DO UPDATE
_INSERT_BY_DIALECT: dict[str, Callable] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass
class UpsertResult:
    """Result of OrderRepository.upsert.

    Attributes:
        order: Canonical stored aggregate after the call
        changed: False when the incoming order matched the stored one and
            nothing was written
    """
    order: Order
    changed: bool


class OrderRepository:
    """Repository for order aggregates.

    Reads resolve the order together with its delivery, payment and items in
    one logical read. Writes replace the aggregate inside one transaction
    using "insert; on key conflict overwrite all non-key columns" statements.
    Items missing from an incoming revision are left in place.
    """

    def __init__(self, session_factory: sessionmaker):
        """Initialize repository with a session factory.

        Args:
            session_factory: SQLAlchemy sessionmaker bound to the store
        """
        self.session_factory = session_factory

    def fetch_by_uid(self, order_uid: str) -> Optional[Order]:
        """Load an order aggregate.

        Args:
            order_uid: Order UID

        Returns:
            Order, or None if no order with this UID exists

        Raises:
            StoreError: If the database cannot be read
        """
        try:
            with self.session_factory() as session:
                return self._load(session, order_uid)
        except SQLAlchemyError as e:
            logger.error(f"Failed to fetch order {order_uid}: {e}", extra={"order_uid": order_uid})
            raise StoreError(f"fetch order {order_uid}: {e}") from e

    def upsert(self, order: Order) -> UpsertResult:
        """Insert or replace an order aggregate.

        Steps:
        1. Read the stored aggregate, if any
        2. If it is structurally equal to the incoming order, return it
           unchanged without writing
        3. Otherwise upsert order, delivery, payment and every item in one
           transaction
        4. Re-read and return the canonical stored value

        Args:
            order: Validated order aggregate

        Returns:
            UpsertResult with the stored order and whether a write happened

        Raises:
            StoreError: If any statement fails; the transaction is rolled back
                and stored data is unchanged
        """
        order_uid = order.order_uid
        incoming_fingerprint = order.fingerprint()

        existing = self.fetch_by_uid(order_uid)
        if existing is not None:
            incoming_rids = [item.rid for item in order.items]
            if existing.fingerprint(only_rids=incoming_rids) == incoming_fingerprint:
                logger.debug(f"Order {order_uid} unchanged, skipping write", extra={"order_uid": order_uid})
                return UpsertResult(order=existing, changed=False)

        try:
            with session_scope(self.session_factory) as session:
                self._write(session, order)
        except (SQLAlchemyError, OverflowError) as e:
            # OverflowError: a driver refusing an integer it cannot bind
            logger.error(f"Failed to upsert order {order_uid}: {e}", extra={"order_uid": order_uid})
            raise StoreError(f"upsert order {order_uid}: {e}") from e

        stored = self.fetch_by_uid(order_uid)
        if stored is None:
            raise StoreError(f"order {order_uid} missing after upsert")

        logger.info(
            f"Order {order_uid} {'updated' if existing is not None else 'created'} "
            f"({len(order.items)} items)",
            extra={"order_uid": order_uid}
        )
        return UpsertResult(order=stored, changed=True)

    def _load(self, session: Session, order_uid: str) -> Optional[Order]:
        query = (
            select(OrderRow)
            .options(
                selectinload(OrderRow.delivery),
                selectinload(OrderRow.payment),
                selectinload(OrderRow.items),
            )
            .where(OrderRow.order_uid == order_uid)
        )
        row = session.execute(query).scalar_one_or_none()
        if row is None:
            return None
        return Order.model_validate(row)

    def _write(self, session: Session, order: Order) -> None:
        dialect = session.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise StoreError(f"dialect '{dialect}' has no native upsert support")

        order_uid = order.order_uid
        header = order.model_dump(exclude={"delivery", "payment", "items"})

        self._upsert(session, insert, OrderRow, header, ["order_uid"])
        self._upsert(
            session, insert, DeliveryRow,
            {"order_uid": order_uid, **order.delivery.model_dump()},
            ["order_uid"],
        )
        self._upsert(
            session, insert, PaymentRow,
            {"order_uid": order_uid, **order.payment.model_dump()},
            ["order_uid"],
        )
        for item in order.items:
            self._upsert(
                session, insert, ItemRow,
                {"order_uid": order_uid, **item.model_dump()},
                ["order_uid", "rid"],
            )

    @staticmethod
    def _upsert(
        session: Session,
        insert: Callable,
        model: Any,
        values: dict[str, Any],
        key_columns: list[str],
    ) -> None:
        """Insert a row; on key conflict overwrite every non-key column."""
        stmt = insert(model.__table__).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=key_columns,
            set_={
                name: stmt.excluded[name]
                for name in values
                if name not in key_columns
            },
        )
        session.execute(stmt)
