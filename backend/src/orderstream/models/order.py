"""Order aggregate tables.

An order owns exactly one delivery row and one payment row (both keyed by
order_uid) and a set of item rows unique per (order_uid, rid).

Column names match the inbound JSON field names so rows can be mapped to
and from the wire schema without a translation table.
"""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base


class OrderRow(Base):
    """Order header. One row per order_uid."""
    __tablename__ = "orders"

    order_uid = Column(String(255), primary_key=True)
    track_number = Column(String(255), nullable=False)
    entry = Column(String(50), nullable=False)
    locale = Column(String(10), nullable=False)
    internal_signature = Column(String(255), nullable=False, default="")
    customer_id = Column(String(255), nullable=False)
    delivery_service = Column(String(255), nullable=False)
    shardkey = Column(String(50), nullable=False)
    sm_id = Column(BigInteger, nullable=False)
    date_created = Column(DateTime(timezone=True), nullable=False)
    oof_shard = Column(String(50), nullable=False)

    delivery = relationship(
        "DeliveryRow",
        uselist=False,
        back_populates="order",
        cascade="all, delete-orphan",
    )
    payment = relationship(
        "PaymentRow",
        uselist=False,
        back_populates="order",
        cascade="all, delete-orphan",
    )
    items = relationship(
        "ItemRow",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="ItemRow.id",
    )

    def __repr__(self):
        return f"<OrderRow(order_uid={self.order_uid}, track_number={self.track_number})>"


class DeliveryRow(Base):
    """Delivery details, one-to-one with orders."""
    __tablename__ = "deliveries"

    order_uid = Column(
        String(255),
        ForeignKey("orders.order_uid", ondelete="CASCADE"),
        primary_key=True,
    )
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    zip = Column(String(50), nullable=False)
    city = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    region = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    order = relationship("OrderRow", back_populates="delivery")


class PaymentRow(Base):
    """Payment details, one-to-one with orders."""
    __tablename__ = "payments"

    order_uid = Column(
        String(255),
        ForeignKey("orders.order_uid", ondelete="CASCADE"),
        primary_key=True,
    )
    transaction = Column(String(255), nullable=False)
    request_id = Column(String(255), nullable=False, default="")
    currency = Column(String(10), nullable=False)
    provider = Column(String(50), nullable=False)
    amount = Column(BigInteger, nullable=False)
    payment_dt = Column(BigInteger, nullable=False)
    bank = Column(String(50), nullable=False)
    delivery_cost = Column(BigInteger, nullable=False)
    goods_total = Column(BigInteger, nullable=False)
    custom_fee = Column(BigInteger, nullable=False)

    order = relationship("OrderRow", back_populates="payment")


class ItemRow(Base):
    """Order line item. Unique per (order_uid, rid)."""
    __tablename__ = "items"

    # Integer, so SQLite maps it to ROWID
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_uid = Column(
        String(255),
        ForeignKey("orders.order_uid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    rid = Column(String(255), nullable=False)
    chrt_id = Column(BigInteger, nullable=False)
    track_number = Column(String(255), nullable=False)
    price = Column(BigInteger, nullable=False)
    name = Column(String(255), nullable=False)
    sale = Column(BigInteger, nullable=False)
    size = Column(String(50), nullable=False)
    total_price = Column(BigInteger, nullable=False)
    nm_id = Column(BigInteger, nullable=False)
    brand = Column(String(255), nullable=False)
    status = Column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("order_uid", "rid", name="uq_items_order_uid_rid"),
    )

    order = relationship("OrderRow", back_populates="items")

    def __repr__(self):
        return f"<ItemRow(order_uid={self.order_uid}, rid={self.rid})>"
