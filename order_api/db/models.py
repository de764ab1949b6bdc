import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, DateTime, Boolean, ForeignKey,
    Enum, Numeric, Text, JSON, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from order_api.db.base import Base

def utcnow() -> datetime:
    # DB는 UTC naive로 통일(정책)
    return datetime.now(timezone.utc).replace(tzinfo=None)

def new_id() -> str:
    return str(uuid.uuid4())

MONEY = Numeric(10, 2)

# -----------------------
# Enums
# -----------------------
class OrderType(str, enum.Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"

class OrderStatus(str, enum.Enum):
    RECEIVED = "received"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    COMPLETED = "completed"
    CANCELED = "canceled"

class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    ONLINE = "online"

class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"

class PaymentRecordStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

class OrderSource(str, enum.Enum):
    WEB = "web"
    CHAT = "chat"

def _values(e: type[enum.Enum]) -> list[str]:
    return [m.value for m in e]

# -----------------------
# Catalog (read-only for the order pipeline)
# -----------------------
class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(128), nullable=False)
    delivery_fee = Column(MONEY)
    is_open = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    orders = relationship("Order", back_populates="restaurant")

class Item(Base):
    __tablename__ = "items"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(128), nullable=False)
    price = Column(MONEY, nullable=False)
    is_offer = Column(Boolean, nullable=False, default=False)
    offer_price = Column(MONEY)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    addons = relationship("ItemAddon", back_populates="item")

    __table_args__ = (
        Index("ix_items_available", "is_available"),
    )

class ItemAddon(Base):
    __tablename__ = "item_addons"

    id = Column(String(36), primary_key=True, default=new_id)
    item_id = Column(String(36), ForeignKey("items.id"), nullable=False)
    name = Column(String(128), nullable=False)
    price = Column(MONEY, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    item = relationship("Item", back_populates="addons")

    __table_args__ = (
        Index("ix_item_addons_item", "item_id"),
    )

# -----------------------
# Orders
# -----------------------
class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id"), nullable=False)
    user_id = Column(String(36))
    order_type = Column(Enum(OrderType, values_callable=_values), nullable=False)
    customer_name = Column(String(128), nullable=False)
    customer_phone = Column(String(32), nullable=False)
    delivery_address = Column(Text)
    subtotal = Column(MONEY, nullable=False)
    delivery_fee = Column(MONEY, nullable=False)
    total = Column(MONEY, nullable=False)
    status = Column(Enum(OrderStatus, values_callable=_values), nullable=False)
    payment_method = Column(Enum(PaymentMethod, values_callable=_values), nullable=False)
    payment_status = Column(Enum(PaymentStatus, values_callable=_values), nullable=False)
    currency = Column(String(3), nullable=False)
    source = Column(Enum(OrderSource, values_callable=_values), nullable=False)
    notes = Column(Text)
    idempotency_key = Column(String(128))
    items_snapshot = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    restaurant = relationship("Restaurant", back_populates="orders")
    lines = relationship(
        "OrderItem", back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.position"
    )
    payments = relationship("Payment", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency"),
        Index("ix_orders_restaurant_created", "restaurant_id", "created_at"),
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # 장바구니 순서
    item_id = Column(String(36), ForeignKey("items.id"))
    item_name = Column(String(128), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(MONEY, nullable=False)
    addons = Column(JSON)
    notes = Column(Text)
    total = Column(MONEY, nullable=False)

    order = relationship("Order", back_populates="lines")

    __table_args__ = (
        Index("ix_order_items_order", "order_id"),
    )

class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    method = Column(Enum(PaymentMethod, values_callable=_values), nullable=False)
    amount = Column(MONEY, nullable=False)
    status = Column(Enum(PaymentRecordStatus, values_callable=_values), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    order = relationship("Order", back_populates="payments")

    __table_args__ = (
        Index("ix_payments_order", "order_id"),
    )

# -----------------------
# Rate limit tracking
# -----------------------
class OrderRateLimit(Base):
    __tablename__ = "order_rate_limits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_order_rate_limits_user_created", "user_id", "created_at"),
    )
