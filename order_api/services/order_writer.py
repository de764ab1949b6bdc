from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from order_api.core.errors import PersistenceError
from order_api.db.models import (
    Order, OrderItem, Payment, Restaurant,
    OrderSource, OrderStatus, PaymentMethod, PaymentStatus, PaymentRecordStatus,
)
from order_api.schemas.order import OrderRequest
from order_api.services.idempotency import find_existing
from order_api.services.pricing import PricedCart

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    order: Order
    deduplicated: bool = False


def _items_snapshot(cart: PricedCart) -> list[dict]:
    return [
        {
            "itemId": ln.item_id,
            "name": ln.item_name,
            "price": float(ln.unit_price),
            "quantity": ln.quantity,
            "addons": [a.as_dict() for a in ln.addons],
            "notes": ln.notes,
            "total": float(ln.total),
        }
        for ln in cart.lines
    ]


def write_order(
    db: Session,
    request: OrderRequest,
    cart: PricedCart,
    restaurant: Restaurant,
    user_id: str | None,
    source: OrderSource,
    payment_method: PaymentMethod,
    currency: str,
) -> WriteResult:
    """order header + order_items + payment를 한 트랜잭션으로 저장.

    - 셋 중 하나라도 실패하면 rollback, 부분 저장 없음
    - (user_id, idempotency_key) unique 위반이면 먼저 저장된 주문을 돌려준다
    """
    idempotency_key = request.idempotency_key if user_id else None
    order = Order(
        restaurant_id=restaurant.id,
        user_id=user_id,
        order_type=request.order_type,
        customer_name=request.customer_name,
        customer_phone=request.customer_phone,
        delivery_address=request.delivery_address,
        subtotal=cart.subtotal,
        delivery_fee=cart.delivery_fee,
        total=cart.total,
        status=OrderStatus.RECEIVED,
        payment_method=payment_method,
        payment_status=PaymentStatus.UNPAID,
        currency=currency,
        source=source,
        notes=request.notes,
        idempotency_key=idempotency_key,
        items_snapshot=_items_snapshot(cart),
    )

    try:
        db.add(order)
        db.flush()

        for pos, ln in enumerate(cart.lines):
            db.add(OrderItem(
                order_id=order.id,
                position=pos,
                item_id=ln.item_id,
                item_name=ln.item_name,
                quantity=ln.quantity,
                unit_price=ln.unit_price,
                addons=[a.as_dict() for a in ln.addons],
                notes=ln.notes,
                total=ln.total,
            ))

        db.add(Payment(
            order_id=order.id,
            method=payment_method,
            amount=cart.total,
            status=PaymentRecordStatus.PENDING,
        ))

        db.commit()
    except IntegrityError as e:
        db.rollback()
        existing = find_existing(db, user_id, idempotency_key)
        if existing is not None:
            logger.info(f"[order-writer] concurrent duplicate resolved to order {existing.id}")
            return WriteResult(order=existing, deduplicated=True)
        logger.exception("[order-writer] integrity error while writing order")
        raise PersistenceError() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("[order-writer] order write failed, rolled back")
        raise PersistenceError() from e

    db.refresh(order)
    logger.info(f"[order-writer] order {order.id} created ({len(cart.lines)} lines, total {cart.total})")
    return WriteResult(order=order)
