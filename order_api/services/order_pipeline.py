from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from order_api.core.config import settings
from order_api.core.errors import RestaurantClosedError
from order_api.db.models import Order, OrderSource, PaymentMethod
from order_api.services import rate_limit
from order_api.services.catalog import CatalogReader
from order_api.services.identity import CallerIdentity
from order_api.services.idempotency import find_existing
from order_api.services.order_writer import write_order
from order_api.services.pricing import price_cart
from order_api.services.validation import check_catalog, validate_order_request

logger = logging.getLogger(__name__)


@dataclass
class OrderResult:
    order_id: str
    subtotal: float
    delivery_fee: float
    total: float
    items: list[dict[str, Any]] = field(default_factory=list)
    deduplicated: bool = False

    def as_response(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "order_id": self.order_id,
            "subtotal": self.subtotal,
            "delivery_fee": self.delivery_fee,
            "total": self.total,
            "items": self.items,
        }
        if self.deduplicated:
            out["deduplicated"] = True
        return out


def _result_from_order(order: Order, deduplicated: bool) -> OrderResult:
    items = [
        {
            "item_id": ln.item_id,
            "item_name": ln.item_name,
            "quantity": ln.quantity,
            "unit_price": float(ln.unit_price),
            "addons": ln.addons or [],
            "notes": ln.notes,
            "total": float(ln.total),
        }
        for ln in order.lines
    ]
    return OrderResult(
        order_id=order.id,
        subtotal=float(order.subtotal),
        delivery_fee=float(order.delivery_fee),
        total=float(order.total),
        items=items,
        deduplicated=deduplicated,
    )


def create_order(
    db: Session,
    body: Any,
    caller: CallerIdentity | None,
    source: OrderSource = OrderSource.WEB,
) -> OrderResult:
    """주문 생성 파이프라인(1 request = 1 pass, 내부 재시도 없음).

    authenticated -> rate-checked -> validated -> idempotency-checked
    -> priced -> written

    caller가 None이면(chat 주문) rate limit / idempotency 단계는 건너뛴다.
    """
    user_id = caller.user_id if caller else None
    tag = f"[create-order:{source.value}]"

    if user_id:
        rate_limit.check_and_record(db, user_id)

    request = validate_order_request(body)

    existing = find_existing(db, user_id, request.idempotency_key)
    if existing is not None:
        logger.info(f"{tag} deduplicated request for user {user_id} -> order {existing.id}")
        return _result_from_order(existing, deduplicated=True)

    catalog = CatalogReader(db)
    restaurant = catalog.get_restaurant()
    if not restaurant.is_open:
        raise RestaurantClosedError()

    items_by_id = catalog.get_items(ln.item_id for ln in request.items)
    check_catalog(request, items_by_id)

    addons_by_id = catalog.get_addons(aid for ln in request.items for aid in ln.addon_ids)

    cart = price_cart(
        request.items,
        items_by_id,
        addons_by_id,
        request.order_type,
        restaurant.delivery_fee,
    )

    written = write_order(
        db,
        request,
        cart,
        restaurant,
        user_id=user_id,
        source=source,
        payment_method=PaymentMethod(settings.DEFAULT_PAYMENT_METHOD),
        currency=settings.CURRENCY,
    )
    if written.deduplicated:
        return _result_from_order(written.order, deduplicated=True)

    logger.info(f"{tag} order {written.order.id} total {cart.total} {settings.CURRENCY}")
    return OrderResult(
        order_id=written.order.id,
        subtotal=float(cart.subtotal),
        delivery_fee=float(cart.delivery_fee),
        total=float(cart.total),
        items=[ln.as_dict() for ln in cart.lines],
    )
