from __future__ import annotations

import re
from typing import Any, Mapping

from pydantic import ValidationError

from order_api.core.config import settings
from order_api.core.errors import CallerInputError, CatalogInconsistencyError
from order_api.db.models import Item, Order, OrderType
from order_api.schemas.order import OrderLineIn, OrderRequest

# ASCII 숫자만 허용 (str 패턴의 \d는 모든 유니코드 숫자와 매치)
PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{7,}$")

NAME_MAX = Order.__table__.c.customer_name.type.length
PHONE_MAX = Order.__table__.c.customer_phone.type.length
IDEMPOTENCY_KEY_MAX = Order.__table__.c.idempotency_key.type.length


def _clean(v: Any) -> str:
    return v.strip() if isinstance(v, str) else ""


def validate_order_request(body: Any, max_items: int | None = None) -> OrderRequest:
    """raw JSON body -> OrderRequest.

    순서대로 검사하고 첫 번째 실패에서 멈춘다(fail fast).
    """
    if not isinstance(body, Mapping):
        raise CallerInputError("Invalid request body")

    limit = max_items if max_items is not None else settings.MAX_CART_ITEMS

    name = _clean(body.get("customer_name"))
    phone = _clean(body.get("customer_phone"))
    if not name or not phone:
        raise CallerInputError("Name and phone are required")

    if len(name) > NAME_MAX:
        raise CallerInputError(f"Name must be at most {NAME_MAX} characters")

    if len(phone) > PHONE_MAX:
        raise CallerInputError(f"Phone number must be at most {PHONE_MAX} characters")

    if not PHONE_RE.match(phone):
        raise CallerInputError("Invalid phone number")

    items = body.get("items")
    if not isinstance(items, list) or not items:
        raise CallerInputError("At least one item is required")

    if len(items) > limit:
        raise CallerInputError(f"Maximum {limit} items per order")

    order_type = body.get("order_type")
    address = _clean(body.get("delivery_address"))
    if order_type == OrderType.DELIVERY.value and not address:
        raise CallerInputError("Delivery address is required")

    if order_type not in (OrderType.DELIVERY.value, OrderType.PICKUP.value):
        raise CallerInputError("Invalid order type")

    lines: list[OrderLineIn] = []
    for i, raw in enumerate(items):
        if not isinstance(raw, Mapping):
            raise CallerInputError(f"Invalid item at position {i + 1}")
        try:
            line = OrderLineIn.model_validate(
                {
                    "item_id": raw.get("item_id"),
                    "quantity": raw.get("quantity"),
                    "addon_ids": raw.get("addon_ids") or [],
                    "notes": _clean(raw.get("notes")) or None,
                }
            )
        except ValidationError as e:
            raise CallerInputError(f"Invalid item at position {i + 1}") from e
        if line.quantity > settings.MAX_LINE_QUANTITY:
            raise CallerInputError(
                f"Quantity at position {i + 1} must be at most {settings.MAX_LINE_QUANTITY}"
            )
        lines.append(line)

    idempotency_key = _clean(body.get("idempotency_key")) or None
    if idempotency_key and len(idempotency_key) > IDEMPOTENCY_KEY_MAX:
        raise CallerInputError(f"Idempotency key must be at most {IDEMPOTENCY_KEY_MAX} characters")

    return OrderRequest(
        order_type=OrderType(order_type),
        customer_name=name,
        customer_phone=phone,
        delivery_address=address if order_type == OrderType.DELIVERY.value else None,
        notes=_clean(body.get("notes")) or None,
        idempotency_key=idempotency_key,
        items=lines,
    )


def check_catalog(request: OrderRequest, items_by_id: Mapping[str, Item]) -> None:
    """모든 item이 존재하고 판매 중인지 확인. 하나라도 실패하면 주문 전체 거부."""
    for line in request.items:
        item = items_by_id.get(line.item_id)
        if item is None:
            raise CatalogInconsistencyError(f"Item not found: {line.item_id}")
        if not item.is_available:
            raise CatalogInconsistencyError(f"Item not available: {item.name}")
