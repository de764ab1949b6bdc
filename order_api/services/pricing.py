from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Mapping, Sequence

from order_api.core.errors import CatalogInconsistencyError, NonPositiveTotalError, OrderTotalTooLargeError
from order_api.db.models import MONEY, Item, ItemAddon, OrderType
from order_api.schemas.order import OrderLineIn

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Numeric(10, 2) 컬럼에 들어가는 최대 금액
MAX_AMOUNT = Decimal(10) ** (MONEY.precision - MONEY.scale) - CENT


def to_money(v: Any) -> Decimal:
    """통화 최소 단위(0.01)로 반올림. 계산 중간에는 쓰지 않고 마지막에만 적용."""
    if v is None:
        return Decimal("0.00")
    return Decimal(str(v)).quantize(CENT, rounding=ROUND_HALF_UP)


def effective_price(item: Item) -> Decimal:
    if item.is_offer and item.offer_price is not None:
        return Decimal(str(item.offer_price))
    return Decimal(str(item.price))


@dataclass(frozen=True)
class AddonSnapshot:
    id: str
    name: str
    price: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": float(self.price)}


@dataclass(frozen=True)
class PricedLine:
    item_id: str
    item_name: str
    quantity: int
    unit_price: Decimal
    addons: tuple[AddonSnapshot, ...]
    notes: str | None
    total: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "quantity": self.quantity,
            "unit_price": float(self.unit_price),
            "addons": [a.as_dict() for a in self.addons],
            "notes": self.notes,
            "total": float(self.total),
        }


@dataclass(frozen=True)
class PricedCart:
    lines: tuple[PricedLine, ...]
    subtotal: Decimal
    delivery_fee: Decimal
    total: Decimal
    dropped_addon_ids: tuple[str, ...] = field(default=())


def _resolve_addons(
    line: OrderLineIn,
    addons_by_id: Mapping[str, ItemAddon],
) -> tuple[list[AddonSnapshot], list[str]]:
    applied: list[AddonSnapshot] = []
    dropped: list[str] = []
    seen: set[str] = set()
    for aid in line.addon_ids:
        if aid in seen:
            continue
        seen.add(aid)
        addon = addons_by_id.get(aid)
        # 다른 아이템 소속이거나 품절/미존재 addon은 가격에서 제외(에러 아님)
        if addon is None or not addon.is_available or addon.item_id != line.item_id:
            dropped.append(aid)
            continue
        applied.append(AddonSnapshot(id=addon.id, name=addon.name, price=Decimal(str(addon.price))))
    return applied, dropped


def price_cart(
    lines: Sequence[OrderLineIn],
    items_by_id: Mapping[str, Item],
    addons_by_id: Mapping[str, ItemAddon],
    order_type: OrderType,
    restaurant_delivery_fee: Any,
) -> PricedCart:
    """카탈로그 기준으로 장바구니 가격을 다시 계산한다.

    - 클라이언트가 보낸 가격은 입력으로 받지 않는다
    - line total = (unit_price + sum(addon price)) * quantity
    - 합계는 Decimal 그대로 더하고, 0.01 반올림은 마지막에 한 번만
    - 모든 item은 check_catalog()로 존재/판매 여부가 이미 확인된 상태여야 한다
    """
    priced: list[PricedLine] = []
    dropped_all: list[str] = []
    subtotal = Decimal("0")

    for line in lines:
        item = items_by_id.get(line.item_id)
        if item is None or not item.is_available:
            raise CatalogInconsistencyError(f"Item not available: {line.item_id}")

        unit_price = effective_price(item)
        if unit_price < 0:
            logger.error(f"[pricing] negative effective price for item {item.id}: {unit_price}")
            raise CatalogInconsistencyError(f"Item not available: {item.name}")

        applied, dropped = _resolve_addons(line, addons_by_id)
        if dropped:
            logger.debug(f"[pricing] dropped addons for item {line.item_id}: {dropped}")
            dropped_all.extend(dropped)

        addons_total = sum((a.price for a in applied), Decimal("0"))
        line_total = (unit_price + addons_total) * line.quantity
        subtotal += line_total

        priced.append(
            PricedLine(
                item_id=line.item_id,
                item_name=item.name,
                quantity=line.quantity,
                unit_price=to_money(unit_price),
                addons=tuple(AddonSnapshot(a.id, a.name, to_money(a.price)) for a in applied),
                notes=line.notes or None,
                total=to_money(line_total),
            )
        )

    if order_type == OrderType.DELIVERY:
        delivery_fee = Decimal(str(restaurant_delivery_fee or 0))
    else:
        delivery_fee = Decimal("0")

    total = subtotal + delivery_fee
    if total <= 0:
        raise NonPositiveTotalError()
    if to_money(total) > MAX_AMOUNT:
        raise OrderTotalTooLargeError()

    return PricedCart(
        lines=tuple(priced),
        subtotal=to_money(subtotal),
        delivery_fee=to_money(delivery_fee),
        total=to_money(total),
        dropped_addon_ids=tuple(dropped_all),
    )
