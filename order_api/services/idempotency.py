from __future__ import annotations

from sqlalchemy.orm import Session, selectinload

from order_api.db.models import Order


def find_existing(db: Session, user_id: str | None, idempotency_key: str | None) -> Order | None:
    """같은 호출자 + 같은 idempotency key로 이미 만들어진 주문 조회.

    key 범위는 호출자 단위라서 다른 호출자의 같은 key와는 충돌하지 않는다.
    """
    if not user_id or not idempotency_key:
        return None
    return (
        db.query(Order)
        .options(selectinload(Order.lines))
        .filter(Order.user_id == user_id)
        .filter(Order.idempotency_key == idempotency_key)
        .first()
    )
