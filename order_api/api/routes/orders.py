from typing import Any
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session, selectinload
from order_api.api.deps import get_db
from order_api.core.errors import OrderNotFoundError
from order_api.core.security import require_caller, require_chat_key
from order_api.db.models import Order, OrderSource
from order_api.schemas.order import OrderCreateOut, OrderOut
from order_api.services.identity import CallerIdentity
from order_api.services.order_pipeline import create_order

router = APIRouter()

@router.post("/orders", response_model=OrderCreateOut, response_model_exclude_none=True)
def create_customer_order(
    body: Any = Body(default=None),
    caller: CallerIdentity = Depends(require_caller),
    db: Session = Depends(get_db),
):
    return create_order(db, body, caller, source=OrderSource.WEB).as_response()

@router.post(
    "/chat-orders",
    response_model=OrderCreateOut,
    response_model_exclude_none=True,
    dependencies=[Depends(require_chat_key)],
)
def create_chat_order(body: Any = Body(default=None), db: Session = Depends(get_db)):
    return create_order(db, body, None, source=OrderSource.CHAT).as_response()

@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    caller: CallerIdentity = Depends(require_caller),
    db: Session = Depends(get_db),
):
    o = (
        db.query(Order)
        .options(selectinload(Order.lines), selectinload(Order.payments))
        .filter(Order.id == order_id, Order.user_id == caller.user_id)
        .first()
    )
    if not o:
        raise OrderNotFoundError()
    return o
