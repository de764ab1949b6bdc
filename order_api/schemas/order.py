from datetime import datetime
from pydantic import BaseModel, Field
from order_api.schemas.common import ORMBase
from order_api.db.models import OrderType, OrderStatus, PaymentMethod, PaymentStatus, PaymentRecordStatus, OrderSource

class OrderLineIn(BaseModel):
    item_id: str = Field(min_length=1)
    quantity: int = Field(ge=1, strict=True)
    addon_ids: list[str] = []
    notes: str | None = None

class OrderRequest(BaseModel):
    """검증/정규화가 끝난 주문 요청. 가격 정보는 받지 않는다."""
    order_type: OrderType
    customer_name: str
    customer_phone: str
    delivery_address: str | None = None
    notes: str | None = None
    idempotency_key: str | None = None
    items: list[OrderLineIn]

class AddonOut(BaseModel):
    id: str
    name: str
    price: float

class PricedLineOut(BaseModel):
    item_id: str
    item_name: str
    quantity: int
    unit_price: float
    addons: list[AddonOut] = []
    notes: str | None = None
    total: float

class OrderCreateOut(BaseModel):
    order_id: str
    subtotal: float
    delivery_fee: float
    total: float
    items: list[PricedLineOut] = []
    deduplicated: bool | None = None

class OrderLineOut(ORMBase):
    id: str
    item_id: str | None = None
    item_name: str
    quantity: int
    unit_price: float
    addons: list[AddonOut] | None = None
    notes: str | None = None
    total: float

class PaymentOut(ORMBase):
    id: str
    method: PaymentMethod
    amount: float
    status: PaymentRecordStatus
    created_at: datetime

class OrderOut(ORMBase):
    id: str
    restaurant_id: str
    order_type: OrderType
    customer_name: str
    customer_phone: str
    delivery_address: str | None = None
    subtotal: float
    delivery_fee: float
    total: float
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    currency: str
    source: OrderSource
    notes: str | None = None
    created_at: datetime
    lines: list[OrderLineOut] = []
    payments: list[PaymentOut] = []
