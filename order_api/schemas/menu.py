from order_api.schemas.common import ORMBase

class MenuAddonOut(ORMBase):
    id: str
    name: str
    price: float

class MenuItemOut(ORMBase):
    id: str
    name: str
    price: float
    is_offer: bool
    offer_price: float | None = None
    effective_price: float
    addons: list[MenuAddonOut] = []
