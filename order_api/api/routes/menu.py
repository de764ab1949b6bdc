from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from order_api.api.deps import get_db
from order_api.schemas.menu import MenuAddonOut, MenuItemOut
from order_api.services.catalog import CatalogReader
from order_api.services.pricing import effective_price

router = APIRouter()

@router.get("/menu-items", response_model=list[MenuItemOut])
def list_menu_items(db: Session = Depends(get_db)):
    """판매 중인 아이템 + 사용 가능한 addon. effective_price는 주문 가격 계산과 같은 규칙."""
    out = []
    for item in CatalogReader(db).list_available_items():
        out.append(MenuItemOut(
            id=item.id,
            name=item.name,
            price=float(item.price),
            is_offer=bool(item.is_offer),
            offer_price=float(item.offer_price) if item.offer_price is not None else None,
            effective_price=float(effective_price(item)),
            addons=[MenuAddonOut.model_validate(a) for a in item.addons if a.is_available],
        ))
    return out
