import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CHAT_ORDER_KEY", "chat-test-key")
os.environ.setdefault("AUTH_BASE_URL", "http://auth.test")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from order_api.api.deps import get_db
from order_api.core.security import require_caller
from order_api.db.base import Base
from order_api.db.models import Item, ItemAddon, Restaurant
from order_api.db.session import SessionLocal, engine
from order_api.main import app
from order_api.services.identity import CallerIdentity


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def catalog(db):
    restaurant = Restaurant(id="rest-1", name="Trattoria", delivery_fee=Decimal("3.50"))
    pizza = Item(id="pizza", name="Pizza", price=Decimal("12.00"))
    burger = Item(id="burger", name="Burger", price=Decimal("10.00"), is_offer=True, offer_price=Decimal("8.00"))
    soup = Item(id="soup", name="Soup", price=Decimal("6.00"), is_offer=True, offer_price=None)
    water = Item(id="water", name="Tap water", price=Decimal("0.00"))
    sold_out = Item(id="sold-out", name="Lasagna", price=Decimal("14.00"), is_available=False)
    cheese = ItemAddon(id="cheese", item_id="pizza", name="Extra cheese", price=Decimal("1.50"))
    olives = ItemAddon(id="olives", item_id="pizza", name="Olives", price=Decimal("2.00"))
    bacon = ItemAddon(id="bacon", item_id="burger", name="Bacon", price=Decimal("2.50"))
    truffle = ItemAddon(id="truffle", item_id="pizza", name="Truffle", price=Decimal("9.00"), is_available=False)
    db.add_all([restaurant, pizza, burger, soup, water, sold_out, cheese, olives, bacon, truffle])
    db.commit()
    return db


class CallerHolder:
    def __init__(self) -> None:
        self.user_id = "user-1"

    def __call__(self) -> CallerIdentity:
        return CallerIdentity(user_id=self.user_id)


@pytest.fixture()
def caller():
    return CallerHolder()


@pytest.fixture()
def client(catalog, caller):
    def _get_db():
        yield catalog

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[require_caller] = caller
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _order_body(**overrides):
    body = {
        "order_type": "pickup",
        "customer_name": "Ada Lovelace",
        "customer_phone": "+44 20 7946 0958",
        "items": [{"item_id": "pizza", "quantity": 2, "addon_ids": ["cheese"], "notes": ""}],
    }
    body.update(overrides)
    return body


@pytest.fixture()
def order_body():
    return _order_body
