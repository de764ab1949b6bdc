from decimal import Decimal

import pytest

from order_api.core.errors import CallerInputError, CatalogInconsistencyError
from order_api.db.models import Item, OrderType
from order_api.services.validation import check_catalog, validate_order_request


def line(item_id="pizza", quantity=1, **kw):
    return {"item_id": item_id, "quantity": quantity, "addon_ids": kw.get("addon_ids", []), "notes": kw.get("notes", "")}


def body(**overrides):
    b = {
        "order_type": "delivery",
        "customer_name": "  Grace Hopper ",
        "customer_phone": " (555) 123-4567 ",
        "delivery_address": " 1 Main St ",
        "items": [line()],
    }
    b.update(overrides)
    return b


def error_of(payload):
    with pytest.raises(CallerInputError) as e:
        validate_order_request(payload)
    return e.value.public_message


def test_valid_request_is_normalized():
    req = validate_order_request(body(notes="  ring twice ", idempotency_key="  abc  "))
    assert req.order_type == OrderType.DELIVERY
    assert req.customer_name == "Grace Hopper"
    assert req.customer_phone == "(555) 123-4567"
    assert req.delivery_address == "1 Main St"
    assert req.notes == "ring twice"
    assert req.idempotency_key == "abc"
    assert req.items[0].item_id == "pizza"


def test_blank_idempotency_key_becomes_none():
    assert validate_order_request(body(idempotency_key="   ")).idempotency_key is None


def test_pickup_drops_address():
    req = validate_order_request(body(order_type="pickup"))
    assert req.delivery_address is None


@pytest.mark.parametrize("payload", [None, [], "order"])
def test_non_object_body(payload):
    assert error_of(payload) == "Invalid request body"


@pytest.mark.parametrize("field", ["customer_name", "customer_phone"])
def test_name_and_phone_required(field):
    assert error_of(body(**{field: "   "})) == "Name and phone are required"


def test_short_phone_is_rejected():
    assert error_of(body(customer_phone="12345")) == "Invalid phone number"


def test_phone_with_letters_is_rejected():
    assert error_of(body(customer_phone="555-CALL-NOW")) == "Invalid phone number"


def test_empty_cart():
    assert error_of(body(items=[])) == "At least one item is required"
    assert error_of(body(items=None)) == "At least one item is required"


def test_cart_size_ceiling():
    assert error_of(body(items=[line(f"item-{i}") for i in range(31)])) == "Maximum 30 items per order"
    assert len(validate_order_request(body(items=[line(f"item-{i}") for i in range(30)])).items) == 30


def test_delivery_requires_address():
    assert error_of(body(delivery_address="  ")) == "Delivery address is required"


def test_unknown_order_type():
    assert error_of(body(order_type="drone")) == "Invalid order type"


def test_first_failure_wins():
    # 이름 누락 + 잘못된 전화번호 + 빈 장바구니 -> 이름/전화 에러가 먼저
    assert error_of(body(customer_name="", customer_phone="1", items=[])) == "Name and phone are required"
    assert error_of(body(customer_phone="1", items=[])) == "Invalid phone number"


@pytest.mark.parametrize("bad", [
    {"item_id": "pizza", "quantity": 0},
    {"item_id": "pizza", "quantity": -2},
    {"item_id": "pizza", "quantity": "2"},
    {"item_id": "pizza", "quantity": 1.5},
    {"item_id": "", "quantity": 1},
    {"quantity": 1},
    {"item_id": "pizza", "quantity": 1, "addon_ids": "cheese"},
    "pizza",
])
def test_malformed_line(bad):
    assert error_of(body(items=[line(), bad])) == "Invalid item at position 2"


def test_client_price_fields_are_ignored():
    req = validate_order_request(body(items=[dict(line(), price=0.01, total=0.01)], total=0.01))
    assert "price" not in req.items[0].model_dump()


def test_check_catalog_rejects_missing_and_unavailable_items():
    req = validate_order_request(body(items=[line("pizza"), line("ghost")]))
    items = {"pizza": Item(id="pizza", name="Pizza", price=Decimal("12.00"), is_available=True)}
    with pytest.raises(CatalogInconsistencyError) as e:
        check_catalog(req, items)
    assert e.value.public_message == "Item not found: ghost"

    items["ghost"] = Item(id="ghost", name="Ghost Pepper", price=Decimal("3.00"), is_available=False)
    with pytest.raises(CatalogInconsistencyError) as e:
        check_catalog(req, items)
    assert e.value.public_message == "Item not available: Ghost Pepper"


@pytest.mark.parametrize("phone", ["٠٥٠١٢٣٤٥٦٧", "۰۹۱۲۳۴۵۶۷۸۹", "０１２３４５６７８"])
def test_non_ascii_digits_are_not_a_phone_number(phone):
    assert error_of(body(customer_phone=phone)) == "Invalid phone number"


def test_name_length_boundary():
    assert validate_order_request(body(customer_name="a" * 128)).customer_name == "a" * 128
    assert error_of(body(customer_name="a" * 129)) == "Name must be at most 128 characters"


def test_phone_length_boundary():
    assert validate_order_request(body(customer_phone="1" * 32)).customer_phone == "1" * 32
    assert error_of(body(customer_phone="1" * 33)) == "Phone number must be at most 32 characters"


def test_idempotency_key_length_boundary():
    assert validate_order_request(body(idempotency_key="k" * 128)).idempotency_key == "k" * 128
    assert error_of(body(idempotency_key="k" * 129)) == "Idempotency key must be at most 128 characters"


def test_quantity_ceiling():
    assert validate_order_request(body(items=[line(quantity=99)])).items[0].quantity == 99
    assert error_of(body(items=[line(), line(quantity=100)])) == "Quantity at position 2 must be at most 99"
    assert error_of(body(items=[line(quantity=10**12)])) == "Quantity at position 1 must be at most 99"
