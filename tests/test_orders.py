import pytest

from storefront.models.order import Order, OrderStatus
from storefront.models.payment_card import PaymentCard
from storefront.models.promo import PromoRedemption
from storefront.services.orders import compute_totals


def _checkout(client, headers, items, shipping, **extra):
    payload = {
        "items": [{"product_id": p.id, "quantity": qty} for p, qty in items],
        "shipping": shipping,
        "payment": {"method": "bank_transfer", "provider": "BCA", "transactionId": "TX-1"},
    }
    payload.update(extra)
    return client.post("/api/orders", json=payload, headers=headers)


@pytest.mark.parametrize("subtotal, expected", [
    (600.0, (0.0, 60.0, 660.0)),
    (500.0, (15.0, 50.0, 565.0)),
    (100.0, (15.0, 10.0, 125.0)),
])
def test_compute_totals(subtotal, expected):
    assert compute_totals(subtotal) == expected


def test_compute_totals_taxes_before_discount():
    assert compute_totals(600.0, discount=60.0) == (0.0, 60.0, 600.0)


def test_checkout_above_free_shipping(client, member_headers, products, shipping):
    earbuds, keyboard, _ = products
    res = _checkout(client, member_headers, [(earbuds, 1), (keyboard, 1)], shipping)

    assert res.status_code == 201
    created = res.json()
    assert created["status"] == "paid"
    assert created["total"] == 660.0

    order = client.get(f"/api/orders/{created['order_id']}", headers=member_headers).json()["order"]
    assert order["subtotal"] == 600.0
    assert order["shipping_cost"] == 0.0
    assert order["tax"] == 60.0
    assert order["discount"] == 0.0
    assert [i["product_name"] for i in order["items"]] == ["Wireless Earbuds", "Mechanical Keyboard"]
    assert order["shipping"]["country"] == "INDONESIA"
    assert order["shipping"]["shipping_method"] == "STANDARD"
    assert order["shipping"]["home_address"] == "Jl. Merdeka 1"
    assert order["payment"]["status"] == "PAID"
    assert order["payment"]["transaction_id"] == "TX-1"


def test_small_order_pays_flat_shipping(client, member_headers, products, shipping):
    mug = products[2]
    res = _checkout(client, member_headers, [(mug, 2)], shipping)

    assert res.status_code == 201
    assert res.json()["total"] == 125.0


def test_client_price_is_ignored(client, member_headers, products, shipping):
    mug = products[2]
    payload = {
        "items": [{"product_id": mug.id, "quantity": 2, "price": 0.01}],
        "shipping": shipping,
        "payment": {"method": "bank_transfer"},
    }
    res = client.post("/api/orders", json=payload, headers=member_headers)
    assert res.json()["total"] == 125.0


def test_cart_snapshot_price_is_charged(client, db, member_headers, products, shipping):
    mug = products[2]
    client.post("/api/cart/add", json={"productId": mug.id}, headers=member_headers)
    mug.price = 80.0
    db.commit()

    res = _checkout(client, member_headers, [(mug, 1)], shipping)
    order = client.get(f"/api/orders/{res.json()['order_id']}", headers=member_headers).json()["order"]
    assert order["items"][0]["price_at_time"] == 50.0
    assert order["subtotal"] == 50.0


def test_checkout_removes_purchased_lines_from_cart(client, member_headers, products, shipping):
    earbuds, _, mug = products
    client.post("/api/cart/add", json={"productId": earbuds.id}, headers=member_headers)
    client.post("/api/cart/add", json={"productId": mug.id}, headers=member_headers)

    _checkout(client, member_headers, [(earbuds, 1)], shipping)

    cart = client.get("/api/cart/fetch", headers=member_headers).json()
    assert [i["product_id"] for i in cart["items"]] == [mug.id]


def test_unknown_product_rolls_back_everything(client, db, member_headers, products, shipping):
    mug = products[2]
    client.post("/api/cart/add", json={"productId": mug.id}, headers=member_headers)

    payload = {
        "items": [{"product_id": mug.id, "quantity": 1}, {"product_id": 9999, "quantity": 1}],
        "shipping": shipping,
        "payment": {"method": "bank_transfer"},
    }
    res = client.post("/api/orders", json=payload, headers=member_headers)

    assert res.status_code == 404
    assert res.json() == {"message": "Product 9999 not found"}
    assert db.query(Order).count() == 0
    assert client.get("/api/cart/fetch", headers=member_headers).json()["count"] == 1


def test_promo_failure_rolls_back(client, db, member_headers, products, promos, shipping):
    mug = products[2]
    res = _checkout(client, member_headers, [(mug, 1)], shipping, promo_code="FLAT50")

    assert res.status_code == 400
    assert res.json() == {"message": "Minimum order is Rp 200"}
    assert db.query(Order).count() == 0


def test_promo_is_redeemed_with_the_order(client, db, member, member_headers, products, promos, shipping):
    earbuds, keyboard, _ = products
    res = _checkout(client, member_headers, [(earbuds, 1), (keyboard, 1)], shipping, promo_code="save10")

    assert res.status_code == 201
    assert res.json()["total"] == 600.0

    db.expire_all()
    order = db.query(Order).one()
    assert order.discount == 60.0
    assert order.promo_code_id == promos["SAVE10"].id
    assert promos["SAVE10"].used_count == 1
    redemption = db.query(PromoRedemption).one()
    assert (redemption.user_id, redemption.order_id) == (member.id, order.id)

    again = _checkout(client, member_headers, [(keyboard, 1)], shipping, promo_code="SAVE10")
    assert again.status_code == 409
    assert again.json() == {"message": "You have already used this promo code"}
    assert db.query(Order).count() == 1


def test_card_payment_is_saved_and_described(client, db, member, member_headers, products, shipping):
    mug = products[2]
    payload = {
        "items": [{"product_id": mug.id, "quantity": 1}],
        "shipping": shipping,
        "payment": {
            "method": "card",
            "cardNumber": "4111 1111 1111 1111",
            "cardName": "Maya Member",
            "expiryMonth": "12",
            "expiryYear": "2030",
        },
    }
    res = client.post("/api/orders", json=payload, headers=member_headers)
    assert res.status_code == 201

    order = client.get(f"/api/orders/{res.json()['order_id']}", headers=member_headers).json()["order"]
    assert order["payment"]["last4"] == "1111"
    assert order["payment"]["card_brand"] == "Visa"
    assert "cardNumber" not in order["payment"]

    card = db.query(PaymentCard).one()
    assert card.user_id == member.id
    assert card.is_default is True

    # Same card again is reused, not duplicated
    client.post("/api/orders", json=payload, headers=member_headers)
    assert db.query(PaymentCard).count() == 1


def test_card_payment_requires_expiry(client, db, member_headers, products, shipping):
    payload = {
        "items": [{"product_id": products[2].id, "quantity": 1}],
        "shipping": shipping,
        "payment": {"method": "card", "cardNumber": "4111111111111111", "cardName": "Maya Member"},
    }
    res = client.post("/api/orders", json=payload, headers=member_headers)

    assert res.status_code == 400
    assert res.json() == {"message": "Card expiry is required"}
    assert db.query(Order).count() == 0


@pytest.mark.parametrize("month, year", [("ab", "2030"), ("13", "2030"), (0, 2030), (12, "1999")])
def test_card_payment_rejects_bad_expiry(client, db, member_headers, products, shipping, month, year):
    payload = {
        "items": [{"product_id": products[2].id, "quantity": 1}],
        "shipping": shipping,
        "payment": {
            "method": "card",
            "cardNumber": "4111111111111111",
            "cardName": "Maya Member",
            "expiryMonth": month,
            "expiryYear": year,
        },
    }
    res = client.post("/api/orders", json=payload, headers=member_headers)

    assert res.status_code == 400
    assert res.json()["message"] == "Validation error"
    assert db.query(Order).count() == 0
    assert db.query(PaymentCard).count() == 0


def test_empty_items_rejected(client, member_headers, shipping):
    res = client.post("/api/orders", json={"items": [], "shipping": shipping, "payment": {"method": "cod"}},
                      headers=member_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Validation error"


def test_checkout_requires_login(client, products, shipping):
    res = _checkout(client, {}, [(products[0], 1)], shipping)
    assert res.status_code == 401


def test_order_visibility(client, member_headers, other_headers, admin_headers, products, shipping):
    order_id = _checkout(client, member_headers, [(products[2], 1)], shipping).json()["order_id"]

    assert client.get(f"/api/orders/{order_id}", headers=other_headers).status_code == 404
    assert client.get(f"/api/orders/{order_id}", headers=admin_headers).status_code == 200


def test_list_orders_newest_first(client, member_headers, other_headers, products, shipping):
    first = _checkout(client, member_headers, [(products[2], 1)], shipping).json()["order_id"]
    second = _checkout(client, member_headers, [(products[1], 1)], shipping).json()["order_id"]
    _checkout(client, other_headers, [(products[0], 1)], shipping)

    orders = client.get("/api/orders/list", headers=member_headers).json()["orders"]
    assert [o["id"] for o in orders] == [second, first]
