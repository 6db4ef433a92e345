import pytest

from storefront.models.order import OrderStatus
from storefront.models.review import ProductReview
from storefront.services.errors import ValidationFailed
from storefront.services.reviews import submit_review


def _review(client, headers, order_id, product_id, rating=5, review="Great"):
    return client.post("/api/reviews", json={
        "order_id": order_id, "product_id": product_id, "rating": rating, "review": review,
    }, headers=headers)


def test_review_completed_order(client, db, member, member_headers, products, make_order):
    order = make_order(member, products[:2], status=OrderStatus.COMPLETED)

    res = _review(client, member_headers, order.id, products[0].id, rating=4)
    assert res.status_code == 201
    assert res.json()["message"] == "Review submitted successfully"

    stored = db.query(ProductReview).one()
    assert (stored.user_id, stored.order_id, stored.product_id, stored.rating) == (member.id, order.id, products[0].id, 4)


def test_one_review_per_product_and_order(client, member, member_headers, products, make_order):
    order = make_order(member, products[:2], status=OrderStatus.COMPLETED)

    assert _review(client, member_headers, order.id, products[0].id).status_code == 201
    again = _review(client, member_headers, order.id, products[0].id)
    assert again.status_code == 409
    assert again.json() == {"message": "Review already submitted"}

    # Another product of the same order is still open
    assert _review(client, member_headers, order.id, products[1].id).status_code == 201


@pytest.mark.parametrize("status", [OrderStatus.PAID, OrderStatus.DELIVERED, OrderStatus.CANCELLED])
def test_order_must_be_completed(client, member, member_headers, products, make_order, status):
    order = make_order(member, products[:1], status=status)

    res = _review(client, member_headers, order.id, products[0].id)
    assert res.status_code == 400
    assert res.json() == {"message": "Order not completed yet"}


def test_product_must_be_in_order(client, member, member_headers, products, make_order):
    order = make_order(member, products[:1], status=OrderStatus.COMPLETED)

    res = _review(client, member_headers, order.id, products[2].id)
    assert res.status_code == 400
    assert res.json() == {"message": "Product not found in order"}


def test_only_the_buyer_can_review(client, member, other_headers, products, make_order):
    order = make_order(member, products[:1], status=OrderStatus.COMPLETED)

    res = _review(client, other_headers, order.id, products[0].id)
    assert res.status_code == 403
    assert res.json() == {"message": "Unauthorized"}


def test_unknown_order(client, member_headers, products):
    res = _review(client, member_headers, 12345, products[0].id)
    assert res.status_code == 404
    assert res.json() == {"message": "Order not found"}


def test_rating_out_of_range(client, member, member_headers, products, make_order):
    order = make_order(member, products[:1], status=OrderStatus.COMPLETED)

    res = _review(client, member_headers, order.id, products[0].id, rating=6)
    assert res.status_code == 400


def test_service_validates_rating_and_length(db, member, products, make_order):
    order = make_order(member, products[:1], status=OrderStatus.COMPLETED)

    with pytest.raises(ValidationFailed):
        submit_review(db, member.id, order.id, products[0].id, rating=0)
    with pytest.raises(ValidationFailed):
        submit_review(db, member.id, order.id, products[0].id, rating=5, review="x" * 1001)
