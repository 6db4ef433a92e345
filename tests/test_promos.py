from datetime import datetime, timedelta, timezone

import pytest

from storefront.models.promo import PromoCode, PromoRedemption, DiscountType
from storefront.services import promos as promo_service
from storefront.services.errors import (
    AlreadyRedeemed, BelowMinimum, NotFound, PromoExpired, UsageLimitReached,
)


def test_apply_percentage_code(client, member_headers, promos):
    res = client.post("/api/promos/apply", json={"code": " save10 ", "subtotal": 200}, headers=member_headers)

    assert res.status_code == 200
    assert res.json() == {"promoId": promos["SAVE10"].id, "discount": 20.0, "finalSubtotal": 180.0}


def test_apply_does_not_redeem(client, db, member_headers, promos):
    for _ in range(2):
        res = client.post("/api/promos/apply", json={"code": "FLAT50", "subtotal": 300}, headers=member_headers)
        assert res.status_code == 200

    db.expire_all()
    assert promos["FLAT50"].used_count == 0
    assert db.query(PromoRedemption).count() == 0


def test_percentage_discount_is_capped(client, member_headers, promos):
    res = client.post("/api/promos/apply", json={"code": "HALF", "subtotal": 1000}, headers=member_headers)
    assert res.json()["discount"] == 100.0
    assert res.json()["finalSubtotal"] == 900.0


@pytest.mark.parametrize("code", ["NOPE", "OFF"])
def test_unknown_or_inactive_code(client, member_headers, promos, code):
    res = client.post("/api/promos/apply", json={"code": code, "subtotal": 100}, headers=member_headers)
    assert res.status_code == 404
    assert res.json() == {"message": "Promo code not found"}


def test_expired_code_wins_over_minimum(client, member_headers, promos):
    # OLD is both expired and far above the minimum; expiry is checked first
    res = client.post("/api/promos/apply", json={"code": "OLD", "subtotal": 10}, headers=member_headers)
    assert res.status_code == 400
    assert res.json() == {"message": "Promo code has expired"}


def test_below_minimum_reports_amount(client, member_headers, promos):
    res = client.post("/api/promos/apply", json={"code": "FLAT50", "subtotal": 100}, headers=member_headers)
    assert res.status_code == 400
    assert res.json() == {"message": "Minimum order is Rp 200"}


def test_usage_limit_reached(client, db, member_headers, promos):
    promos["FLAT50"].used_count = 1
    db.commit()

    res = client.post("/api/promos/apply", json={"code": "FLAT50", "subtotal": 300}, headers=member_headers)
    assert res.status_code == 400
    assert res.json() == {"message": "Promo usage limit reached"}


def test_already_redeemed_by_user(client, db, member, member_headers, promos):
    db.add(PromoRedemption(promo_id=promos["SAVE10"].id, user_id=member.id))
    db.commit()

    res = client.post("/api/promos/apply", json={"code": "SAVE10", "subtotal": 300}, headers=member_headers)
    assert res.status_code == 409
    assert res.json() == {"message": "You have already used this promo code"}


def test_apply_requires_login(client, promos):
    res = client.post("/api/promos/apply", json={"code": "SAVE10", "subtotal": 300})
    assert res.status_code == 401


def test_evaluate_error_types(db, member, promos):
    with pytest.raises(NotFound):
        promo_service.evaluate(db, member.id, "missing", 100)
    with pytest.raises(PromoExpired):
        promo_service.evaluate(db, member.id, "old", 5000)
    with pytest.raises(BelowMinimum):
        promo_service.evaluate(db, member.id, "flat50", 199.99)


def test_expiry_is_compared_against_now(db, member, promos):
    later = datetime.now(timezone.utc) + timedelta(days=30)
    promos["SAVE10"].expires_at = later - timedelta(days=1)
    db.commit()

    assert promo_service.evaluate(db, member.id, "SAVE10", 100).discount == 10.0
    with pytest.raises(PromoExpired):
        promo_service.evaluate(db, member.id, "SAVE10", 100, now=later)


def test_fixed_discount_never_exceeds_subtotal():
    promo = PromoCode(code="BIG", discount_type=DiscountType.FIXED, discount_value=500, max_discount=None)
    assert promo_service.compute_discount(promo, 300) == 300.0


def test_percentage_discount_rounds_to_cents():
    promo = PromoCode(code="P", discount_type=DiscountType.PERCENTAGE, discount_value=10, max_discount=None)
    assert promo_service.compute_discount(promo, 33.33) == 3.33


def test_redeem_records_usage(db, member, promos):
    promo_service.redeem(db, promos["SAVE10"].id, member.id)
    db.commit()
    db.refresh(promos["SAVE10"])

    assert promos["SAVE10"].used_count == 1
    assert db.query(PromoRedemption).filter(PromoRedemption.user_id == member.id).count() == 1


def test_redeem_twice_for_same_user(db, member, promos):
    promo_service.redeem(db, promos["SAVE10"].id, member.id)
    db.commit()

    with pytest.raises(AlreadyRedeemed):
        promo_service.redeem(db, promos["SAVE10"].id, member.id)
    db.rollback()


def test_redeem_respects_global_limit(db, member, other_member, promos):
    promo_service.redeem(db, promos["FLAT50"].id, member.id)
    db.commit()

    with pytest.raises(UsageLimitReached):
        promo_service.redeem(db, promos["FLAT50"].id, other_member.id)
    db.rollback()

    db.refresh(promos["FLAT50"])
    assert promos["FLAT50"].used_count == 1
    assert db.query(PromoRedemption).count() == 1


def test_format_currency():
    assert promo_service.format_currency(50000) == "Rp 50.000"
    assert promo_service.format_currency(200) == "Rp 200"
