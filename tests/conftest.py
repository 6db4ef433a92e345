from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storefront.models  # noqa: F401
from storefront.database import Base, get_db
from storefront.main import app
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.product import Category, Product
from storefront.models.promo import PromoCode, DiscountType
from storefront.models.users import User
from storefront.utils.hashing import get_password_hash
from storefront.utils.tokenJWT import create_access_token

PASSWORD = "secret-pass-1"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would create tables on the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, email, role="member", fullname=None):
    user = User(email=email, password_hash=PASSWORD_HASH, fullname=fullname or email.split("@")[0], role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _headers(user):
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def member(db):
    return _make_user(db, "member@example.com", fullname="Maya Member")


@pytest.fixture()
def other_member(db):
    return _make_user(db, "other@example.com", fullname="Omar Other")


@pytest.fixture()
def admin(db):
    return _make_user(db, "admin@example.com", role="admin", fullname="Store Admin")


@pytest.fixture()
def member_headers(member):
    return _headers(member)


@pytest.fixture()
def other_headers(other_member):
    return _headers(other_member)


@pytest.fixture()
def admin_headers(admin):
    return _headers(admin)


@pytest.fixture()
def category(db):
    cat = Category(name="Electronics", slug="electronics", description="Phones and accessories")
    db.add(cat)
    db.commit()
    db.refresh(cat)
    return cat


@pytest.fixture()
def products(db, category):
    """Three products: 250, 350 and 50."""
    rows = [
        Product(name="Wireless Earbuds", price=250.0, stock=10, category_id=category.id, discount=10.0),
        Product(name="Mechanical Keyboard", price=350.0, stock=5, category_id=category.id),
        Product(name="Ceramic Mug", price=50.0, stock=100),
    ]
    db.add_all(rows)
    db.commit()
    for p in rows:
        db.refresh(p)
    return rows


@pytest.fixture()
def promos(db):
    now = datetime.now(timezone.utc)
    rows = {
        "SAVE10": PromoCode(code="SAVE10", discount_type=DiscountType.PERCENTAGE, discount_value=10,
                            min_order_amount=50),
        "FLAT50": PromoCode(code="FLAT50", discount_type=DiscountType.FIXED, discount_value=50,
                            min_order_amount=200, usage_limit=1),
        "HALF": PromoCode(code="HALF", discount_type=DiscountType.PERCENTAGE, discount_value=50,
                          max_discount=100, min_order_amount=0),
        "OLD": PromoCode(code="OLD", discount_type=DiscountType.FIXED, discount_value=20,
                         min_order_amount=1000, expires_at=now - timedelta(days=1)),
        "OFF": PromoCode(code="OFF", discount_type=DiscountType.FIXED, discount_value=20, is_active=False),
    }
    db.add_all(rows.values())
    db.commit()
    for p in rows.values():
        db.refresh(p)
    return rows


@pytest.fixture()
def make_order(db):
    """Insert an order directly, bypassing checkout, in any status."""
    def _make(user, items, status=OrderStatus.PAID):
        subtotal = sum(p.price for p in items)
        order = Order(user_id=user.id, status=status, subtotal=subtotal, shipping_cost=0.0,
                      tax=0.0, discount=0.0, total=subtotal)
        db.add(order)
        db.flush()
        for p in items:
            db.add(OrderItem(order_id=order.id, product_id=p.id, quantity=1, price_at_time=p.price))
        db.commit()
        db.refresh(order)
        return order
    return _make


@pytest.fixture()
def shipping():
    return {
        "fullName": "Maya Member",
        "email": "member@example.com",
        "phone": "+62 812 0000 0000",
        "address": "Jl. Merdeka 1",
        "city": "Jakarta",
        "state": "DKI Jakarta",
        "zipCode": "10110",
    }


@pytest.fixture()
def password():
    return PASSWORD
