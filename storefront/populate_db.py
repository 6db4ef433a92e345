"""Seed a development database with an admin account, categories, products and promo codes.

Usage: ``python -m storefront.populate_db``. Credentials for the admin account
come from ``SEED_ADMIN_EMAIL`` / ``SEED_ADMIN_PASSWORD``.
"""
import os
import logging
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv

from storefront.database import SessionLocal, init_db
from storefront.models.users import User
from storefront.models.product import Category, Product
from storefront.models.promo import PromoCode, DiscountType
from storefront.utils.hashing import get_password_hash

load_dotenv()
logger = logging.getLogger(__name__)

# Configuration
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "change-me-please")

CATEGORIES = [
    ("Electronics", "electronics", "Phones, laptops and accessories"),
    ("Fashion", "fashion", "Clothing and shoes"),
    ("Home", "home", "Furniture and kitchen"),
]

PRODUCTS = [
    # name, category slug, price, stock, discount
    ("Wireless Earbuds", "electronics", 250.0, 40, 10.0),
    ("Mechanical Keyboard", "electronics", 650.0, 15, None),
    ("Denim Jacket", "fashion", 320.0, 25, 20.0),
    ("Running Shoes", "fashion", 480.0, 30, None),
    ("Ceramic Mug Set", "home", 90.0, 100, None),
]

PROMOS = [
    # code, type, value, max discount, min order, usage limit
    ("SAVE10", DiscountType.PERCENTAGE, 10, None, 50, None),
    ("FLAT50", DiscountType.FIXED, 50, None, 200, 100),
    ("BIG25", DiscountType.PERCENTAGE, 25, 150, 300, 500),
]
# End Configuration


def populate():
    init_db()
    session = SessionLocal()
    try:
        if not session.query(User).filter(User.email == ADMIN_EMAIL).first():
            session.add(User(email=ADMIN_EMAIL, password_hash=get_password_hash(ADMIN_PASSWORD),
                             fullname="Store Admin", role="admin"))

        categories = {}
        for name, slug, description in CATEGORIES:
            cat = session.query(Category).filter(Category.slug == slug).first()
            if not cat:
                cat = Category(name=name, slug=slug, description=description)
                session.add(cat)
                session.flush()
            categories[slug] = cat

        for name, slug, price, stock, discount in PRODUCTS:
            if not session.query(Product).filter(Product.name == name).first():
                session.add(Product(name=name, category_id=categories[slug].id, price=price,
                                    stock=stock, discount=discount, status="active"))

        expires = datetime.now(timezone.utc) + timedelta(days=90)
        for code, kind, value, cap, minimum, limit in PROMOS:
            if not session.query(PromoCode).filter(PromoCode.code == code).first():
                session.add(PromoCode(code=code, discount_type=kind, discount_value=value, max_discount=cap,
                                      min_order_amount=minimum, usage_limit=limit, expires_at=expires))

        session.commit()
        logger.info("Seed data ready (admin: %s)", ADMIN_EMAIL)
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    populate()
