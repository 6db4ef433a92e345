# Import every model so Base.metadata knows all tables
from storefront.models import users, product, cart, favorite, promo, order, review, payment_card, log  # noqa: F401
