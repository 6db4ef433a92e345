# storefront/services/errors.py
"""Domain errors raised by the service layer.

Each error carries the HTTP status the API answers with; ``main.py`` renders
them as ``{"message": ...}``.
"""
from typing import Optional


class StoreError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(StoreError):
    status_code = 400
    default_message = "Invalid payload"


class Unauthorized(StoreError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(StoreError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(StoreError):
    status_code = 404
    default_message = "Not found"


class Conflict(StoreError):
    status_code = 409
    default_message = "Conflict"


# --- Order lifecycle / reviews ---

class InvalidTransition(StoreError):
    status_code = 400
    default_message = "Invalid status transition"


class NotReady(StoreError):
    status_code = 400
    default_message = "Order not completed yet"


class ProductNotInOrder(StoreError):
    status_code = 400
    default_message = "Product not found in order"


class DuplicateReview(Conflict):
    default_message = "Review already submitted"


# --- Promo codes ---

class PromoExpired(StoreError):
    status_code = 400
    default_message = "Promo code has expired"


class BelowMinimum(StoreError):
    status_code = 400
    default_message = "Order total is below the promo minimum"


class UsageLimitReached(StoreError):
    status_code = 400
    default_message = "Promo usage limit reached"


class AlreadyRedeemed(Conflict):
    default_message = "You have already used this promo code"
