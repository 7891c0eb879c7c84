"""
Domain exceptions.

Every error the service raises on purpose derives from ``StorefrontError``
and carries the HTTP status the API layer answers with.
"""
from typing import Optional


class StorefrontError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 500
    code: str = "STOREFRONT_ERROR"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


# ---------------------------------------------------------------------------
# 400 - malformed or missing input
# ---------------------------------------------------------------------------

class ValidationError(StorefrontError):
    status_code = 400
    code = "VALIDATION_ERROR"


class MissingItems(ValidationError):
    code = "MISSING_ITEMS"

    def __init__(self) -> None:
        super().__init__("Order must contain at least one item")


class MissingAddress(ValidationError):
    code = "MISSING_ADDRESS"

    def __init__(self) -> None:
        super().__init__("Delivery address is required")


class CustomerNotFound(ValidationError):
    code = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str) -> None:
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class InvalidSignature(ValidationError):
    code = "INVALID_SIGNATURE"

    def __init__(self, message: str = "Invalid webhook signature") -> None:
        super().__init__(message)


class MissingReference(ValidationError):
    code = "MISSING_REFERENCE"

    def __init__(self) -> None:
        super().__init__("Payment reference is missing")


class MissingCheckoutData(ValidationError):
    code = "MISSING_CHECKOUT_DATA"

    def __init__(self, reference: str) -> None:
        super().__init__(f"No checkout data found in payment {reference}")
        self.reference = reference


# ---------------------------------------------------------------------------
# 400 - business rule violations
# ---------------------------------------------------------------------------

class DomainError(StorefrontError):
    status_code = 400
    code = "DOMAIN_ERROR"


class DiscountError(DomainError):
    """A discount code cannot be applied to the cart."""

    NOT_FOUND = "DISCOUNT_NOT_FOUND"
    INACTIVE = "DISCOUNT_INACTIVE"
    NOT_YET_ACTIVE = "DISCOUNT_NOT_YET_ACTIVE"
    EXPIRED = "DISCOUNT_EXPIRED"
    USAGE_LIMIT_REACHED = "DISCOUNT_USAGE_LIMIT_REACHED"
    BELOW_MINIMUM = "DISCOUNT_BELOW_MINIMUM"
    ZERO_BASE_AMOUNT = "DISCOUNT_ZERO_BASE_AMOUNT"
    UNSUPPORTED_TYPE = "DISCOUNT_UNSUPPORTED_TYPE"
    NOT_APPLICABLE = "DISCOUNT_NOT_APPLICABLE"

    code = "DISCOUNT_ERROR"


class InvalidDiscount(DomainError):
    """Raised at checkout when strict discount handling is enabled."""

    code = "INVALID_DISCOUNT"

    def __init__(self, reason: DiscountError) -> None:
        super().__init__(f"Invalid discount code: {reason.message}")
        self.reason = reason


class InvalidTotal(DomainError):
    code = "INVALID_TOTAL"

    def __init__(self, total) -> None:
        super().__init__(f"Order total must be greater than zero (got {total})")
        self.total = total


class InvalidStatusTransition(DomainError):
    code = "INVALID_STATUS_TRANSITION"


# ---------------------------------------------------------------------------
# 401 / 403 / 404 / 409
# ---------------------------------------------------------------------------

class AuthenticationError(StorefrontError):
    status_code = 401
    code = "UNAUTHENTICATED"


class AuthorizationError(StorefrontError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(StorefrontError):
    status_code = 404
    code = "NOT_FOUND"


class DuplicatePaymentReference(StorefrontError):
    """An order was already created for this payment reference."""

    status_code = 409
    code = "DUPLICATE_PAYMENT_REFERENCE"

    def __init__(self, reference: str) -> None:
        super().__init__(f"An order already exists for payment reference {reference}")
        self.reference = reference


# ---------------------------------------------------------------------------
# 5xx - storage and gateway failures
# ---------------------------------------------------------------------------

class UpstreamError(StorefrontError):
    status_code = 500
    code = "UPSTREAM_ERROR"


class PersistenceFailure(UpstreamError):
    code = "PERSISTENCE_FAILURE"


class PaymentGatewayError(UpstreamError):
    status_code = 502
    code = "PAYMENT_GATEWAY_ERROR"
