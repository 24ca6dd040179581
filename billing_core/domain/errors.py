"""Domain errors

Raised by preview and check operations. Execute operations convert them into
error Results instead of raising.
"""

from billing_core.libs.result import Error


class BillingError(Exception):
    """Base class for expected, user-facing billing failures"""

    code = "BILLING_ERROR"

    def __init__(self, message: str, code: str = None, reason: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.reason = reason

    def to_error(self) -> Error:
        return Error(code=self.code, message=self.message, reason=self.reason)


class NotFoundError(BillingError):
    code = "NOT_FOUND"


class BillingValidationError(BillingError):
    code = "VALIDATION_ERROR"


class StateConflictError(BillingError):
    code = "STATE_CONFLICT"


class SubscriptionNotFoundError(NotFoundError):
    code = "SUBSCRIPTION_NOT_FOUND"


class CouponNotFoundError(NotFoundError):
    code = "COUPON_NOT_FOUND"

    def __init__(self, message: str = "Coupon not found", **kwargs):
        super().__init__(message, **kwargs)


class CouponValidationError(BillingValidationError):
    """Inactive, expired, exhausted or inapplicable coupon"""
