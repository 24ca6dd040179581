from typing import Any, Dict, Optional
from billing_core.libs.result import Error


class ClientError(Exception):
    """
    Raised from routes to return an error payload

    Rendered by the app as {"error": {"code": ..., "message": ...}} plus any
    extra top-level fields.
    """

    def __init__(
        self,
        error: Error,
        status_code: int = 400,
        extra: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code
        self.extra = extra or {}

    def to_content(self) -> Dict[str, Any]:
        content = {"error": {"code": self.error.code, "message": self.error.message}}
        content.update(self.extra)
        return content


# Status codes for error codes returned in Results
ERROR_STATUS_CODES = {
    "SUBSCRIPTION_NOT_FOUND": 404,
    "COUPON_NOT_FOUND": 404,
    "NOT_FOUND": 404,
    "SAME_PLAN": 409,
    "ALREADY_CANCELED": 409,
    "SUBSCRIPTION_CANCELING": 409,
    "SUBSCRIPTION_EXISTS": 409,
    "STATE_CONFLICT": 409,
    "COUPON_EXHAUSTED": 409,
    "REGISTRATION_LIMIT_REACHED": 402,
}


def status_code_for(error: Error, default: int = 400) -> int:
    return ERROR_STATUS_CODES.get(error.code, default)
