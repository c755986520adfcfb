"""
Payments module exceptions.

PaymentError mirrors the processor's error shape (a category plus a code) so
the UI can map it to processor-specific guidance.
"""

from enum import Enum
from typing import Optional

from shared.exceptions import SubgateError


class PaymentErrorType(str, Enum):
    """Processor error categories."""

    CARD_ERROR = "card_error"
    VALIDATION_ERROR = "validation_error"
    INVALID_REQUEST_ERROR = "invalid_request_error"
    API_ERROR = "api_error"
    AUTHENTICATION_ERROR = "authentication_error"
    RATE_LIMIT_ERROR = "rate_limit_error"


class PaymentsError(SubgateError):
    """Base exception for payment submission errors."""

    pass


class PaymentError(PaymentsError):
    """
    A payment could not be completed.

    Raised by the processor SDK, or synthesized by the coordinator when a
    create/retry call fails.
    """

    def __init__(
        self,
        type: PaymentErrorType,
        code: str,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or f"{type.value}: {code}",
            code=code,
            details={"type": type.value},
        )
        self.type = type

    @classmethod
    def card_declined(cls) -> "PaymentError":
        return cls(PaymentErrorType.CARD_ERROR, "card_declined")
