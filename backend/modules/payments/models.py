"""
Payments module data models.

These models describe the values exchanged with the payment processor and
the server's subscription endpoints during one submission cycle.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .exceptions import PaymentError


def new_idempotency_key() -> str:
    """Generate an opaque idempotency key for one submission cycle."""
    return uuid.uuid4().hex


class SubmissionState(str, Enum):
    """States of a payment submission cycle."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    CHALLENGE_PENDING = "challenge_pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PaymentIntentStatus(str, Enum):
    """Processor payment intent statuses the coordinator acts on."""

    SUCCEEDED = "succeeded"
    PROCESSING = "processing"
    REQUIRES_ACTION = "requires_action"                  # Authentication challenge
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"  # Declined, needs a new card


class CardDetails(BaseModel):
    """Card entered by the user; only ever handed to the processor."""

    number: SecretStr
    exp_month: int = Field(..., ge=1, le=12)
    exp_year: int
    cvc: SecretStr
    postal_code: Optional[str] = None


class PaymentForm(BaseModel):
    """Values from the payment form."""

    name: str = ""
    card: Optional[CardDetails] = None


class PaymentMethod(BaseModel):
    """A tokenized payment method returned by the processor."""

    id: str
    brand: Optional[str] = None
    last4: Optional[str] = None


class PaymentIntent(BaseModel):
    """Processor payment intent attached to a subscription invoice."""

    id: Optional[str] = None
    status: PaymentIntentStatus
    client_secret: Optional[str] = None


class SubscriptionAttempt(BaseModel):
    """Server response to a create-subscription or retry-invoice call."""

    subscription_id: Optional[str] = None
    status: str
    latest_invoice_id: Optional[str] = None
    payment_intent: Optional[PaymentIntent] = None

    @property
    def is_paid(self) -> bool:
        if self.payment_intent is None:
            return self.status == "active"
        return self.payment_intent.status == PaymentIntentStatus.SUCCEEDED

    @property
    def is_processing(self) -> bool:
        """The processor accepted the payment and settles it asynchronously."""
        return (
            self.payment_intent is not None
            and self.payment_intent.status == PaymentIntentStatus.PROCESSING
        )


class RetryStatus(BaseModel):
    """
    Identifies the in-progress invoice to resume after a challenge.

    Created on the first challenge response and consumed by the next
    submission.
    """

    model_config = ConfigDict(frozen=True)

    invoice_id: str
    payment_method_id: Optional[str] = None


@dataclass
class SubmissionOutcome:
    """Result of one submit() call."""

    state: SubmissionState
    idempotency_key: str
    attempt: Optional[SubscriptionAttempt] = None
    error: Optional[PaymentError] = None
    retry_status: Optional[RetryStatus] = None
