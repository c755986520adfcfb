"""
Payments module.

Coordinates payment form submissions against the payment processor and the
server's subscription endpoints: provider-specific strategies, idempotency
keys, and a single authentication-challenge retry.

Public API:
- PaymentSubmissionCoordinator: Submission state machine
- IPaymentProcessor, ISubscriptionApi: Collaborator interfaces
- PaymentError: Processor-facing error
"""

from .coordinator import PaymentSubmissionCoordinator
from .interfaces import IPaymentProcessor, ISubscriptionApi
from .models import (
    CardDetails,
    PaymentForm,
    PaymentIntent,
    PaymentIntentStatus,
    PaymentMethod,
    RetryStatus,
    SubmissionOutcome,
    SubmissionState,
    SubscriptionAttempt,
    new_idempotency_key,
)
from .exceptions import PaymentsError, PaymentError, PaymentErrorType
from .strategies import (
    CardSubmission,
    SavedMethodSubmission,
    STRATEGIES,
    select_strategy,
)

__all__ = [
    # Coordinator
    "PaymentSubmissionCoordinator",
    # Interfaces
    "IPaymentProcessor",
    "ISubscriptionApi",
    # Models
    "CardDetails",
    "PaymentForm",
    "PaymentIntent",
    "PaymentIntentStatus",
    "PaymentMethod",
    "RetryStatus",
    "SubmissionOutcome",
    "SubmissionState",
    "SubscriptionAttempt",
    "new_idempotency_key",
    # Strategies
    "CardSubmission",
    "SavedMethodSubmission",
    "STRATEGIES",
    "select_strategy",
    # Exceptions
    "PaymentsError",
    "PaymentError",
    "PaymentErrorType",
]
