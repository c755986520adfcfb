"""
Submission strategies, one per payment provider.

The strategy is chosen from the customer's stored payment provider through
the STRATEGIES registry. Supporting a new provider means adding a
PaymentProvider member, a strategy class, and a registry entry.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from modules.billing.models import Customer, PaymentProvider

from .exceptions import PaymentError, PaymentErrorType
from .interfaces import IPaymentProcessor, ISubscriptionApi
from .models import (
    PaymentForm,
    PaymentIntentStatus,
    RetryStatus,
    SubscriptionAttempt,
)

logger = logging.getLogger(__name__)


@dataclass
class SubmissionContext:
    """Everything a strategy needs for one attempt."""

    form: PaymentForm
    plan_id: str
    idempotency_key: str
    customer: Optional[Customer] = None
    retry_status: Optional[RetryStatus] = None


@dataclass
class AttemptResult:
    """A server attempt plus the payment method it was made with."""

    attempt: SubscriptionAttempt
    payment_method_id: Optional[str] = None


class SubmissionStrategy(ABC):
    """How a submission is turned into server calls for one provider."""

    # Whether a declined attempt can be resumed with re-entered details
    supports_retry: bool = False

    def __init__(self, processor: IPaymentProcessor, api: ISubscriptionApi):
        self._processor = processor
        self._api = api

    @abstractmethod
    def form_is_valid(self, form: PaymentForm) -> bool:
        """Whether the form holds what this strategy needs."""
        pass

    @abstractmethod
    async def submit(self, context: SubmissionContext) -> AttemptResult:
        """Create (or resume) the subscription on the server."""
        pass

    async def authenticate(self, result: AttemptResult) -> bool:
        """Complete an authentication challenge; True if payment was accepted."""
        return False

    async def release(self, result: AttemptResult) -> None:
        """Clean up after an attempt that will be retried or abandoned."""
        pass


class CardSubmission(SubmissionStrategy):
    """Tokenize the entered card, then create or resume the subscription."""

    supports_retry = True

    def form_is_valid(self, form: PaymentForm) -> bool:
        return bool(form.name.strip()) and form.card is not None

    async def submit(self, context: SubmissionContext) -> AttemptResult:
        form = context.form
        if form.card is None:
            raise PaymentError(PaymentErrorType.VALIDATION_ERROR, "incomplete_number")

        if context.customer is None:
            await self._api.create_customer(form.name, context.idempotency_key)

        payment_method = await self._processor.create_payment_method(
            form.card,
            billing_name=form.name,
        )

        if context.retry_status is not None:
            attempt = await self._api.retry_invoice(
                context.retry_status.invoice_id,
                payment_method.id,
                context.idempotency_key,
            )
        else:
            attempt = await self._api.create_subscription_with_payment_method(
                context.plan_id,
                payment_method.id,
                context.idempotency_key,
            )
        return AttemptResult(attempt=attempt, payment_method_id=payment_method.id)

    async def authenticate(self, result: AttemptResult) -> bool:
        intent = result.attempt.payment_intent
        if (
            intent is None
            or intent.status != PaymentIntentStatus.REQUIRES_ACTION
            or not intent.client_secret
            or not result.payment_method_id
        ):
            return False
        try:
            confirmed = await self._processor.confirm_card_payment(
                intent.client_secret,
                result.payment_method_id,
            )
        except PaymentError as e:
            logger.info(f"Card authentication failed: {e.code}")
            return False
        return confirmed.status in (
            PaymentIntentStatus.SUCCEEDED,
            PaymentIntentStatus.PROCESSING,
        )

    async def release(self, result: AttemptResult) -> None:
        if not result.payment_method_id:
            return
        try:
            await self._api.detach_failed_payment_method(result.payment_method_id)
        except Exception as e:
            logger.warning(
                f"Failed to detach payment method {result.payment_method_id}: {e}"
            )


class SavedMethodSubmission(SubmissionStrategy):
    """Subscribe with the customer's stored wallet; no card entry."""

    def form_is_valid(self, form: PaymentForm) -> bool:
        return True

    async def submit(self, context: SubmissionContext) -> AttemptResult:
        attempt = await self._api.create_subscription_with_saved_method(
            context.plan_id,
            context.idempotency_key,
        )
        return AttemptResult(attempt=attempt)


STRATEGIES: dict[PaymentProvider, type[SubmissionStrategy]] = {
    PaymentProvider.NONE: CardSubmission,
    PaymentProvider.CARD: CardSubmission,
    PaymentProvider.WALLET: SavedMethodSubmission,
}


def select_strategy(
    customer: Optional[Customer],
    processor: IPaymentProcessor,
    api: ISubscriptionApi,
) -> SubmissionStrategy:
    """Pick the strategy for the customer's stored payment provider."""
    provider = customer.payment_provider if customer else PaymentProvider.NONE
    return STRATEGIES[provider](processor, api)
