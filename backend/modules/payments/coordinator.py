"""
Payment submission coordinator.

Turns a filled payment form into an idempotent create/retry sequence:

    idle -> submitting -> succeeded
                       -> challenge_pending -> submitting -> ...
                       -> failed

One idempotency key covers a submission cycle. It is kept across the single
authentication-challenge retry and replaced once the cycle reaches a terminal
state, so the server can de-duplicate resubmissions of the same attempt.
"""

import inspect
import logging
from typing import Any, Callable, Optional

from modules.billing.models import Customer
from shared.exceptions import SubgateError

from .exceptions import PaymentError, PaymentErrorType
from .interfaces import IPaymentProcessor, ISubscriptionApi
from .models import (
    PaymentForm,
    RetryStatus,
    SubmissionOutcome,
    SubmissionState,
    SubscriptionAttempt,
    new_idempotency_key,
)
from .strategies import (
    AttemptResult,
    SubmissionContext,
    SubmissionStrategy,
    select_strategy,
)

logger = logging.getLogger(__name__)


class PaymentSubmissionCoordinator:
    """
    Drives payment submissions for one checkout.

    Only one submission is in flight at a time; a submit while another with
    the same idempotency key is running is dropped.
    """

    def __init__(
        self,
        processor: IPaymentProcessor,
        api: ISubscriptionApi,
        plan_id: str,
        customer: Optional[Customer] = None,
        on_success: Optional[Callable[[SubscriptionAttempt], Any]] = None,
        on_failure: Optional[Callable[[PaymentError], Any]] = None,
        on_retry: Optional[Callable[[RetryStatus], Any]] = None,
        key_factory: Callable[[], str] = new_idempotency_key,
    ):
        """
        Initialize the coordinator.

        Args:
            processor: Payment processor SDK
            api: Server subscription endpoints
            plan_id: Plan being purchased
            customer: Existing billing customer, if any
            on_success: Called with the paid attempt
            on_failure: Called with the terminal PaymentError
            on_retry: Called when an authentication challenge needs re-entry
            key_factory: Idempotency key generator
        """
        self._processor = processor
        self._api = api
        self._plan_id = plan_id
        self._customer = customer
        self._on_success = on_success
        self._on_failure = on_failure
        self._on_retry = on_retry
        self._key_factory = key_factory

        self._state = SubmissionState.IDLE
        self._idempotency_key = key_factory()
        self._in_flight_key: Optional[str] = None
        self._retry_status: Optional[RetryStatus] = None
        self._payment_error: Optional[PaymentError] = None

    @property
    def state(self) -> SubmissionState:
        return self._state

    @property
    def idempotency_key(self) -> str:
        return self._idempotency_key

    @property
    def retry_status(self) -> Optional[RetryStatus]:
        return self._retry_status

    @property
    def payment_error(self) -> Optional[PaymentError]:
        return self._payment_error

    @property
    def in_flight(self) -> bool:
        return self._in_flight_key is not None

    def set_customer(self, customer: Optional[Customer]) -> None:
        """Replace the customer after a refresh."""
        self._customer = customer

    def strategy(self) -> SubmissionStrategy:
        return select_strategy(self._customer, self._processor, self._api)

    def can_submit(self, form: PaymentForm) -> bool:
        """Whether a submit with this form would be accepted."""
        if self._in_flight_key == self._idempotency_key:
            return False
        return self.strategy().form_is_valid(form)

    def clear_error(self) -> None:
        """Clear the displayed payment error (the form changed)."""
        self._payment_error = None

    def reset(self) -> None:
        """Abandon the current cycle and start a fresh one."""
        self._state = SubmissionState.IDLE
        self._retry_status = None
        self._payment_error = None
        self._in_flight_key = None
        self._idempotency_key = self._key_factory()

    async def submit(self, form: PaymentForm) -> Optional[SubmissionOutcome]:
        """
        Submit the form.

        Returns:
            The outcome, or None if the submit was dropped (already in
            flight, or the form is not valid)
        """
        if not self.can_submit(form):
            logger.debug("Payment submission dropped")
            return None

        strategy = self.strategy()
        key = self._idempotency_key
        retry_status, self._retry_status = self._retry_status, None
        self._in_flight_key = key
        self._state = SubmissionState.SUBMITTING
        self._payment_error = None

        try:
            outcome = await self._attempt(strategy, form, key, retry_status)
        finally:
            self._in_flight_key = None

        if outcome.state == SubmissionState.SUCCEEDED:
            await _notify(self._on_success, outcome.attempt)
        elif outcome.state == SubmissionState.CHALLENGE_PENDING:
            await _notify(self._on_retry, outcome.retry_status)
        else:
            await _notify(self._on_failure, outcome.error)
        return outcome

    async def _attempt(
        self,
        strategy: SubmissionStrategy,
        form: PaymentForm,
        key: str,
        retry_status: Optional[RetryStatus],
    ) -> SubmissionOutcome:
        result: Optional[AttemptResult] = None
        try:
            result = await strategy.submit(
                SubmissionContext(
                    form=form,
                    plan_id=self._plan_id,
                    idempotency_key=key,
                    customer=self._customer,
                    retry_status=retry_status,
                )
            )
            if result.attempt.is_paid or await strategy.authenticate(result):
                return self._succeed(key, result.attempt)
            if result.attempt.is_processing:
                # The payment method stays attached until the processor settles
                logger.info(
                    f"Payment for subscription {result.attempt.subscription_id} "
                    f"is still processing"
                )
                return self._succeed(key, result.attempt)

            await strategy.release(result)
            # Only one challenge retry per attempt
            if (
                strategy.supports_retry
                and retry_status is None
                and result.attempt.latest_invoice_id
            ):
                return self._challenge(key, result)
            return self._fail(key, PaymentError.card_declined(), result.attempt)
        except PaymentError as e:
            return self._fail(key, e, result.attempt if result else None)
        except SubgateError as e:
            logger.error(
                f"Subscription request failed for plan {self._plan_id}: "
                f"{e.code}: {e.message}"
            )
            error = PaymentError(PaymentErrorType.API_ERROR, e.code, e.message)
            return self._fail(key, error, None)
        except Exception:
            logger.exception(
                f"Unexpected payment submission failure for plan {self._plan_id}"
            )
            error = PaymentError(PaymentErrorType.API_ERROR, "UNKNOWN")
            return self._fail(key, error, None)

    def _succeed(self, key: str, attempt: SubscriptionAttempt) -> SubmissionOutcome:
        self._state = SubmissionState.SUCCEEDED
        self._idempotency_key = self._key_factory()
        return SubmissionOutcome(
            state=SubmissionState.SUCCEEDED,
            idempotency_key=key,
            attempt=attempt,
        )

    def _challenge(self, key: str, result: AttemptResult) -> SubmissionOutcome:
        retry_status = RetryStatus(
            invoice_id=result.attempt.latest_invoice_id,
            payment_method_id=result.payment_method_id,
        )
        self._retry_status = retry_status
        self._payment_error = PaymentError.card_declined()
        self._state = SubmissionState.CHALLENGE_PENDING
        return SubmissionOutcome(
            state=SubmissionState.CHALLENGE_PENDING,
            idempotency_key=key,
            attempt=result.attempt,
            error=self._payment_error,
            retry_status=retry_status,
        )

    def _fail(
        self,
        key: str,
        error: PaymentError,
        attempt: Optional[SubscriptionAttempt],
    ) -> SubmissionOutcome:
        self._payment_error = error
        self._state = SubmissionState.FAILED
        self._retry_status = None
        self._idempotency_key = self._key_factory()
        return SubmissionOutcome(
            state=SubmissionState.FAILED,
            idempotency_key=key,
            attempt=attempt,
            error=error,
        )


async def _notify(callback: Optional[Callable[[Any], Any]], value: Any) -> None:
    if callback is None:
        return
    result = callback(value)
    if inspect.isawaitable(result):
        await result
