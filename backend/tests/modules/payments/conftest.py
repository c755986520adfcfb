"""
Pytest fixtures for payments module tests.

The processor SDK and the subscription endpoints are replaced with fakes
that record calls and replay programmed results.
"""

import asyncio
import itertools
from typing import Optional

import pytest

from modules.billing.models import Customer, PaymentProvider
from modules.payments.coordinator import PaymentSubmissionCoordinator
from modules.payments.exceptions import PaymentError
from modules.payments.models import (
    CardDetails,
    PaymentForm,
    PaymentIntent,
    PaymentIntentStatus,
    PaymentMethod,
    SubscriptionAttempt,
)


def paid_attempt(invoice_id: str = "in_1") -> SubscriptionAttempt:
    return SubscriptionAttempt(
        subscription_id="sub_1",
        status="active",
        latest_invoice_id=invoice_id,
        payment_intent=PaymentIntent(id="pi_1", status=PaymentIntentStatus.SUCCEEDED),
    )


def declined_attempt(invoice_id: Optional[str] = "in_1") -> SubscriptionAttempt:
    return SubscriptionAttempt(
        subscription_id="sub_1",
        status="incomplete",
        latest_invoice_id=invoice_id,
        payment_intent=PaymentIntent(
            id="pi_1",
            status=PaymentIntentStatus.REQUIRES_PAYMENT_METHOD,
        ),
    )


def challenge_attempt() -> SubscriptionAttempt:
    return SubscriptionAttempt(
        subscription_id="sub_1",
        status="incomplete",
        latest_invoice_id="in_1",
        payment_intent=PaymentIntent(
            id="pi_1",
            status=PaymentIntentStatus.REQUIRES_ACTION,
            client_secret="pi_1_secret",
        ),
    )


def processing_attempt() -> SubscriptionAttempt:
    return SubscriptionAttempt(
        subscription_id="sub_1",
        status="incomplete",
        latest_invoice_id="in_1",
        payment_intent=PaymentIntent(id="pi_1", status=PaymentIntentStatus.PROCESSING),
    )


class FakeProcessor:
    """Processor SDK fake."""

    def __init__(self):
        self.created: list[tuple[str, str]] = []
        self.confirmed: list[tuple[str, str]] = []
        self.create_error: Optional[PaymentError] = None
        self.confirm_result: Optional[PaymentIntent] = None
        self.confirm_error: Optional[PaymentError] = None
        self._ids = itertools.count(1)

    async def create_payment_method(self, card, billing_name):
        if self.create_error is not None:
            raise self.create_error
        pm_id = f"pm_{next(self._ids)}"
        self.created.append((pm_id, billing_name))
        return PaymentMethod(id=pm_id, brand="visa", last4="4242")

    async def confirm_card_payment(self, client_secret, payment_method_id):
        self.confirmed.append((client_secret, payment_method_id))
        if self.confirm_error is not None:
            raise self.confirm_error
        return self.confirm_result


class FakeSubscriptionApi:
    """Server subscription endpoints fake."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.attempts: list[SubscriptionAttempt] = []
        self.error: Optional[Exception] = None
        self.detach_error: Optional[Exception] = None
        self.gate: Optional[asyncio.Event] = None

    def _next_attempt(self) -> SubscriptionAttempt:
        if self.error is not None:
            raise self.error
        return self.attempts.pop(0)

    async def create_customer(self, display_name, idempotency_key):
        self.calls.append(("create_customer", display_name, idempotency_key))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)

    async def create_subscription_with_payment_method(
        self, plan_id, payment_method_id, idempotency_key
    ):
        self.calls.append(("create", plan_id, payment_method_id, idempotency_key))
        return self._next_attempt()

    async def retry_invoice(self, invoice_id, payment_method_id, idempotency_key):
        self.calls.append(("retry", invoice_id, payment_method_id, idempotency_key))
        return self._next_attempt()

    async def create_subscription_with_saved_method(self, plan_id, idempotency_key):
        self.calls.append(("saved", plan_id, idempotency_key))
        return self._next_attempt()

    async def detach_failed_payment_method(self, payment_method_id):
        self.calls.append(("detach", payment_method_id))
        if self.detach_error is not None:
            raise self.detach_error
        return {"id": payment_method_id}

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def processor() -> FakeProcessor:
    return FakeProcessor()


@pytest.fixture
def api() -> FakeSubscriptionApi:
    return FakeSubscriptionApi()


@pytest.fixture
def card_form() -> PaymentForm:
    """A complete card form."""
    return PaymentForm(
        name="Jo Bloggs",
        card=CardDetails(number="4242424242424242", exp_month=12, exp_year=2030, cvc="123"),
    )


@pytest.fixture
def card_customer() -> Customer:
    return Customer(uid="u1", payment_provider=PaymentProvider.CARD, last4="4242")


@pytest.fixture
def wallet_customer() -> Customer:
    return Customer(uid="u1", payment_provider=PaymentProvider.WALLET)


@pytest.fixture
def notifications() -> dict[str, list]:
    return {"success": [], "failure": [], "retry": []}


@pytest.fixture
def make_coordinator(processor, api, notifications):
    """Build a coordinator with sequential keys key-1, key-2, ..."""

    def _make(customer: Optional[Customer] = None) -> PaymentSubmissionCoordinator:
        counter = itertools.count(1)
        return PaymentSubmissionCoordinator(
            processor,
            api,
            "plan_monthly",
            customer=customer,
            on_success=notifications["success"].append,
            on_failure=notifications["failure"].append,
            on_retry=notifications["retry"].append,
            key_factory=lambda: f"key-{next(counter)}",
        )

    return _make


class AttemptFactory:
    """Builders for server attempt responses."""

    paid = staticmethod(paid_attempt)
    declined = staticmethod(declined_attempt)
    challenge = staticmethod(challenge_attempt)
    processing = staticmethod(processing_attempt)


@pytest.fixture
def attempts() -> AttemptFactory:
    return AttemptFactory()
