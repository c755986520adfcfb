"""
In-memory billing gateway.

Used for local development and tests when no billing backend is available
(``BILLING_USE_STUBS=true``). It honours the same domain errors as the live
gateway so callers behave identically against either.
"""

import time
import uuid
from typing import Optional

from .exceptions import (
    RejectedCustomerUpdateError,
    RejectedPaymentTokenError,
    UnknownCustomerError,
    UnknownSubscriptionError,
    UnknownSubscriptionPlanError,
)
from .interfaces import IBillingGateway
from .models import (
    Customer,
    MessageResponse,
    MetricsContext,
    PaymentProvider,
    Plan,
    Subscription,
    SubscriptionList,
)
from .operations import ALREADY_ABSENT_MESSAGE

# Tokens starting with this prefix are refused, to exercise rejection paths
DECLINED_TOKEN_PREFIX = "tok_declined"

DEFAULT_STUB_PLANS = [
    Plan(
        plan_id="plan_monthly",
        plan_name="Monthly",
        product_id="prod_default",
        product_name="Default Product",
        interval="month",
        interval_count=1,
        amount=499,
        currency="usd",
    ),
    Plan(
        plan_id="plan_yearly",
        plan_name="Yearly",
        product_id="prod_default",
        product_name="Default Product",
        interval="year",
        interval_count=1,
        amount=4999,
        currency="usd",
    ),
]

_PERIOD_SECONDS = {
    "day": 86400,
    "week": 7 * 86400,
    "month": 30 * 86400,
    "year": 365 * 86400,
}


class StubBillingGateway(IBillingGateway):
    """
    Billing gateway with in-memory storage.

    Customers are created on their first subscription.
    """

    def __init__(self, plans: Optional[list[Plan]] = None):
        self._plans = list(plans if plans is not None else DEFAULT_STUB_PLANS)
        self._customers: dict[str, Customer] = {}

    def _plan(self, plan_id: str) -> Plan:
        for plan in self._plans:
            if plan.plan_id == plan_id:
                return plan
        raise UnknownSubscriptionPlanError(plan_id)

    def _customer(self, uid: str) -> Customer:
        customer = self._customers.get(uid)
        if customer is None:
            raise UnknownCustomerError(uid)
        return customer

    def _subscription(self, uid: str, sub_id: str) -> Subscription:
        for subscription in self._customer(uid).subscriptions:
            if subscription.subscription_id == sub_id:
                return subscription
        raise UnknownSubscriptionError(sub_id)

    async def list_plans(
        self,
        metrics_context: Optional[MetricsContext] = None,
    ) -> list[Plan]:
        return list(self._plans)

    async def list_subscriptions(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        return SubscriptionList(subscriptions=list(self._customer(uid).subscriptions))

    async def get_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        return self._customer(uid).model_copy(deep=True)

    async def update_customer(
        self,
        uid: str,
        pmt_token: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        customer = self._customer(uid)
        if pmt_token.startswith(DECLINED_TOKEN_PREFIX):
            raise RejectedCustomerUpdateError("card declined", uid=uid)
        customer.payment_provider = PaymentProvider.CARD
        customer.last4 = pmt_token[-4:].rjust(4, "0")
        return customer.model_copy(deep=True)

    async def delete_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        if self._customers.pop(uid, None) is None:
            return MessageResponse(message=ALREADY_ABSENT_MESSAGE)
        return MessageResponse(message="customer deleted")

    async def create_subscription(
        self,
        uid: str,
        pmt_token: str,
        plan_id: str,
        display_name: str,
        email: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        plan = self._plan(plan_id)
        if pmt_token.startswith(DECLINED_TOKEN_PREFIX):
            raise RejectedPaymentTokenError("card declined", uid=uid)

        customer = self._customers.setdefault(uid, Customer(uid=uid))
        customer.payment_provider = PaymentProvider.CARD
        customer.last4 = pmt_token[-4:].rjust(4, "0")

        now = int(time.time())
        period = _PERIOD_SECONDS[plan.interval] * plan.interval_count
        customer.subscriptions.append(
            Subscription(
                subscription_id=f"sub_{uuid.uuid4().hex[:16]}",
                plan_id=plan.plan_id,
                plan_name=plan.plan_name,
                status="active",
                current_period_start=now,
                current_period_end=now + period,
            )
        )
        return SubscriptionList(subscriptions=list(customer.subscriptions))

    async def cancel_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        subscription = self._subscription(uid, sub_id)
        subscription.cancel_at_period_end = True
        subscription.end_at = subscription.current_period_end
        return MessageResponse(message="subscription cancelled")

    async def reactivate_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        subscription = self._subscription(uid, sub_id)
        subscription.cancel_at_period_end = False
        subscription.end_at = None
        return MessageResponse(message="subscription reactivated")

    async def close(self) -> None:
        pass
