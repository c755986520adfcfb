"""
Billing module interface.

Other modules should depend on IBillingGateway, not the concrete implementation.
The live gateway, the in-memory stub and the disabled gateway all satisfy it.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import (
    Customer,
    MessageResponse,
    MetricsContext,
    Plan,
    SubscriptionList,
)


@runtime_checkable
class IBillingGateway(Protocol):
    """
    Interface for subscription billing operations.

    Every method takes an optional MetricsContext as its last argument. When
    present, the call's latency is reported as a flow event.
    """

    async def list_plans(
        self,
        metrics_context: Optional[MetricsContext] = None,
    ) -> list[Plan]:
        """
        List the plans offered by the billing backend.

        Returns:
            Plans in backend order (may be served from cache)
        """
        ...

    async def list_subscriptions(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        """
        List a customer's subscriptions.

        Returns:
            The subscriptions; empty when the backend refuses access (403)

        Raises:
            UnknownCustomerError: If the backend has no such customer
        """
        ...

    async def get_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        """
        Fetch a customer's billing identity.

        Raises:
            UnknownCustomerError: If the backend has no such customer
        """
        ...

    async def update_customer(
        self,
        uid: str,
        pmt_token: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        """
        Replace a customer's payment method.

        Raises:
            UnknownCustomerError: If the backend has no such customer
            RejectedCustomerUpdateError: If the payment token is refused
        """
        ...

    async def delete_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        """
        Delete a customer.

        Idempotent: a customer that is already absent is not an error.
        """
        ...

    async def create_subscription(
        self,
        uid: str,
        pmt_token: str,
        plan_id: str,
        display_name: str,
        email: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        """
        Subscribe a customer to a plan.

        Returns:
            The customer's subscriptions after the change

        Raises:
            UnknownSubscriptionPlanError: If the plan does not exist
            RejectedPaymentTokenError: If the payment token is refused
        """
        ...

    async def cancel_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        """
        Cancel a subscription at the end of its period.

        Raises:
            UnknownCustomerError: If the customer does not exist
            UnknownSubscriptionError: If the subscription does not exist
        """
        ...

    async def reactivate_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        """
        Undo a pending cancellation.

        Raises:
            UnknownCustomerError: If the customer does not exist
            UnknownSubscriptionError: If the subscription does not exist
        """
        ...

    async def close(self) -> None:
        """Release network and cache resources."""
        ...
