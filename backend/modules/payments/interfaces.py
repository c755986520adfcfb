"""
Payments module interfaces.

The coordinator talks to two collaborators: the payment processor SDK and
the server's subscription endpoints. Both are injected, so tests substitute
fakes and a different processor only needs a new IPaymentProcessor.
"""

from typing import Optional, Protocol, runtime_checkable

from .models import CardDetails, PaymentIntent, PaymentMethod, SubscriptionAttempt


@runtime_checkable
class IPaymentProcessor(Protocol):
    """Card/wallet processor primitives."""

    async def create_payment_method(
        self,
        card: CardDetails,
        billing_name: str,
    ) -> PaymentMethod:
        """
        Tokenize a card.

        Raises:
            PaymentError: If the processor rejects the card
        """
        ...

    async def confirm_card_payment(
        self,
        client_secret: str,
        payment_method_id: str,
    ) -> PaymentIntent:
        """
        Run the processor's authentication challenge for a payment intent.

        Raises:
            PaymentError: If authentication fails or is abandoned
        """
        ...


@runtime_checkable
class ISubscriptionApi(Protocol):
    """Server endpoints used during subscription checkout."""

    async def create_customer(
        self,
        display_name: str,
        idempotency_key: str,
    ) -> None:
        ...

    async def create_subscription_with_payment_method(
        self,
        plan_id: str,
        payment_method_id: str,
        idempotency_key: str,
    ) -> SubscriptionAttempt:
        ...

    async def retry_invoice(
        self,
        invoice_id: str,
        payment_method_id: str,
        idempotency_key: str,
    ) -> SubscriptionAttempt:
        """Pay an open invoice with a new payment method."""
        ...

    async def create_subscription_with_saved_method(
        self,
        plan_id: str,
        idempotency_key: str,
    ) -> SubscriptionAttempt:
        """Subscribe using the customer's stored wallet agreement."""
        ...

    async def detach_failed_payment_method(
        self,
        payment_method_id: str,
    ) -> Optional[dict]:
        ...
