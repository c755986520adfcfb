"""
Billing module data models.

These models describe the payloads exchanged with the external billing
backend and are exposed to other modules through the interface.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaymentProvider(str, Enum):
    """Payment provider a customer is affiliated with."""

    NONE = "none"      # No stored payment method yet
    CARD = "card"      # Card stored with the card processor
    WALLET = "wallet"  # Wallet account (saved method, no card entry)


class Plan(BaseModel):
    """
    A subscription plan offered by the billing backend.

    Plans are immutable once fetched and are safe to cache.
    """

    model_config = ConfigDict(frozen=True)

    plan_id: str = Field(..., min_length=1, description="Plan ID")
    plan_name: Optional[str] = Field(None, description="Plan display name")
    product_id: str = Field(..., min_length=1, description="Product ID")
    product_name: Optional[str] = Field(None, description="Product display name")
    interval: Literal["day", "week", "month", "year"] = Field(
        ...,
        description="Billing interval unit",
    )
    interval_count: int = Field(default=1, ge=1, description="Intervals per period")
    amount: int = Field(..., ge=0, description="Price in minor currency units")
    currency: str = Field(..., min_length=1, description="ISO currency code")
    plan_metadata: Optional[dict[str, Any]] = Field(None, description="Plan metadata")
    product_metadata: Optional[dict[str, Any]] = Field(
        None,
        description="Product metadata",
    )


class Subscription(BaseModel):
    """A customer's subscription to a plan."""

    subscription_id: str = Field(..., min_length=1, description="Subscription ID")
    plan_id: str = Field(..., min_length=1, description="Plan ID")
    plan_name: Optional[str] = Field(None, description="Plan display name")
    status: str = Field(..., description="Backend subscription status")
    current_period_start: int = Field(..., description="Period start (epoch seconds)")
    current_period_end: int = Field(..., description="Period end (epoch seconds)")
    cancel_at_period_end: bool = Field(
        default=False,
        description="Whether the subscription ends with the current period",
    )
    end_at: Optional[int] = Field(None, description="End time (epoch seconds)")


class SubscriptionList(BaseModel):
    """Subscriptions held by a customer."""

    subscriptions: list[Subscription] = Field(default_factory=list)


class Customer(BaseModel):
    """
    An account's billing identity.

    Customers are never cached; they are always fetched fresh.
    """

    uid: Optional[str] = Field(None, description="Account ID")
    payment_provider: PaymentProvider = Field(
        default=PaymentProvider.NONE,
        description="Stored payment provider",
    )
    last4: Optional[str] = Field(None, description="Last four card digits")
    brand: Optional[str] = Field(None, description="Card brand")
    exp_month: Optional[int] = Field(None, ge=1, le=12, description="Card expiry month")
    exp_year: Optional[int] = Field(None, description="Card expiry year")
    subscriptions: list[Subscription] = Field(default_factory=list)

    @property
    def has_payment_provider(self) -> bool:
        """Whether the customer already has a stored payment provider."""
        return self.payment_provider != PaymentProvider.NONE

    @property
    def has_subscriptions(self) -> bool:
        return len(self.subscriptions) > 0


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by delete/cancel/reactivate."""

    message: str


class UpdateCustomerRequest(BaseModel):
    """Payload for updating a customer's payment token."""

    pmt_token: str = Field(..., min_length=1)


class CreateSubscriptionRequest(BaseModel):
    """Payload for creating a subscription."""

    pmt_token: str = Field(..., min_length=1)
    plan_id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    origin_system: str = Field(..., min_length=1)


class MetricsContext(BaseModel):
    """
    Flow-tracking fields supplied by the caller for a single call.

    Unknown keys are kept so they pass through to the emitted event.
    """

    model_config = ConfigDict(extra="allow")

    flow_id: Optional[str] = None
    flow_begin_time: Optional[int] = None
    device_id: Optional[str] = None

    def to_event_fields(self) -> dict[str, Any]:
        """Fields to merge into a flow event."""
        return self.model_dump(exclude_none=True)
