"""
Billing module.

Proxies subscription operations to the external billing backend, with plan
caching, latency telemetry and domain error translation.

Public API:
- IBillingGateway: Interface for billing operations
- build_billing_gateway: Builds the live, stub or disabled gateway from settings
- Plan, Customer, Subscription, ...: Backend payload models
- Billing exceptions: UnknownCustomerError, etc.
"""

from .interfaces import IBillingGateway
from .models import (
    PaymentProvider,
    Plan,
    Subscription,
    SubscriptionList,
    Customer,
    MessageResponse,
    MetricsContext,
)
from .exceptions import (
    BillingError,
    UnknownCustomerError,
    UnknownSubscriptionError,
    UnknownSubscriptionPlanError,
    RejectedPaymentTokenError,
    RejectedCustomerUpdateError,
    FeatureNotEnabledError,
)
from .factory import build_billing_gateway

__all__ = [
    # Interface
    "IBillingGateway",
    "build_billing_gateway",
    # Models
    "PaymentProvider",
    "Plan",
    "Subscription",
    "SubscriptionList",
    "Customer",
    "MessageResponse",
    "MetricsContext",
    # Exceptions
    "BillingError",
    "UnknownCustomerError",
    "UnknownSubscriptionError",
    "UnknownSubscriptionPlanError",
    "RejectedPaymentTokenError",
    "RejectedCustomerUpdateError",
    "FeatureNotEnabledError",
]
