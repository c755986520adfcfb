"""
Billing module exceptions.

These are the stable, caller-facing domain errors produced by the billing
gateway. They do not depend on the backend's wire format; the underlying
backend error is kept as ``__cause__`` where one exists.
"""

from typing import Optional

from shared.exceptions import SubgateError


class BillingError(SubgateError):
    """Base exception for billing-related errors."""

    pass


class UnknownCustomerError(BillingError):
    """Raised when the billing backend has no customer for an account."""

    def __init__(self, uid: str):
        super().__init__(
            f"Unknown customer: {uid}",
            code="UNKNOWN_CUSTOMER",
            details={"uid": uid},
        )
        self.uid = uid


class UnknownSubscriptionError(BillingError):
    """Raised when a subscription ID is not known for the customer."""

    def __init__(self, subscription_id: str):
        super().__init__(
            f"Unknown subscription: {subscription_id}",
            code="UNKNOWN_SUBSCRIPTION",
            details={"subscription_id": subscription_id},
        )
        self.subscription_id = subscription_id


class UnknownSubscriptionPlanError(BillingError):
    """Raised when subscribing to a plan the backend does not offer."""

    def __init__(self, plan_id: str):
        super().__init__(
            f"Unknown subscription plan: {plan_id}",
            code="UNKNOWN_SUBSCRIPTION_PLAN",
            details={"plan_id": plan_id},
        )
        self.plan_id = plan_id


class RejectedPaymentTokenError(BillingError):
    """
    Raised when the backend rejects the payment token on subscription create.

    The backend's message is kept so the UI can show processor guidance.
    """

    def __init__(self, reason: str, uid: Optional[str] = None):
        super().__init__(
            f"Payment token rejected: {reason}",
            code="REJECTED_PAYMENT_TOKEN",
            details={"reason": reason},
        )
        if uid:
            self.details["uid"] = uid
        self.reason = reason


class RejectedCustomerUpdateError(BillingError):
    """Raised when the backend rejects a customer payment update."""

    def __init__(self, reason: str, uid: Optional[str] = None):
        super().__init__(
            f"Customer update rejected: {reason}",
            code="REJECTED_CUSTOMER_UPDATE",
            details={"reason": reason},
        )
        if uid:
            self.details["uid"] = uid
        self.reason = reason


class FeatureNotEnabledError(BillingError):
    """Raised by every billing operation while billing is switched off."""

    def __init__(self):
        super().__init__(
            "Billing is not enabled",
            code="FEATURE_NOT_ENABLED",
        )
