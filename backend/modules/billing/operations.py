"""
Billing backend operation table.

Describes every call the gateway makes to the billing backend (method, path
template, parameters, request and response shapes) and how each operation's
error status codes translate into domain outcomes. Both tables are plain data
so they can be inspected and tested directly.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from .models import (
    CreateSubscriptionRequest,
    Customer,
    MessageResponse,
    Plan,
    SubscriptionList,
    UpdateCustomerRequest,
)


@dataclass(frozen=True)
class BackendOperation:
    """
    A single backend endpoint.

    Attributes:
        method: HTTP method
        path: Path template; ``:name`` segments are filled from params
        params: Names of the required path parameters
        payload: Request body model, or None for body-less calls
        response: Type the 2xx response body must validate against
        metric_name: Suffix of the ``billing.performance.*`` flow event
    """

    method: str
    path: str
    response: Any
    params: tuple[str, ...] = ()
    payload: Optional[type[BaseModel]] = None
    metric_name: str = ""


LIST_PLANS = "list_plans"
LIST_SUBSCRIPTIONS = "list_subscriptions"
GET_CUSTOMER = "get_customer"
UPDATE_CUSTOMER = "update_customer"
DELETE_CUSTOMER = "delete_customer"
CREATE_SUBSCRIPTION = "create_subscription"
CANCEL_SUBSCRIPTION = "cancel_subscription"
REACTIVATE_SUBSCRIPTION = "reactivate_subscription"


BILLING_OPERATIONS: dict[str, BackendOperation] = {
    LIST_PLANS: BackendOperation(
        metric_name="listPlans",
        method="GET",
        path="/v1/plans",
        response=list[Plan],
    ),
    LIST_SUBSCRIPTIONS: BackendOperation(
        metric_name="listSubscriptions",
        method="GET",
        path="/v1/customer/:uid/subscriptions",
        params=("uid",),
        response=SubscriptionList,
    ),
    GET_CUSTOMER: BackendOperation(
        metric_name="getCustomer",
        method="GET",
        path="/v1/customer/:uid",
        params=("uid",),
        response=Customer,
    ),
    UPDATE_CUSTOMER: BackendOperation(
        metric_name="updateCustomer",
        method="POST",
        path="/v1/customer/:uid",
        params=("uid",),
        payload=UpdateCustomerRequest,
        response=Customer,
    ),
    DELETE_CUSTOMER: BackendOperation(
        metric_name="deleteCustomer",
        method="DELETE",
        path="/v1/customer/:uid",
        params=("uid",),
        response=MessageResponse,
    ),
    CREATE_SUBSCRIPTION: BackendOperation(
        metric_name="createSubscription",
        method="POST",
        path="/v1/customer/:uid/subscriptions",
        params=("uid",),
        payload=CreateSubscriptionRequest,
        response=SubscriptionList,
    ),
    CANCEL_SUBSCRIPTION: BackendOperation(
        metric_name="cancelSubscription",
        method="DELETE",
        path="/v1/customer/:uid/subscriptions/:sub_id",
        params=("uid", "sub_id"),
        response=MessageResponse,
    ),
    REACTIVATE_SUBSCRIPTION: BackendOperation(
        metric_name="reactivateSubscription",
        method="POST",
        path="/v1/customer/:uid/subscriptions/:sub_id",
        params=("uid", "sub_id"),
        response=MessageResponse,
    ),
}


class ErrorOutcome(str, Enum):
    """What a backend error status turns into for a given operation."""

    UNKNOWN_CUSTOMER = "unknown_customer"
    UNKNOWN_SUBSCRIPTION_PLAN = "unknown_subscription_plan"
    REJECTED_PAYMENT_TOKEN = "rejected_payment_token"
    REJECTED_CUSTOMER_UPDATE = "rejected_customer_update"
    # Resolved from the backend's message text (see below)
    UNKNOWN_CUSTOMER_OR_SUBSCRIPTION = "unknown_customer_or_subscription"
    # Non-error results
    EMPTY_SUBSCRIPTIONS = "empty_subscriptions"
    ALREADY_ABSENT = "already_absent"


# Status codes not listed for an operation pass the backend error through.
ERROR_TRANSLATIONS: dict[str, dict[int, ErrorOutcome]] = {
    LIST_PLANS: {},
    LIST_SUBSCRIPTIONS: {
        403: ErrorOutcome.EMPTY_SUBSCRIPTIONS,
        404: ErrorOutcome.UNKNOWN_CUSTOMER,
    },
    GET_CUSTOMER: {
        404: ErrorOutcome.UNKNOWN_CUSTOMER,
    },
    UPDATE_CUSTOMER: {
        400: ErrorOutcome.REJECTED_CUSTOMER_UPDATE,
        402: ErrorOutcome.REJECTED_CUSTOMER_UPDATE,
        404: ErrorOutcome.UNKNOWN_CUSTOMER,
    },
    DELETE_CUSTOMER: {
        404: ErrorOutcome.ALREADY_ABSENT,
    },
    CREATE_SUBSCRIPTION: {
        400: ErrorOutcome.REJECTED_PAYMENT_TOKEN,
        402: ErrorOutcome.REJECTED_PAYMENT_TOKEN,
        404: ErrorOutcome.UNKNOWN_SUBSCRIPTION_PLAN,
    },
    CANCEL_SUBSCRIPTION: {
        404: ErrorOutcome.UNKNOWN_CUSTOMER_OR_SUBSCRIPTION,
    },
    REACTIVATE_SUBSCRIPTION: {
        404: ErrorOutcome.UNKNOWN_CUSTOMER_OR_SUBSCRIPTION,
    },
}


# The backend only tells an unknown customer from an unknown subscription by
# message text. Provisional contract; renegotiate with the backend owners.
INVALID_UID_MESSAGE = "invalid uid"
INVALID_SUBSCRIPTION_ID_MESSAGE = "invalid subscription id"

# Result returned by delete_customer when the customer is already gone
ALREADY_ABSENT_MESSAGE = "unknown customer"

PLANS_CACHE_KEY = "listPlans"
