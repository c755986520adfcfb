"""
Billing gateway implementation.

Proxies subscription operations to the external billing backend. Each call
is measured by MetricsRecorder, plan listings are read through
ResponseCache, and backend status codes are translated into domain errors
according to ERROR_TRANSLATIONS. This is the only place status codes are
interpreted.
"""

import asyncio
import logging
from typing import Any, Optional

from pydantic import TypeAdapter

from shared.exceptions import BackendError

from .cache import ResponseCache
from .client import BackendServiceClient
from .exceptions import (
    BillingError,
    FeatureNotEnabledError,
    RejectedCustomerUpdateError,
    RejectedPaymentTokenError,
    UnknownCustomerError,
    UnknownSubscriptionError,
    UnknownSubscriptionPlanError,
)
from .interfaces import IBillingGateway
from .metrics import MetricsRecorder
from .models import (
    Customer,
    MessageResponse,
    MetricsContext,
    Plan,
    SubscriptionList,
)
from .operations import (
    ALREADY_ABSENT_MESSAGE,
    BILLING_OPERATIONS,
    CANCEL_SUBSCRIPTION,
    CREATE_SUBSCRIPTION,
    DELETE_CUSTOMER,
    ERROR_TRANSLATIONS,
    GET_CUSTOMER,
    INVALID_SUBSCRIPTION_ID_MESSAGE,
    INVALID_UID_MESSAGE,
    LIST_PLANS,
    LIST_SUBSCRIPTIONS,
    PLANS_CACHE_KEY,
    REACTIVATE_SUBSCRIPTION,
    UPDATE_CUSTOMER,
    ErrorOutcome,
)

logger = logging.getLogger(__name__)

_PLANS_ADAPTER = TypeAdapter(list[Plan])


def translate_error(
    operation: str,
    error: BackendError,
    uid: Optional[str] = None,
    sub_id: Optional[str] = None,
    plan_id: Optional[str] = None,
) -> Any:
    """
    Map a backend error to a domain outcome for an operation.

    Returns:
        A BillingError to raise, a non-error result to return instead, or
        None when the backend error should pass through unchanged
    """
    outcome = ERROR_TRANSLATIONS.get(operation, {}).get(error.status_code)
    if outcome is None:
        return None

    if outcome == ErrorOutcome.EMPTY_SUBSCRIPTIONS:
        return SubscriptionList(subscriptions=[])
    if outcome == ErrorOutcome.ALREADY_ABSENT:
        return MessageResponse(message=ALREADY_ABSENT_MESSAGE)
    if outcome == ErrorOutcome.UNKNOWN_CUSTOMER:
        return UnknownCustomerError(uid or "")
    if outcome == ErrorOutcome.UNKNOWN_SUBSCRIPTION_PLAN:
        return UnknownSubscriptionPlanError(plan_id or "")
    if outcome == ErrorOutcome.REJECTED_PAYMENT_TOKEN:
        return RejectedPaymentTokenError(error.message, uid=uid)
    if outcome == ErrorOutcome.REJECTED_CUSTOMER_UPDATE:
        return RejectedCustomerUpdateError(error.message, uid=uid)
    if outcome == ErrorOutcome.UNKNOWN_CUSTOMER_OR_SUBSCRIPTION:
        if error.message == INVALID_UID_MESSAGE:
            return UnknownCustomerError(uid or "")
        if error.message == INVALID_SUBSCRIPTION_ID_MESSAGE:
            return UnknownSubscriptionError(sub_id or "")
    return None


class BillingGateway(IBillingGateway):
    """
    Live billing gateway backed by the billing backend.

    Collaborators are injected so one HTTP client and one cache connection
    can be shared for the life of the process.
    """

    def __init__(
        self,
        client: BackendServiceClient,
        cache: Optional[ResponseCache] = None,
        metrics: Optional[MetricsRecorder] = None,
        origin_system: str = "accounts",
    ):
        """
        Initialize the gateway.

        Args:
            client: Backend client configured with BILLING_OPERATIONS
            cache: Plan list cache; a disabled cache is used if omitted
            metrics: Performance recorder; a logging recorder is used if omitted
            origin_system: Value sent as ``origin_system`` on subscription create
        """
        self._client = client
        self._cache = cache or ResponseCache()
        self._metrics = metrics or MetricsRecorder()
        self._origin_system = origin_system
        self._closed = False
        self._cache_writes: set[asyncio.Task] = set()

    async def _call(
        self,
        operation: str,
        metrics_context: Optional[MetricsContext],
        params: Optional[dict[str, str]] = None,
        payload: Any = None,
        plan_id: Optional[str] = None,
    ) -> Any:
        params = params or {}
        uid = params.get("uid")
        sub_id = params.get("sub_id")
        try:
            return await self._metrics.wrap(
                BILLING_OPERATIONS[operation].metric_name,
                metrics_context,
                lambda: self._client.call(operation, params, payload),
            )
        except BackendError as err:
            result = translate_error(operation, err, uid=uid, sub_id=sub_id, plan_id=plan_id)
            ids = f"uid={uid} sub_id={sub_id} plan_id={plan_id}"
            if result is None:
                logger.error(
                    f"billing.{operation} failed with status {err.status_code} "
                    f"({ids}): {err.message}"
                )
                raise
            if isinstance(result, BillingError):
                logger.error(
                    f"billing.{operation} failed with status {err.status_code} "
                    f"({ids}): {result.code}: {err.message}"
                )
                raise result from err
            logger.info(
                f"billing.{operation} got status {err.status_code} ({ids}), "
                f"returning {result!r}"
            )
            return result

    async def list_plans(
        self,
        metrics_context: Optional[MetricsContext] = None,
    ) -> list[Plan]:
        cached = await self._cache.get(PLANS_CACHE_KEY)
        if cached:
            try:
                return _PLANS_ADAPTER.validate_json(cached)
            except ValueError as e:
                logger.error(f"Ignoring unreadable cached plan list: {e}")

        plans = await self._call(LIST_PLANS, metrics_context)

        self._schedule_cache_write(PLANS_CACHE_KEY, _PLANS_ADAPTER.dump_json(plans).decode())
        return plans

    async def list_subscriptions(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        return await self._call(LIST_SUBSCRIPTIONS, metrics_context, {"uid": uid})

    async def get_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        return await self._call(GET_CUSTOMER, metrics_context, {"uid": uid})

    async def update_customer(
        self,
        uid: str,
        pmt_token: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        return await self._call(
            UPDATE_CUSTOMER,
            metrics_context,
            {"uid": uid},
            payload={"pmt_token": pmt_token},
        )

    async def delete_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        return await self._call(DELETE_CUSTOMER, metrics_context, {"uid": uid})

    async def create_subscription(
        self,
        uid: str,
        pmt_token: str,
        plan_id: str,
        display_name: str,
        email: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        payload = {
            "pmt_token": pmt_token,
            "plan_id": plan_id,
            "display_name": display_name,
            "email": email,
            "origin_system": self._origin_system,
        }
        return await self._call(
            CREATE_SUBSCRIPTION,
            metrics_context,
            {"uid": uid},
            payload=payload,
            plan_id=plan_id,
        )

    async def cancel_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        return await self._call(
            CANCEL_SUBSCRIPTION,
            metrics_context,
            {"uid": uid, "sub_id": sub_id},
        )

    async def reactivate_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        return await self._call(
            REACTIVATE_SUBSCRIPTION,
            metrics_context,
            {"uid": uid, "sub_id": sub_id},
        )

    def _schedule_cache_write(self, key: str, value: str) -> None:
        if not self._cache.enabled:
            return
        # Drained by flush_cache_writes() and close()
        task = asyncio.create_task(self._cache.set(key, value))
        self._cache_writes.add(task)
        task.add_done_callback(self._cache_writes.discard)

    async def flush_cache_writes(self) -> None:
        """Wait for scheduled cache writes to finish."""
        if self._cache_writes:
            await asyncio.gather(*self._cache_writes, return_exceptions=True)

    async def close(self) -> None:
        """Drain pending cache writes, then release the HTTP client and cache."""
        if self._closed:
            return
        self._closed = True
        await self.flush_cache_writes()
        results = await asyncio.gather(
            self._client.close(),
            self._cache.close(),
            return_exceptions=True,
        )
        for name, result in zip(("http client", "cache"), results):
            if isinstance(result, Exception):
                logger.error(f"Failed to close billing {name}: {result}")


class DisabledBillingGateway(IBillingGateway):
    """Gateway used while billing is switched off; every call is refused."""

    async def list_plans(
        self,
        metrics_context: Optional[MetricsContext] = None,
    ) -> list[Plan]:
        raise FeatureNotEnabledError()

    async def list_subscriptions(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        raise FeatureNotEnabledError()

    async def get_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        raise FeatureNotEnabledError()

    async def update_customer(
        self,
        uid: str,
        pmt_token: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> Customer:
        raise FeatureNotEnabledError()

    async def delete_customer(
        self,
        uid: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        raise FeatureNotEnabledError()

    async def create_subscription(
        self,
        uid: str,
        pmt_token: str,
        plan_id: str,
        display_name: str,
        email: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> SubscriptionList:
        raise FeatureNotEnabledError()

    async def cancel_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        raise FeatureNotEnabledError()

    async def reactivate_subscription(
        self,
        uid: str,
        sub_id: str,
        metrics_context: Optional[MetricsContext] = None,
    ) -> MessageResponse:
        raise FeatureNotEnabledError()

    async def close(self) -> None:
        pass
