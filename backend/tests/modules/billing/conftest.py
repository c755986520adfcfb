"""
Pytest fixtures for billing module tests.

The billing backend is replaced with an httpx.MockTransport that records
requests and replies with programmed responses.
"""

import copy
from typing import Any, Optional

import httpx
import pytest

from modules.billing.cache import ResponseCache
from modules.billing.client import BackendServiceClient
from modules.billing.metrics import MetricsRecorder
from modules.billing.operations import BILLING_OPERATIONS
from modules.billing.service import BillingGateway

BACKEND_URL = "https://billing.test"
BACKEND_KEY = "test-backend-key"


PLAN_DATA = [
    {
        "plan_id": "plan_monthly",
        "plan_name": "Monthly",
        "product_id": "prod_vpn",
        "product_name": "VPN",
        "interval": "month",
        "interval_count": 1,
        "amount": 499,
        "currency": "usd",
    },
    {
        "plan_id": "plan_yearly",
        "product_id": "prod_vpn",
        "interval": "year",
        "amount": 4999,
        "currency": "usd",
    },
]

SUBSCRIPTION_DATA = {
    "subscription_id": "sub_123",
    "plan_id": "plan_monthly",
    "plan_name": "Monthly",
    "status": "active",
    "current_period_start": 1_700_000_000,
    "current_period_end": 1_702_592_000,
    "cancel_at_period_end": False,
}

CUSTOMER_DATA = {
    "uid": "u1",
    "payment_provider": "card",
    "last4": "4242",
    "brand": "Visa",
    "exp_month": 12,
    "exp_year": 2030,
    "subscriptions": [SUBSCRIPTION_DATA],
}


class RecordingBackend:
    """Programmable fake billing backend."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: dict[tuple[str, str], Any] = {}

    def respond(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
    ) -> None:
        self._responses[(method, path)] = httpx.Response(status, json=json)

    def fail(self, method: str, path: str, exc: type[httpx.TransportError]) -> None:
        self._responses[(method, path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(500, json={"message": "no response programmed"})
        if isinstance(response, type):
            raise response("simulated failure", request=request)
        return response

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def backend() -> RecordingBackend:
    """Provide a fake billing backend."""
    return RecordingBackend()


@pytest.fixture
def http_client(backend: RecordingBackend) -> httpx.AsyncClient:
    """HTTP client routed to the fake backend."""
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def backend_client(http_client: httpx.AsyncClient) -> BackendServiceClient:
    """Backend client configured with the billing operation table."""
    return BackendServiceClient(
        BACKEND_URL,
        BILLING_OPERATIONS,
        BACKEND_KEY,
        http_client=http_client,
    )


class RecordingEmitter:
    """Collects flow events."""

    def __init__(self):
        self.events: list[dict] = []

    def flow_event(self, data: dict) -> None:
        self.events.append(data)


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def make_gateway(backend_client, emitter, clock):
    """Build a gateway over the fake backend, optionally with a cache store."""

    def _make(
        store: Optional[Any] = None,
        ttl_seconds: int = 0,
        cache_timeout: Optional[float] = None,
    ) -> BillingGateway:
        return BillingGateway(
            backend_client,
            cache=ResponseCache(store, ttl_seconds=ttl_seconds, timeout=cache_timeout),
            metrics=MetricsRecorder(emitter, clock=clock),
        )

    return _make


@pytest.fixture
def gateway(make_gateway) -> BillingGateway:
    """Gateway without caching."""
    return make_gateway()


@pytest.fixture
def plan_data() -> list[dict]:
    """Plan list as returned by the backend."""
    return copy.deepcopy(PLAN_DATA)


@pytest.fixture
def subscription_data() -> dict:
    return copy.deepcopy(SUBSCRIPTION_DATA)


@pytest.fixture
def customer_data() -> dict:
    return copy.deepcopy(CUSTOMER_DATA)
