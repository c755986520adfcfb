"""Factory for building the billing gateway from settings."""

import logging
from typing import Any, Optional

import httpx
import redis.asyncio as redis

from shared.config import Settings

from .cache import ResponseCache
from .client import BackendServiceClient
from .interfaces import IBillingGateway
from .metrics import IFlowEventEmitter, MetricsRecorder
from .operations import BILLING_OPERATIONS
from .service import BillingGateway, DisabledBillingGateway
from .stub import StubBillingGateway

logger = logging.getLogger(__name__)


def build_billing_gateway(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
    cache_store: Any = None,
    emitter: Optional[IFlowEventEmitter] = None,
) -> IBillingGateway:
    """Build the gateway selected by settings.

    Call once at process start and share the result; the live gateway owns
    one HTTP client and one cache connection.

    Args:
        settings: Application settings
        http_client: Optional HTTP client to use instead of a new one
        cache_store: Optional async key/value store; a Redis client is
                     created from ``redis_url`` when caching is enabled
        emitter: Optional flow event sink for performance events

    Returns:
        DisabledBillingGateway, StubBillingGateway or BillingGateway
    """
    if not settings.billing_enabled:
        logger.info("Billing disabled; all billing operations will be refused")
        return DisabledBillingGateway()

    if settings.billing_use_stubs:
        logger.info("Using in-memory stub billing gateway")
        return StubBillingGateway()

    client = BackendServiceClient(
        settings.billing_backend_url,
        BILLING_OPERATIONS,
        settings.billing_backend_key,
        timeout=settings.billing_backend_timeout,
        http_client=http_client,
    )

    ttl = settings.plans_cache_ttl_seconds
    if ttl > 0 and cache_store is None:
        cache_store = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
        )
    cache = ResponseCache(
        cache_store if ttl > 0 else None,
        ttl_seconds=ttl,
        key_prefix=settings.redis_key_prefix,
        timeout=settings.redis_socket_timeout,
    )

    return BillingGateway(
        client,
        cache=cache,
        metrics=MetricsRecorder(emitter),
        origin_system=settings.billing_origin_system,
    )
