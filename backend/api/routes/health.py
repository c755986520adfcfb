"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.billing.interfaces import IBillingGateway
from modules.billing.service import DisabledBillingGateway
from modules.billing.stub import StubBillingGateway
from shared.config import Settings
from ..dependencies import get_billing_gateway, get_settings_from_app

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    billing: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_settings_from_app),
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    gateway: IBillingGateway = Depends(get_billing_gateway),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports which billing gateway the process is running with.
    """
    if isinstance(gateway, DisabledBillingGateway):
        billing = "disabled"
    elif isinstance(gateway, StubBillingGateway):
        billing = "stub"
    else:
        billing = "enabled"
    return ReadinessResponse(status="ready", billing=billing)
