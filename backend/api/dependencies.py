"""
Dependency injection helpers for FastAPI.

The billing gateway is built once by the application lifespan and stored on
``app.state``; handlers receive it through ``Depends(get_billing_gateway)``.
"""

from fastapi import Request

from modules.billing.interfaces import IBillingGateway
from shared.config import Settings


def get_settings_from_app(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_billing_gateway(request: Request) -> IBillingGateway:
    """Get the shared billing gateway."""
    return request.app.state.billing_gateway
