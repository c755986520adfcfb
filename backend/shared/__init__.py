"""
Shared infrastructure for Subgate backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- exceptions: Base exception classes
- logging_config: Root logging setup

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .exceptions import (
    SubgateError,
    ValidationError,
    ExternalServiceError,
    TransportError,
    BackendError,
    InvalidResponseError,
)
from .logging_config import configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "SubgateError",
    "ValidationError",
    "ExternalServiceError",
    "TransportError",
    "BackendError",
    "InvalidResponseError",
    "configure_logging",
]
