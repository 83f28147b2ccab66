"""
Cross-cutting request policies for the pool gateway.
"""

from .service_mode import ServiceMode, ServiceModeCell
from .access_policy import (
    AccessDecision,
    DenyReason,
    LoopbackOnlyGuard,
    ServiceAvailabilityGuard,
    is_loopback_host,
)
from .cors_policy import CORS_HEADERS, CORSPolicyMiddleware, install_cors_policy

__all__ = [
    "ServiceMode",
    "ServiceModeCell",
    "AccessDecision",
    "DenyReason",
    "LoopbackOnlyGuard",
    "ServiceAvailabilityGuard",
    "is_loopback_host",
    "CORS_HEADERS",
    "CORSPolicyMiddleware",
    "install_cors_policy",
]
