"""
Access guards for gateway route groups.

Each guard exposes ``evaluate(request) -> AccessDecision`` and is itself an
async FastAPI dependency: attached to a router, it raises before the route
handler runs whenever the decision is a deny.
"""

import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Request

from shared.errors import NotLocalOriginError, ServiceSuspendedError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .service_mode import ServiceModeCell


class DenyReason(str, Enum):
    SERVICE_SUSPENDED = "ServiceSuspended"
    NOT_LOCAL_ORIGIN = "NotLocalOrigin"


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a guard check."""

    allowed: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "AccessDecision":
        return cls(allowed=False, reason=reason)


def is_loopback_host(host: Optional[str]) -> bool:
    """True when ``host`` names the loopback interface."""
    if not host:
        return False
    if host.lower() == "localhost":
        return True
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped
    return address.is_loopback


class ServiceAvailabilityGuard:
    """Rejects requests with 503 while the pool service is suspended."""

    def __init__(self, service_mode: ServiceModeCell, metrics: Optional[MetricsCollector] = None):
        self.service_mode = service_mode
        self.metrics = metrics
        self.logger = get_logger("poolgateway.access_policy")

    def evaluate(self, request: Request) -> AccessDecision:
        if self.service_mode.is_active():
            return AccessDecision.allow()
        return AccessDecision.deny(DenyReason.SERVICE_SUSPENDED)

    async def __call__(self, request: Request) -> None:
        decision = self.evaluate(request)
        if decision.allowed:
            return

        self.logger.warning("Request rejected, service suspended", path=request.url.path)
        if self.metrics:
            self.metrics.record_access_denial(decision.reason.value)
        raise ServiceSuspendedError(details={"service_mode": self.service_mode.mode.value})


class LoopbackOnlyGuard:
    """Rejects requests with 403 unless the socket peer is the local host.

    Only the transport peer address is consulted. Forwarding headers are
    caller-controlled and never grant local access.
    """

    def __init__(self, metrics: Optional[MetricsCollector] = None):
        self.metrics = metrics
        self.logger = get_logger("poolgateway.access_policy")

    def evaluate(self, request: Request) -> AccessDecision:
        host = request.client.host if request.client else None
        if is_loopback_host(host):
            return AccessDecision.allow()
        return AccessDecision.deny(DenyReason.NOT_LOCAL_ORIGIN)

    async def __call__(self, request: Request) -> None:
        decision = self.evaluate(request)
        if decision.allowed:
            return

        self.logger.warning(
            "Control request rejected, remote origin",
            path=request.url.path,
            client_host=request.client.host if request.client else None
        )
        if self.metrics:
            self.metrics.record_access_denial(decision.reason.value)
        raise NotLocalOriginError()
