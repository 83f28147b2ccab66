"""
Route composition for the pool gateway.

Endpoints are grouped by functional area. Each group is an ``APIRouter``
whose guard is attached once at the router level, so every endpoint added
to a group inherits that group's access policy.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .domain.access_policy import LoopbackOnlyGuard, ServiceAvailabilityGuard
from .domain.service_mode import ServiceMode, ServiceModeCell
from .handlers.contract import PoolHandlers

logger = get_logger("poolgateway.routing")


@dataclass(frozen=True)
class RouteGroup:
    """A prefix, its guard and the router carrying its endpoints."""

    name: str
    prefix: str
    guard: Callable[..., Any]
    router: APIRouter

    @property
    def paths(self) -> List[str]:
        return [route.path for route in self.router.routes]


class RouteComposer:
    """Builds the five route groups and includes them into an app."""

    def __init__(self, handlers: PoolHandlers, service_mode: ServiceModeCell,
                 metrics: Optional[MetricsCollector] = None):
        self.handlers = handlers
        self.service_mode = service_mode
        self.metrics = metrics
        self.availability_guard = ServiceAvailabilityGuard(service_mode, metrics)
        self.loopback_guard = LoopbackOnlyGuard(metrics)

    def _group(self, name: str, guard: Callable[..., Any], endpoints: Dict[str, Callable[..., Any]]) -> RouteGroup:
        prefix = f"/{name}"
        router = APIRouter(prefix=prefix, tags=[name], dependencies=[Depends(guard)])
        for path, endpoint in endpoints.items():
            router.add_api_route(path, endpoint, methods=["GET"], name=f"{name}.{endpoint.__name__}")
        return RouteGroup(name=name, prefix=prefix, guard=guard, router=router)

    def build_groups(self) -> List[RouteGroup]:
        h = self.handlers
        return [
            self._group("voters", self.availability_guard, {
                "/rewards": h.pending_rewards,
                "/blocked": h.blocked_voters,
                "": h.voters,
            }),
            self._group("delegate", self.availability_guard, {
                "": h.delegate,
                "/config": h.sharing_config,
                "/paymentruns": h.payment_runs,
                "/paymentruns/details": h.payment_run_details,
                "/nodestatus": h.node_status,
            }),
            self._group("service", self.loopback_guard, {
                "/start": self.start_service,
                "/stop": self.stop_service,
            }),
            self._group("social", self.availability_guard, {
                "": h.news,
                "/info": h.social_info,
            }),
            self._group("proxy", self.availability_guard, {
                "/senddark": h.send_dark,
            }),
        ]

    def compose(self, app: FastAPI) -> List[RouteGroup]:
        """Include every group into ``app`` and return them."""
        logger.info("Initializing routes")
        groups = self.build_groups()
        for group in groups:
            app.include_router(group.router)
            logger.debug("Route group registered", group=group.name, paths=group.paths)
        return groups

    async def start_service(self):
        """Leave service mode: resume public traffic."""
        changed = self.service_mode.resume()
        return self._mode_response(changed)

    async def stop_service(self):
        """Enter service mode: suspend public traffic."""
        changed = self.service_mode.suspend()
        return self._mode_response(changed)

    def _mode_response(self, changed: bool) -> Dict[str, Any]:
        mode = self.service_mode.mode
        if self.metrics:
            self.metrics.record_service_mode(suspended=mode is ServiceMode.SUSPENDED, changed=changed)
        if changed:
            logger.info("Service mode changed", service_mode=mode.value)
        return {"success": True, "service_mode": mode.value, "changed": changed}
