"""
Pool gateway service for the delegate reward-sharing pool.
"""

import sys
from typing import Any, Dict, Optional

from shared.base_service import BaseService
from shared.config import PoolConfig, resolve_config
from shared.errors import BindError, ConfigLoadError
from shared.logging import get_logger

from . import __version__
from .adapters.node_client import NodeClient
from .domain.cors_policy import install_cors_policy
from .domain.service_mode import ServiceModeCell
from .handlers.contract import PoolHandlers
from .handlers.default import DefaultPoolHandlers
from .routing import RouteComposer

SERVICE_NAME = "poolgateway"


class GatewayService(BaseService):
    """Pool gateway service implementation."""

    def __init__(self, config: PoolConfig, handlers: Optional[PoolHandlers] = None,
                 service_mode: Optional[ServiceModeCell] = None):
        self.service_mode = service_mode or ServiceModeCell()
        super().__init__(SERVICE_NAME, config, version=__version__)

        self.node_client = NodeClient.from_config(config)
        self.handlers = handlers or DefaultPoolHandlers(config, self.node_client)

        self.route_composer = RouteComposer(self.handlers, self.service_mode, self.metrics)
        self.route_groups = self.route_composer.compose(self.app)

        # Added last so it wraps every other middleware.
        install_cors_policy(self.app)

        self.metrics.record_service_mode(suspended=not self.service_mode.is_active(), changed=False)

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    def _health_details(self) -> Dict[str, Any]:
        return {
            **self.service_mode.snapshot(),
            "network": self.config.client.network,
            "node": self.node_client.base_url,
            "node_circuit": self.node_client.circuit_breaker.get_state()["state"],
        }


def create_app(config: Optional[PoolConfig] = None, handlers: Optional[PoolHandlers] = None):
    """Create FastAPI application."""
    service = GatewayService(config or resolve_config(), handlers=handlers)
    return service.app


def main() -> None:
    """Process entry point: resolve config, build the gateway, serve."""
    logger = get_logger(f"{SERVICE_NAME}.main")
    logger.info("Pool gateway starting", version=__version__)

    try:
        config = resolve_config()
    except ConfigLoadError as e:
        logger.critical("No configuration file loaded", error=str(e), searched=e.searched)
        sys.exit(1)

    service = GatewayService(config)
    try:
        service.run()
    except BindError as e:
        logger.critical("Cannot start listener", host=e.host, port=e.port, error=e.reason)
        sys.exit(1)


if __name__ == "__main__":
    main()
