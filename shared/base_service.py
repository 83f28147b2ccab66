"""
Base service class for delegate pool gateway services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST
from contextlib import asynccontextmanager
from typing import Dict, Any
import time

from shared.config import PoolConfig
from shared.logging import configure_logging, get_logger, set_request_id, set_client_host, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import GatewayException
from shared.server import serve


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, config: PoolConfig, version: str = "0.0.0"):
        self.service_name = service_name
        self.config = config
        self.version = version
        self._start_time = time.time()

        configure_logging(service_name, config.server.log_level)
        self.logger = get_logger(f"{service_name}.service")
        self.metrics = get_metrics_collector(service_name, version)

        self.app = self._create_app()
        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self.logger.info("Service starting", service=self.service_name, version=self.version)
            yield
            await self._on_shutdown()
            self.logger.info("Service stopped", service=self.service_name)

        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description="Delegate reward-sharing pool gateway",
            version=self.version,
            lifespan=lifespan,
        )

    def _setup_middleware(self):
        """Set up request context, timing and access logging."""

        @self.app.middleware("http")
        async def request_context(request: Request, call_next):
            request_id = set_request_id(request.headers.get("X-Request-ID"))
            set_client_host(request.client.host if request.client else None)
            start_time = time.time()

            try:
                response = await call_next(request)

                duration = time.time() - start_time
                self.metrics.record_http_request(
                    method=request.method,
                    endpoint=_endpoint_label(request),
                    status_code=response.status_code,
                    duration=duration
                )
                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(duration * 1000, 2)
                )

                response.headers["X-Request-ID"] = request_id
                return response
            finally:
                clear_context()

    def _setup_routes(self):
        """Set up common routes and error handlers."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            return {
                "service": self.service_name,
                "status": "ok",
                "version": self.version,
                "uptime_seconds": round(self._get_uptime(), 3),
                **self._health_details(),
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=self.metrics.export(),
                media_type=CONTENT_TYPE_LATEST
            )

        @self.app.exception_handler(GatewayException)
        async def gateway_exception_handler(request: Request, exc: GatewayException):
            """Render request-scoped failures as ErrorResponse bodies."""
            self.logger.warning(
                "Request failed",
                path=request.url.path,
                code=exc.code,
                message=exc.message,
                status_code=exc.status_code
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": {}
                }
            )

    def _health_details(self) -> Dict[str, Any]:
        """Extra health fields. Override in subclasses."""
        return {}

    async def _on_shutdown(self) -> None:
        """Release resources on application shutdown. Override in subclasses."""

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Bind the configured address and serve until stopped."""
        serve(
            self.app,
            host=self.config.server.address,
            port=self.config.server.port,
            log_level=self.config.server.log_level
        )


def _endpoint_label(request: Request) -> str:
    """Matched route template, so unknown paths share one label."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"
