"""
Prometheus metrics for the delegate pool gateway.
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, Info, generate_latest
from typing import Dict, Any, Optional
import threading


class MetricsCollector:
    """Centralized metrics collector for a service.

    Each collector owns its registry so several services (or test
    instances) can live in one process without duplicate registration.
    """

    def __init__(self, service_name: str, version: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.version = version
        self.registry = registry or CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up metrics for the service."""

        self._metrics["service_info"] = Info(
            "service",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": self.version
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Access policy metrics
        self._metrics["access_denials_total"] = Counter(
            "access_denials_total",
            "Requests rejected by an access guard",
            ["reason"],
            registry=self.registry
        )

        self._metrics["service_mode_suspended"] = Gauge(
            "service_mode_suspended",
            "1 while the pool service is suspended, 0 while active",
            registry=self.registry
        )

        self._metrics["service_mode_transitions_total"] = Counter(
            "service_mode_transitions_total",
            "Service mode transitions that changed state",
            ["target"],
            registry=self.registry
        )

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type"],
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_access_denial(self, reason: str):
        self._metrics["access_denials_total"].labels(reason=reason).inc()

    def record_service_mode(self, suspended: bool, changed: bool):
        """Track the current service mode and count effective transitions."""
        with self._lock:
            self._metrics["service_mode_suspended"].set(1 if suspended else 0)
            if changed:
                target = "suspended" if suspended else "active"
                self._metrics["service_mode_transitions_total"].labels(target=target).inc()

    def record_error(self, error_type: str):
        self._metrics["errors_total"].labels(error_type=error_type).inc()

    def sample_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read a single sample back from the registry."""
        return self.registry.get_sample_value(name, labels or {})

    def export(self) -> bytes:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry)


def get_metrics_collector(service_name: str, version: str = "0.0.0",
                          registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, version, registry)
