"""
Unit tests for the access guards.
"""

import pytest
from unittest.mock import MagicMock
from fastapi import Request

from service_poolgateway.app.domain.access_policy import (
    AccessDecision,
    DenyReason,
    LoopbackOnlyGuard,
    ServiceAvailabilityGuard,
    is_loopback_host,
)
from service_poolgateway.app.domain.service_mode import ServiceModeCell
from shared.errors import NotLocalOriginError, ServiceSuspendedError
from shared.metrics import get_metrics_collector


def make_request(host="127.0.0.1", path="/voters"):
    request = MagicMock(spec=Request)
    if host is None:
        request.client = None
    else:
        request.client = MagicMock()
        request.client.host = host
    request.url.path = path
    request.headers = {}
    return request


class TestIsLoopbackHost:
    """Test cases for loopback detection."""

    @pytest.mark.parametrize("host", ["127.0.0.1", "127.8.9.10", "::1", "[::1]", "::ffff:127.0.0.1", "localhost"])
    def test_loopback(self, host):
        assert is_loopback_host(host) is True

    @pytest.mark.parametrize("host", ["10.0.0.1", "192.168.1.20", "::ffff:10.0.0.1", "2001:db8::1",
                                      "testclient", "", None])
    def test_not_loopback(self, host):
        assert is_loopback_host(host) is False


class TestServiceAvailabilityGuard:
    """Test cases for ServiceAvailabilityGuard."""

    @pytest.fixture
    def service_mode(self):
        return ServiceModeCell()

    @pytest.fixture
    def metrics(self):
        return get_metrics_collector("test")

    @pytest.fixture
    def guard(self, service_mode, metrics):
        return ServiceAvailabilityGuard(service_mode, metrics)

    def test_allows_while_active(self, guard):
        assert guard.evaluate(make_request()) == AccessDecision.allow()

    def test_denies_while_suspended(self, guard, service_mode):
        service_mode.suspend()

        decision = guard.evaluate(make_request())

        assert decision.allowed is False
        assert decision.reason is DenyReason.SERVICE_SUSPENDED

    @pytest.mark.asyncio
    async def test_dependency_passes_while_active(self, guard):
        assert await guard(make_request()) is None

    @pytest.mark.asyncio
    async def test_dependency_raises_while_suspended(self, guard, service_mode, metrics):
        service_mode.suspend()

        with pytest.raises(ServiceSuspendedError) as exc_info:
            await guard(make_request(path="/delegate"))

        assert exc_info.value.status_code == 503
        assert exc_info.value.code == "SERVICE_SUSPENDED"
        assert metrics.sample_value("access_denials_total", {"reason": "ServiceSuspended"}) == 1.0

    def test_origin_is_irrelevant(self, guard):
        assert guard.evaluate(make_request(host="203.0.113.9")).allowed is True


class TestLoopbackOnlyGuard:
    """Test cases for LoopbackOnlyGuard."""

    @pytest.fixture
    def metrics(self):
        return get_metrics_collector("test")

    @pytest.fixture
    def guard(self, metrics):
        return LoopbackOnlyGuard(metrics)

    def test_allows_loopback(self, guard):
        assert guard.evaluate(make_request(host="127.0.0.1")).allowed is True
        assert guard.evaluate(make_request(host="::1")).allowed is True

    def test_denies_remote(self, guard):
        decision = guard.evaluate(make_request(host="198.51.100.7"))

        assert decision == AccessDecision.deny(DenyReason.NOT_LOCAL_ORIGIN)

    def test_denies_missing_client(self, guard):
        assert guard.evaluate(make_request(host=None)).allowed is False

    def test_ignores_forwarding_headers(self, guard):
        request = make_request(host="198.51.100.7")
        request.headers = {"X-Forwarded-For": "127.0.0.1", "X-Real-IP": "127.0.0.1"}

        assert guard.evaluate(request).allowed is False

    @pytest.mark.asyncio
    async def test_dependency_raises_for_remote(self, guard, metrics):
        with pytest.raises(NotLocalOriginError) as exc_info:
            await guard(make_request(host="198.51.100.7", path="/service/stop"))

        assert exc_info.value.status_code == 403
        assert metrics.sample_value("access_denials_total", {"reason": "NotLocalOrigin"}) == 1.0
