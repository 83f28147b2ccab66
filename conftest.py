"""
Shared pytest fixtures for the pool gateway test suites.
"""

import os
from typing import Any, List

import httpx
import pytest
from fastapi import Request

from shared.config import PoolConfig
from service_poolgateway.app.handlers.contract import PoolHandlers

GATED_PATHS = [
    "/voters/rewards",
    "/voters/blocked",
    "/voters",
    "/delegate",
    "/delegate/config",
    "/delegate/paymentruns",
    "/delegate/paymentruns/details",
    "/delegate/nodestatus",
    "/social",
    "/social/info",
    "/proxy/senddark",
]


class RecordingPoolHandlers(PoolHandlers):
    """Handlers that only record which endpoint was reached."""

    def __init__(self):
        self.calls: List[str] = []

    def _record(self, name: str) -> Any:
        self.calls.append(name)
        return {"handler": name}

    async def pending_rewards(self, request: Request) -> Any:
        return self._record("pending_rewards")

    async def blocked_voters(self, request: Request) -> Any:
        return self._record("blocked_voters")

    async def voters(self, request: Request) -> Any:
        return self._record("voters")

    async def delegate(self, request: Request) -> Any:
        return self._record("delegate")

    async def sharing_config(self, request: Request) -> Any:
        return self._record("sharing_config")

    async def payment_runs(self, request: Request) -> Any:
        return self._record("payment_runs")

    async def payment_run_details(self, request: Request) -> Any:
        return self._record("payment_run_details")

    async def node_status(self, request: Request) -> Any:
        return self._record("node_status")

    async def news(self, request: Request) -> Any:
        return self._record("news")

    async def social_info(self, request: Request) -> Any:
        return self._record("social_info")

    async def send_dark(self, request: Request) -> Any:
        return self._record("send_dark")


@pytest.fixture(autouse=True)
def clean_pool_env(monkeypatch):
    """Keep host POOL_* variables out of every configuration snapshot."""
    for name in list(os.environ):
        if name.upper().startswith("POOL_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def pool_config():
    return PoolConfig(
        delegate={"address": "AMAIN", "pubkey": "pubmain", "d_address": "DDEV", "d_pubkey": "pubdev"},
        voters={"share_ratio": 0.9, "blocklist": "DBAD1,DBAD2"},
        web={"email": "pool@example.org", "ark_news_address": "DNEWS"},
    )


@pytest.fixture
def recording_handlers():
    return RecordingPoolHandlers()


@pytest.fixture
def asgi_client():
    """Build an httpx client for an ASGI app with a chosen peer address."""

    def make(app, host: str = "127.0.0.1") -> httpx.AsyncClient:
        transport = httpx.ASGITransport(app=app, client=(host, 50123))
        return httpx.AsyncClient(transport=transport, base_url="http://gateway")

    return make
