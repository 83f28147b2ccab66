"""
Unit tests for the default pool handlers.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi import Request

from service_poolgateway.app.adapters.node_client import NodeClient
from service_poolgateway.app.handlers.default import DefaultPoolHandlers
from shared.config import PoolConfig
from shared.errors import BackendUnavailableError


class TestDefaultPoolHandlers:
    """Test cases for DefaultPoolHandlers."""

    @pytest.fixture
    def node_client(self):
        client = MagicMock(spec=NodeClient)
        client.get_delegate = AsyncMock(return_value={"success": True, "delegate": {}})
        client.get_voters = AsyncMock(return_value={"success": True, "accounts": []})
        client.get_sync_status = AsyncMock(return_value={"success": True, "syncing": False})
        client.get_transactions = AsyncMock(return_value={"success": True, "transactions": [{"id": "t1"}]})
        return client

    @pytest.fixture
    def handlers(self, pool_config, node_client):
        return DefaultPoolHandlers(pool_config, node_client)

    @pytest.fixture
    def request_obj(self):
        request = MagicMock(spec=Request)
        request.query_params = {"id": "7"}
        return request

    @pytest.mark.asyncio
    async def test_blocked_voters_from_config(self, handlers, request_obj):
        result = await handlers.blocked_voters(request_obj)
        assert result == {"success": True, "count": 2, "blocked": ["DBAD1", "DBAD2"]}

    @pytest.mark.asyncio
    async def test_voters_use_devnet_identity(self, handlers, node_client, request_obj):
        await handlers.voters(request_obj)
        node_client.get_voters.assert_awaited_once_with("pubdev")

    @pytest.mark.asyncio
    async def test_delegate_uses_mainnet_identity(self, node_client, request_obj):
        config = PoolConfig(delegate={"pubkey": "pubmain", "d_pubkey": "pubdev"}, client={"network": "MAINNET"})
        handlers = DefaultPoolHandlers(config, node_client)

        await handlers.delegate(request_obj)

        node_client.get_delegate.assert_awaited_once_with("pubmain")

    @pytest.mark.asyncio
    async def test_sharing_config(self, handlers, request_obj):
        result = await handlers.sharing_config(request_obj)

        assert result["network"] == "DEVNET"
        assert result["voters"]["shareRatio"] == 0.9
        assert result["voters"]["txdescription"] == "share tx by ark-go"
        assert "share_ratio" not in result["voters"]
        assert result["personal"] == {"address": "", "shareRatio": 0.0}

    @pytest.mark.asyncio
    async def test_node_status(self, handlers, node_client, request_obj):
        assert (await handlers.node_status(request_obj))["syncing"] is False
        node_client.get_sync_status.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_news_reads_news_address(self, handlers, node_client, request_obj):
        result = await handlers.news(request_obj)

        assert result["transactions"] == [{"id": "t1"}]
        node_client.get_transactions.assert_awaited_once_with("DNEWS")

    @pytest.mark.asyncio
    async def test_news_without_address(self, node_client, request_obj):
        handlers = DefaultPoolHandlers(PoolConfig(), node_client)

        assert await handlers.news(request_obj) == {"success": True, "transactions": []}
        node_client.get_transactions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_social_info(self, handlers, request_obj):
        result = await handlers.social_info(request_obj)

        assert result["email"] == "pool@example.org"
        assert result["arknewsaddress"] == "DNEWS"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["pending_rewards", "payment_runs", "payment_run_details", "send_dark"])
    async def test_engine_backed_operations_not_provided(self, handlers, request_obj, method):
        with pytest.raises(BackendUnavailableError) as exc_info:
            await getattr(handlers, method)(request_obj)

        assert exc_info.value.status_code == 501
        assert exc_info.value.code == "NOT_PROVIDED"
