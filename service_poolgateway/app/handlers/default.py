"""
Default handlers backed by the configuration snapshot and the node API.
"""

from typing import Any, Dict

from fastapi import Request

from shared.config import PoolConfig
from shared.errors import BackendUnavailableError
from shared.logging import get_logger
from ..adapters.node_client import NodeClient
from .contract import PoolHandlers


class DefaultPoolHandlers(PoolHandlers):
    """Serves everything that does not need the payment engine.

    Pending rewards, payment runs and the DARK relay need the payment
    engine or its database; deployments that have them subclass this and
    override those four methods.
    """

    def __init__(self, config: PoolConfig, node_client: NodeClient):
        self.config = config
        self.node_client = node_client
        self.logger = get_logger("poolgateway.handlers")

    async def pending_rewards(self, request: Request) -> Any:
        raise BackendUnavailableError("Pending rewards")

    async def blocked_voters(self, request: Request) -> Any:
        blocked = self.config.voters.blocklist_addresses
        return {"success": True, "count": len(blocked), "blocked": blocked}

    async def voters(self, request: Request) -> Any:
        _, public_key = self.config.delegate_identity
        return await self.node_client.get_voters(public_key)

    async def delegate(self, request: Request) -> Any:
        _, public_key = self.config.delegate_identity
        return await self.node_client.get_delegate(public_key)

    async def sharing_config(self, request: Request) -> Any:
        config = self.config
        return {
            "success": True,
            "network": config.client.network,
            "voters": config.voters.file_dump(),
            "costs": _payout(config.costs),
            "reserve": _payout(config.reserve),
            "personal": _payout(config.personal),
        }

    async def payment_runs(self, request: Request) -> Any:
        raise BackendUnavailableError("Payment run history")

    async def payment_run_details(self, request: Request) -> Any:
        raise BackendUnavailableError("Payment run details", details={"id": request.query_params.get("id")})

    async def node_status(self, request: Request) -> Any:
        return await self.node_client.get_sync_status()

    async def news(self, request: Request) -> Any:
        address = self.config.web.ark_news_address
        if not address:
            return {"success": True, "transactions": []}
        return await self.node_client.get_transactions(address)

    async def social_info(self, request: Request) -> Any:
        web = self.config.web
        return {
            "success": True,
            "email": web.email,
            "slack": web.slack,
            "reddit": web.reddit,
            "arkforum": web.ark_forum,
            "arknewsaddress": web.ark_news_address,
        }

    async def send_dark(self, request: Request) -> Any:
        raise BackendUnavailableError("DARK relay")


def _payout(section) -> Dict[str, Any]:
    shares = section.file_dump()
    return {key: shares[key] for key in ("address", "shareRatio")}
