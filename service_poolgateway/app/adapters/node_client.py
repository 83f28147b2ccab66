"""
Blockchain node client for the pool gateway.
"""

from typing import Any, Dict, Optional
import httpx

from shared.config import DEVNET, MAINNET, PoolConfig
from shared.logging import get_logger
from shared.errors import ExternalServiceError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.retry import retry_on_exception, RetryConfig, RetryError

NETWORK_PORTS = {
    MAINNET: 4001,
    DEVNET: 4002,
}


class NodeClient:
    """Read-only client for the node's public API."""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 retry_config: Optional[RetryConfig] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self.retry_config = retry_config or RetryConfig(max_attempts=3, base_delay=0.5)
        self.logger = get_logger("poolgateway.node_client")

        self.circuit_breaker = CircuitBreaker(
            "node_api",
            failure_threshold=3,
            recovery_timeout=30.0
        )

    @classmethod
    def from_config(cls, config: PoolConfig, **kwargs) -> "NodeClient":
        """Build a client for ``server.nodeip`` on the configured network."""
        node = config.server.node_ip or "127.0.0.1"
        if node.startswith(("http://", "https://")):
            return cls(node, **kwargs)
        port = NETWORK_PORTS.get(config.client.network.upper(), NETWORK_PORTS[DEVNET])
        if ":" in node:
            return cls(f"http://{node}", **kwargs)
        return cls(f"http://{node}:{port}", **kwargs)

    async def get_delegate(self, public_key: str) -> Dict[str, Any]:
        return await self._get("/api/delegates/get", {"publicKey": public_key})

    async def get_voters(self, public_key: str) -> Dict[str, Any]:
        return await self._get("/api/delegates/voters", {"publicKey": public_key})

    async def get_sync_status(self) -> Dict[str, Any]:
        return await self._get("/api/loader/status/sync", {})

    async def get_transactions(self, recipient_id: str, limit: int = 50) -> Dict[str, Any]:
        params = {"recipientId": recipient_id, "orderBy": "timestamp:desc", "limit": limit}
        return await self._get("/api/transactions", params)

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET with retry on transport errors, behind the circuit breaker."""

        @retry_on_exception((httpx.TransportError,), config=self.retry_config)
        async def _request():
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                return await client.get(f"{self.base_url}{path}", params=params)

        try:
            response = await self.circuit_breaker.call(_request)
        except CircuitBreakerOpenException as e:
            raise ExternalServiceError(service="node", message=str(e), details={"path": path})
        except RetryError as e:
            self.logger.error("Node unreachable", path=path, error=str(e.last_exception))
            raise ExternalServiceError(
                service="node",
                message="node unreachable",
                details={"path": path, "attempts": e.attempts}
            )

        if response.status_code != 200:
            self.logger.error(
                "Node request failed",
                path=path,
                status_code=response.status_code,
                response=response.text[:500]
            )
            raise ExternalServiceError(
                service="node",
                message=f"Unexpected status {response.status_code}",
                details={"path": path, "status_code": response.status_code}
            )

        try:
            payload = response.json()
        except ValueError:
            raise ExternalServiceError(service="node", message="invalid JSON response", details={"path": path})

        if isinstance(payload, dict) and payload.get("success") is False:
            raise ExternalServiceError(
                service="node",
                message=str(payload.get("error", "request rejected")),
                details={"path": path}
            )

        self.logger.debug("Node request succeeded", path=path)
        return payload
