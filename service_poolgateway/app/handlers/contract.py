"""
Handler contract between the gateway and the pool backend.

The gateway owns routing and access policy only. Everything a productive
endpoint returns comes from a ``PoolHandlers`` implementation, so the
payment engine, persistence and node access can be swapped per deployment.
"""

import abc
from typing import Any

from fastapi import Request


class PoolHandlers(abc.ABC):
    """One coroutine per productive endpoint; each returns a JSON-able value."""

    # /voters
    @abc.abstractmethod
    async def pending_rewards(self, request: Request) -> Any:
        """Rewards accrued by voters since the last payment run."""

    @abc.abstractmethod
    async def blocked_voters(self, request: Request) -> Any:
        """Addresses excluded from reward sharing."""

    @abc.abstractmethod
    async def voters(self, request: Request) -> Any:
        """All accounts currently voting for the delegate."""

    # /delegate
    @abc.abstractmethod
    async def delegate(self, request: Request) -> Any:
        """Delegate account as reported by the node."""

    @abc.abstractmethod
    async def sharing_config(self, request: Request) -> Any:
        """Public view of the reward-sharing configuration."""

    @abc.abstractmethod
    async def payment_runs(self, request: Request) -> Any:
        """History of payment runs."""

    @abc.abstractmethod
    async def payment_run_details(self, request: Request) -> Any:
        """Per-voter payouts of one payment run (``?id=``)."""

    @abc.abstractmethod
    async def node_status(self, request: Request) -> Any:
        """Sync status of the backing node."""

    # /social
    @abc.abstractmethod
    async def news(self, request: Request) -> Any:
        """News messages sent to the configured news address."""

    @abc.abstractmethod
    async def social_info(self, request: Request) -> Any:
        """Delegate contact and social links."""

    # /proxy
    @abc.abstractmethod
    async def send_dark(self, request: Request) -> Any:
        """Relay a devnet DARK send-transaction request."""
