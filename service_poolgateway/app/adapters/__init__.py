"""
Adapters package for the pool gateway.

Contains HTTP client wrappers for external collaborators. Adapters own
base URLs, retry and circuit-breaker policy, and map failures onto
shared errors.
"""

from .node_client import NodeClient, NETWORK_PORTS

__all__ = [
    "NodeClient",
    "NETWORK_PORTS",
]
