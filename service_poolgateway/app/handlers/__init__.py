"""
Handler contract and default implementation.
"""

from .contract import PoolHandlers
from .default import DefaultPoolHandlers

__all__ = [
    "PoolHandlers",
    "DefaultPoolHandlers",
]
