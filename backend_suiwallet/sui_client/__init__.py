"""
Sui fullnode client package.

Talks JSON-RPC to a Sui fullnode and normalizes raw transaction payloads
into the dataclasses consumed by the history pipeline.
"""

from backend_suiwallet.sui_client.models import (
    Direction,
    DirectionQueryResult,
    DisplayTransaction,
    HydratedTransaction,
    PageResult,
)
from backend_suiwallet.sui_client.rpc import SuiRpcClient

__all__ = [
    "Direction",
    "DirectionQueryResult",
    "DisplayTransaction",
    "HydratedTransaction",
    "PageResult",
    "SuiRpcClient",
]
