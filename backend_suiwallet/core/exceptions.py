"""
Application-level exceptions.

The history pipeline catches RemoteQueryError, RemoteBatchError and
MalformedRecord where they occur; only lookups outside the pipeline
(balance, single transaction detail) let them reach the caller.
"""

from __future__ import annotations


class SuiWalletError(Exception):
    """Base class for all backend_suiwallet errors."""


class SuiRpcError(SuiWalletError):
    """Transport failure or JSON-RPC error object returned by the fullnode."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class RemoteQueryError(SuiRpcError):
    """A transactions-by-sender / transactions-by-recipient query failed."""


class RemoteBatchError(SuiRpcError):
    """A multi-digest transaction detail request failed for the whole batch."""


class TransactionNotFound(SuiWalletError):
    """The fullnode returned no record for the requested digest."""


class MalformedRecord(SuiWalletError, ValueError):
    """A hydrated record lacks the fields needed to build a transaction."""
