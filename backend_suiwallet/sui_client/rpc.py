"""
Sui fullnode JSON-RPC client.

Responsibilities:
- Query transaction digests by sender or recipient (cursor-paginated).
- Fetch full transaction detail in multi-digest batches and one at a time.
- Look up coin balances.
- Retry with exponential backoff on HTTP 429 and transport errors.

Wire errors surface as SuiRpcError subclasses; the history pipeline
decides whether they are fatal.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import httpx

from backend_suiwallet.config import Settings
from backend_suiwallet.config.env import mask_rpc_url
from backend_suiwallet.core.exceptions import (
    RemoteBatchError,
    RemoteQueryError,
    SuiRpcError,
    TransactionNotFound,
)
from backend_suiwallet.suiwallet_logging import get_logger
from backend_suiwallet.sui_client.models import (
    SUI_COIN_TYPE,
    Cursor,
    Direction,
    DirectionQueryResult,
    TransactionDigest,
)

logger = get_logger(__name__)

DETAIL_OPTIONS: dict[str, bool] = {
    "showInput": True,
    "showEffects": True,
    "showBalanceChanges": True,
    "showEvents": True,
}

_request_ids = itertools.count(1)


def _build_rpc_body(method: str, params: list[Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": method,
        "params": params,
    }


class SuiRpcClient:
    """
    Async client for the Sui fullnode JSON-RPC API.

    Use as an async context manager, or pass an existing httpx.AsyncClient
    (e.g. with a MockTransport in tests); a passed-in client is not closed.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        request_timeout_sec: float = 30.0,
        max_retries: int = 3,
        retry_backoff_sec: float = 0.5,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._rpc_url = rpc_url.rstrip("/")
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff_sec
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(request_timeout_sec)
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "SuiRpcClient":
        return cls(
            settings.rpc_url,
            request_timeout_sec=settings.request_timeout_sec,
            max_retries=settings.max_retries,
            retry_backoff_sec=settings.retry_backoff_sec,
            **kwargs,
        )

    async def __aenter__(self) -> "SuiRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post_with_retry(self, body: dict[str, Any]) -> httpx.Response:
        delay = self._retry_backoff
        last_error: Exception | None = None
        for attempt in range(self._max_retries):
            try:
                resp = await self._client.post(self._rpc_url, json=body)
            except httpx.HTTPError as e:
                last_error = e
                logger.warning(
                    "sui_rpc_retry",
                    method=body["method"],
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                    error=str(e),
                )
            else:
                if resp.status_code != 429:
                    return resp
                last_error = SuiRpcError("rate limited (429)", code=429)
                logger.warning(
                    "sui_rpc_rate_limited",
                    method=body["method"],
                    attempt=attempt + 1,
                    max_retries=self._max_retries,
                )
            if attempt + 1 < self._max_retries:
                await asyncio.sleep(delay)
                delay *= 2
        logger.error(
            "sui_rpc_give_up",
            method=body["method"],
            rpc_url=mask_rpc_url(self._rpc_url),
            error=str(last_error),
        )
        if isinstance(last_error, SuiRpcError):
            raise last_error
        raise SuiRpcError(f"Sui RPC transport error: {last_error}") from last_error

    async def call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call; raise SuiRpcError on transport, HTTP or RPC error."""
        body = _build_rpc_body(method, params)
        resp = await self._post_with_retry(body)
        try:
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPStatusError, ValueError) as e:
            raise SuiRpcError(f"Sui RPC bad response for {method}: {e}") from e
        if not isinstance(data, dict):
            raise SuiRpcError(f"Sui RPC returned non-object payload for {method}")
        if data.get("error"):
            err = data["error"]
            if isinstance(err, dict):
                raise SuiRpcError(
                    f"Sui RPC error: {err.get('message', err)} (code={err.get('code')})",
                    code=err.get("code"),
                )
            raise SuiRpcError(f"Sui RPC error: {err}")
        return data.get("result")

    async def query_by_direction(
        self,
        address: str,
        cursor: Cursor,
        limit: int,
        direction: Direction,
    ) -> DirectionQueryResult:
        """suix_queryTransactionBlocks filtered by FromAddress / ToAddress, newest first."""
        query = {"filter": {direction.rpc_filter_key: address}, "options": {}}
        try:
            result = await self.call(
                "suix_queryTransactionBlocks", [query, cursor, limit, True]
            )
        except SuiRpcError as e:
            raise RemoteQueryError(str(e), code=e.code) from e
        if result is not None and not isinstance(result, dict):
            raise RemoteQueryError("suix_queryTransactionBlocks returned a non-object result")
        return DirectionQueryResult.from_rpc_result(result)

    async def hydrate_batch(self, digests: list[TransactionDigest]) -> list[dict[str, Any]]:
        """sui_multiGetTransactionBlocks; may return fewer records than requested."""
        if not digests:
            return []
        try:
            result = await self.call(
                "sui_multiGetTransactionBlocks", [list(digests), DETAIL_OPTIONS]
            )
        except SuiRpcError as e:
            raise RemoteBatchError(str(e), code=e.code) from e
        if result is None:
            return []
        if not isinstance(result, list):
            raise RemoteBatchError("sui_multiGetTransactionBlocks returned a non-list result")
        return [r for r in result if r is not None]

    async def get_transaction(self, digest: TransactionDigest) -> dict[str, Any]:
        """sui_getTransactionBlock with object changes; raises TransactionNotFound on empty result."""
        if not digest or not digest.strip():
            raise ValueError("Transaction hash is required")
        options = dict(DETAIL_OPTIONS, showObjectChanges=True)
        result = await self.call("sui_getTransactionBlock", [digest.strip(), options])
        if not result:
            raise TransactionNotFound(f"Transaction not found: {digest}")
        return result

    async def get_balance(self, address: str, coin_type: str = SUI_COIN_TYPE) -> int:
        """suix_getBalance totalBalance in the coin's smallest unit; 0 when absent."""
        result = await self.call("suix_getBalance", [address, coin_type])
        if not isinstance(result, dict):
            return 0
        try:
            return int(result.get("totalBalance") or 0)
        except (TypeError, ValueError):
            return 0
