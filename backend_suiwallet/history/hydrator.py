"""
Batched transaction detail hydration.

Fetches full detail for collected digests in fixed-size batches with a
short pause between batches. A failed batch is skipped; malformed records
are dropped. Records without their own timestamp take the provisional
timestamp recorded during pagination.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol, Sequence

from backend_suiwallet.core.exceptions import MalformedRecord
from backend_suiwallet.history.events import HistoryEventSink, NullEventSink
from backend_suiwallet.sui_client.models import (
    HydratedTransaction,
    TimestampIndex,
    TransactionDigest,
)


class BatchDetailClient(Protocol):
    async def hydrate_batch(self, digests: list[TransactionDigest]) -> list[dict[str, Any]]: ...


class DetailHydrator:
    def __init__(
        self,
        client: BatchDetailClient,
        *,
        batch_size: int = 50,
        batch_pause_sec: float = 0.1,
        events: HistoryEventSink | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        if batch_pause_sec < 0:
            raise ValueError("batch_pause_sec must be non-negative")
        self._client = client
        self._batch_size = batch_size
        self._batch_pause_sec = batch_pause_sec
        self._events = events or NullEventSink()

    async def hydrate(
        self,
        digests: Sequence[TransactionDigest],
        timestamp_index: TimestampIndex | None = None,
    ) -> list[HydratedTransaction]:
        """Return detail records for as many digests as could be fetched, in batch order."""
        timestamp_index = timestamp_index or {}
        ordered = list(dict.fromkeys(digests))
        wanted = set(ordered)
        hydrated: list[HydratedTransaction] = []
        returned: set[str] = set()

        batches = [
            ordered[i : i + self._batch_size]
            for i in range(0, len(ordered), self._batch_size)
        ]
        for index, batch in enumerate(batches):
            if index > 0 and self._batch_pause_sec > 0:
                await asyncio.sleep(self._batch_pause_sec)
            try:
                records = await self._client.hydrate_batch(batch)
            except Exception as e:
                self._events.emit(
                    "history_batch_failed",
                    batch=index,
                    batch_size=len(batch),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            kept = 0
            for record in records or []:
                try:
                    tx = HydratedTransaction.from_rpc(record)
                except MalformedRecord as e:
                    self._events.emit("history_record_skipped", batch=index, error=str(e))
                    continue
                if tx.digest not in wanted or tx.digest in returned:
                    continue
                if tx.timestamp_ms is None and tx.digest in timestamp_index:
                    tx = tx.with_timestamp(timestamp_index[tx.digest])
                returned.add(tx.digest)
                hydrated.append(tx)
                kept += 1
            self._events.emit(
                "history_batch_hydrated",
                batch=index,
                requested=len(batch),
                hydrated=kept,
            )
        return hydrated
