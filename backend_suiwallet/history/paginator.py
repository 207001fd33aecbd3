"""
Dual-direction digest collection.

Drives the outgoing (FromAddress) and incoming (ToAddress) query streams
round by round until enough unique digests are collected or both streams
are exhausted. Each round fans out one request per active direction and
waits for all of them; a failing direction is dropped for the rest of the
run while the other keeps going.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Protocol

from backend_suiwallet.history.events import HistoryEventSink, NullEventSink
from backend_suiwallet.sui_client.models import (
    Cursor,
    Direction,
    DirectionQueryResult,
    DirectionStreamState,
    TimestampIndex,
    TransactionDigest,
)


class DirectionQueryClient(Protocol):
    async def query_by_direction(
        self,
        address: str,
        cursor: Cursor,
        limit: int,
        direction: Direction,
    ) -> DirectionQueryResult: ...


@dataclass
class PaginationOutcome:
    """Unique digests in arrival order plus final per-direction state."""

    unique_digests: list[TransactionDigest]
    outgoing: DirectionStreamState
    incoming: DirectionStreamState
    timestamp_index: TimestampIndex = field(default_factory=dict)
    rounds: int = 0

    @property
    def streams_active(self) -> bool:
        """True if either stream stopped with data still unfetched."""
        return self.outgoing.has_more or self.incoming.has_more


class DualDirectionPaginator:
    def __init__(
        self,
        client: DirectionQueryClient,
        *,
        per_round_limit: int = 50,
        max_rounds: int = 10,
        events: HistoryEventSink | None = None,
    ) -> None:
        if per_round_limit < 1:
            raise ValueError("per_round_limit must be positive")
        if max_rounds < 1:
            raise ValueError("max_rounds must be positive")
        self._client = client
        self._per_round_limit = per_round_limit
        self._max_rounds = max_rounds
        self._events = events or NullEventSink()

    async def collect(self, address: str, quota: int) -> PaginationOutcome:
        """
        Collect up to roughly `quota` unique digests across both directions.

        Never raises for remote failures: a direction whose request fails is
        marked inactive and the outcome carries whatever was gathered.
        """
        if quota < 1:
            raise ValueError("quota must be positive")
        outgoing = DirectionStreamState(Direction.OUTGOING)
        incoming = DirectionStreamState(Direction.INCOMING)
        streams = (outgoing, incoming)
        seen_per_stream: dict[Direction, set[str]] = {s.direction: set() for s in streams}
        unique: dict[TransactionDigest, None] = {}
        timestamp_index: TimestampIndex = {}
        rounds = 0

        while rounds < self._max_rounds and len(unique) < quota:
            requests = [
                (s, min(self._per_round_limit, quota - len(s.collected_digests)))
                for s in streams
                if s.has_more
            ]
            requests = [(s, limit) for s, limit in requests if limit > 0]
            if not requests:
                break
            rounds += 1
            self._events.emit(
                "history_round_started",
                address=address,
                round=rounds,
                directions=[s.direction.value for s, _ in requests],
            )
            results = await asyncio.gather(
                *(
                    self._client.query_by_direction(address, s.cursor, limit, s.direction)
                    for s, limit in requests
                ),
                return_exceptions=True,
            )
            for (stream, _), result in zip(requests, results):
                self._apply(
                    address,
                    stream,
                    result,
                    seen_per_stream[stream.direction],
                    unique,
                    timestamp_index,
                )

        outcome = PaginationOutcome(
            unique_digests=list(unique),
            outgoing=outgoing,
            incoming=incoming,
            timestamp_index=timestamp_index,
            rounds=rounds,
        )
        self._events.emit(
            "history_pagination_done",
            address=address,
            rounds=rounds,
            unique_count=len(outcome.unique_digests),
            outgoing_count=len(outgoing.collected_digests),
            incoming_count=len(incoming.collected_digests),
            streams_active=outcome.streams_active,
        )
        return outcome

    def _apply(
        self,
        address: str,
        stream: DirectionStreamState,
        result: Any,
        seen: set[str],
        unique: dict[TransactionDigest, None],
        timestamp_index: TimestampIndex,
    ) -> None:
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            stream.has_more = False
            self._events.emit(
                "history_direction_failed",
                address=address,
                direction=stream.direction.value,
                error=str(result),
                error_type=type(result).__name__,
            )
            return

        new_digests = [d for d in dict.fromkeys(result.digests) if d not in seen]
        for digest in new_digests:
            seen.add(digest)
            stream.collected_digests.append(digest)
            unique.setdefault(digest, None)
            hint = result.timestamp_hints.get(digest)
            if hint is not None:
                timestamp_index.setdefault(digest, hint)

        stream.cursor = result.next_cursor
        # A "more data" claim without progress or without a cursor would loop forever
        if not result.has_next_page or result.next_cursor is None or not new_digests:
            stream.has_more = False
            self._events.emit(
                "history_direction_exhausted",
                address=address,
                direction=stream.direction.value,
                collected=len(stream.collected_digests),
            )
