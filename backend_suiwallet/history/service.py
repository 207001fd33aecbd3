"""
History service: one page of a Sui address's transaction history.

Pipeline per call: collect unique digests from both directions, hydrate
them in batches, sort globally newest-first, slice the requested page, and
interpret each record on the page. Nothing is cached between calls.
"""

from __future__ import annotations

from typing import Any, Protocol

from backend_suiwallet.config import Settings
from backend_suiwallet.history.events import HistoryEventSink, LoggingEventSink
from backend_suiwallet.history.hydrator import DetailHydrator
from backend_suiwallet.history.interpreter import (
    TransferInterpreter,
    asset_display,
    format_amount,
)
from backend_suiwallet.history.page_slicer import slice_page
from backend_suiwallet.history.paginator import DualDirectionPaginator
from backend_suiwallet.history.sorter import sort_by_time_desc
from backend_suiwallet.sui_client.models import (
    SUI_COIN_TYPE,
    BalanceResult,
    Cursor,
    Direction,
    DirectionQueryResult,
    DisplayTransaction,
    HydratedTransaction,
    PageResult,
    TransactionDetail,
    TransactionDigest,
)


class LedgerClient(Protocol):
    async def query_by_direction(
        self, address: str, cursor: Cursor, limit: int, direction: Direction
    ) -> DirectionQueryResult: ...

    async def hydrate_batch(self, digests: list[TransactionDigest]) -> list[dict[str, Any]]: ...

    async def get_transaction(self, digest: TransactionDigest) -> dict[str, Any]: ...

    async def get_balance(self, address: str, coin_type: str = SUI_COIN_TYPE) -> int: ...


class HistoryService:
    def __init__(
        self,
        client: LedgerClient,
        *,
        per_round_limit: int = 50,
        max_rounds: int = 10,
        batch_size: int = 50,
        batch_pause_sec: float = 0.1,
        gas_estimate: int = 1_500_000,
        events: HistoryEventSink | None = None,
    ) -> None:
        self._client = client
        self._events = events or LoggingEventSink()
        self._paginator = DualDirectionPaginator(
            client,
            per_round_limit=per_round_limit,
            max_rounds=max_rounds,
            events=self._events,
        )
        self._hydrator = DetailHydrator(
            client,
            batch_size=batch_size,
            batch_pause_sec=batch_pause_sec,
            events=self._events,
        )
        self._interpreter = TransferInterpreter(gas_estimate=gas_estimate)

    @classmethod
    def from_settings(
        cls,
        client: LedgerClient,
        settings: Settings,
        events: HistoryEventSink | None = None,
    ) -> "HistoryService":
        return cls(
            client,
            per_round_limit=settings.per_round_limit,
            max_rounds=settings.max_rounds,
            batch_size=settings.hydration_batch_size,
            batch_pause_sec=settings.batch_pause_sec,
            gas_estimate=settings.gas_estimate,
            events=events,
        )

    async def fetch_history_page(
        self,
        address: str,
        page: int = 1,
        page_size: int = 10,
    ) -> PageResult:
        """
        Return one display-ready page. Never raises: invalid arguments and
        total remote failure both yield PageResult.empty().
        """
        address = (address or "").strip()
        if not address or page < 1 or page_size < 1:
            self._events.emit(
                "history_page_failed",
                address=address,
                page=page,
                page_size=page_size,
                error="invalid arguments",
            )
            return PageResult.empty()

        try:
            outcome = await self._paginator.collect(address, quota=page * page_size)
            hydrated = await self._hydrator.hydrate(
                outcome.unique_digests, outcome.timestamp_index
            )
            ordered = sort_by_time_desc(hydrated)
            page_slice = slice_page(
                ordered, page, page_size, streams_active=outcome.streams_active
            )
            entries = self._interpret_page(page_slice.items, address)
        except Exception as e:
            self._events.emit(
                "history_page_failed",
                address=address,
                page=page,
                page_size=page_size,
                error=str(e),
                error_type=type(e).__name__,
            )
            return PageResult.empty()

        self._events.emit(
            "history_page_built",
            address=address,
            page=page,
            page_size=page_size,
            entries=len(entries),
            total_sorted=len(ordered),
            has_next_page=page_slice.has_next_page,
        )
        return PageResult(
            entries=entries,
            has_next_page=page_slice.has_next_page,
            next_page_token=str(page + 1) if page_slice.has_next_page else None,
        )

    def _interpret_page(
        self, items: list[HydratedTransaction], address: str
    ) -> list[DisplayTransaction]:
        entries: list[DisplayTransaction] = []
        for tx in items:
            try:
                entries.append(self._interpreter.to_display(tx, address))
            except (TypeError, ValueError, AttributeError) as e:
                self._events.emit("history_record_skipped", digest=tx.digest, error=str(e))
        return entries

    async def get_transaction_detail(self, digest: TransactionDigest) -> TransactionDetail:
        """Single-transaction view; raises TransactionNotFound / SuiRpcError."""
        record = await self._client.get_transaction(digest)
        return self._interpreter.to_detail(HydratedTransaction.from_rpc(record))

    async def get_balance(self, address: str, coin_type: str = SUI_COIN_TYPE) -> BalanceResult:
        address = (address or "").strip()
        if not address:
            raise ValueError("address must be non-empty")
        total = await self._client.get_balance(address, coin_type)
        decimals, symbol = asset_display(coin_type)
        return BalanceResult(
            address=address,
            coin_type=coin_type,
            total_balance_raw=total,
            balance=format_amount(total, decimals),
            symbol=symbol,
        )
