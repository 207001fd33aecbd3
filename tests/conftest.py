"""
Pytest fixtures for SuiWallet tests.

In-memory fake ledger (direction queries + batched detail), raw record
builder, event recorder, temporary SQLite store and FastAPI TestClient.
"""

from __future__ import annotations

from typing import Any

import pytest

from backend_suiwallet.core.exceptions import (
    RemoteBatchError,
    RemoteQueryError,
    TransactionNotFound,
)
from backend_suiwallet.history.events import HistoryEventSink
from backend_suiwallet.sui_client.models import (
    SUI_COIN_TYPE,
    Direction,
    DirectionQueryResult,
)

ADDRESS_A = "0x" + "a" * 64
ADDRESS_B = "0x" + "b" * 64
ADDRESS_C = "0x" + "c" * 64


def build_record(
    digest: str,
    sender: str = ADDRESS_A,
    *,
    timestamp_ms: int | None = 1_700_000_000_000,
    changes: list[tuple[str | None, int]] | None = None,
    coin_type: str = SUI_COIN_TYPE,
    status: str = "success",
    error: str | None = None,
    inputs: list[dict[str, Any]] | None = None,
    events: list[dict[str, Any]] | None = None,
    gas_used: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Raw sui_getTransactionBlock-shaped record; amounts as strings like the RPC."""
    status_obj: dict[str, Any] = {"status": status}
    if error:
        status_obj["error"] = error
    record: dict[str, Any] = {
        "digest": digest,
        "transaction": {
            "data": {
                "sender": sender,
                "transaction": {"kind": "ProgrammableTransaction", "inputs": inputs or []},
            }
        },
        "effects": {
            "status": status_obj,
            "gasUsed": gas_used or {"computationCost": "750000", "storageCost": "1976000", "storageRebate": "978120"},
        },
        "events": events or [],
        "balanceChanges": [
            {
                "owner": {"AddressOwner": owner} if owner else {"Shared": {"initial_shared_version": 1}},
                "coinType": coin_type,
                "amount": str(amount),
            }
            for owner, amount in (changes or [])
        ],
    }
    if timestamp_ms is not None:
        record["timestampMs"] = str(timestamp_ms)
    return record


class FakeLedgerClient:
    """
    Offset-cursor fake of SuiRpcClient.

    streams: direction -> list of (digest, timestamp hint or None), newest first.
    records: digest -> raw detail record.
    """

    def __init__(
        self,
        outgoing: list[tuple[str, int | None]] | None = None,
        incoming: list[tuple[str, int | None]] | None = None,
        records: dict[str, dict[str, Any]] | None = None,
        *,
        fail_directions: tuple[Direction, ...] = (),
        fail_batches: tuple[int, ...] = (),
        balances: dict[tuple[str, str], int] | None = None,
    ) -> None:
        self.streams = {Direction.OUTGOING: outgoing or [], Direction.INCOMING: incoming or []}
        self.records = records or {}
        self.fail_directions = fail_directions
        self.fail_batches = fail_batches
        self.balances = balances or {}
        self.query_calls: list[tuple[Direction, str | None, int]] = []
        self.batch_calls: list[list[str]] = []

    async def query_by_direction(self, address, cursor, limit, direction):
        self.query_calls.append((direction, cursor, limit))
        if direction in self.fail_directions:
            raise RemoteQueryError(f"{direction.value} query failed")
        items = self.streams[direction]
        start = int(cursor or 0)
        chunk = items[start : start + limit]
        end = start + len(chunk)
        has_next = end < len(items)
        return DirectionQueryResult(
            digests=[d for d, _ in chunk],
            next_cursor=str(end) if has_next else None,
            has_next_page=has_next,
            timestamp_hints={d: ts for d, ts in chunk if ts},
        )

    async def hydrate_batch(self, digests):
        index = len(self.batch_calls)
        self.batch_calls.append(list(digests))
        if index in self.fail_batches:
            raise RemoteBatchError(f"batch {index} failed")
        return [self.records[d] for d in digests if d in self.records]

    async def get_transaction(self, digest):
        if digest not in self.records:
            raise TransactionNotFound(f"Transaction not found: {digest}")
        return self.records[digest]

    async def get_balance(self, address, coin_type=SUI_COIN_TYPE):
        return self.balances.get((address, coin_type), 0)


class RecordingEventSink(HistoryEventSink):
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append((event, fields))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def fake_ledger():
    """Factory: fake_ledger(outgoing=..., incoming=..., records=..., fail_directions=...)."""
    return FakeLedgerClient


@pytest.fixture
def event_sink():
    return RecordingEventSink()


@pytest.fixture
def searched_db(tmp_path, monkeypatch):
    """
    Point the searched-address store at a temporary SQLite DB and create tables.
    Unset SUIWALLET_DB_URL / DATABASE_URL so SQLite is used.
    """
    monkeypatch.delenv("SUIWALLET_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("SEARCHED_ADDRESSES_DB_PATH", str(tmp_path / "searched.db"))

    import backend_suiwallet.database.searched_addresses as db

    db.reset_engine_for_test()
    db.init_db()
    yield db
    db.reset_engine_for_test()


@pytest.fixture
def api_ledger():
    """Fake ledger behind the API client fixture; tests fill streams/records."""
    return FakeLedgerClient()


@pytest.fixture
def client(searched_db, api_ledger, monkeypatch):
    """FastAPI TestClient with a HistoryService over the fake ledger (lifespan not run)."""
    from fastapi.testclient import TestClient

    from backend_suiwallet.api_server.server import app
    from backend_suiwallet.history import HistoryService, NullEventSink

    service = HistoryService(api_ledger, batch_pause_sec=0, events=NullEventSink())
    monkeypatch.setattr(app.state, "history_service", service, raising=False)
    return TestClient(app)
