"""
Pytest tests for HistoryService.fetch_history_page and the single lookups.

End-to-end over the FakeLedgerClient: pagination, hydration, global sort,
page slicing and interpretation together. No network.
"""

from __future__ import annotations

import asyncio

import pytest

from conftest import ADDRESS_A, ADDRESS_B, build_record
from backend_suiwallet.config import Settings
from backend_suiwallet.core.exceptions import TransactionNotFound
from backend_suiwallet.history import HistoryService, NullEventSink
from backend_suiwallet.sui_client.models import SUI_COIN_TYPE, Direction, PageResult

BASE_TS = 1_700_000_000_000


def _ledger_with_history(fake_ledger, count: int = 25, **kwargs):
    """
    count transactions t00..t(count-1), t(i) at BASE_TS + i seconds.
    Even ones are sent by A to B, odd ones received by A from B.
    """
    outgoing, incoming, records = [], [], {}
    for i in reversed(range(count)):
        digest = f"t{i:02d}"
        ts = BASE_TS + i * 1000
        if i % 2 == 0:
            outgoing.append((digest, ts))
            records[digest] = build_record(
                digest, ADDRESS_A, timestamp_ms=ts,
                changes=[(ADDRESS_A, -(i + 1) * 1_000_000_000 - 1_500_000), (ADDRESS_B, (i + 1) * 1_000_000_000)],
            )
        else:
            incoming.append((digest, ts))
            records[digest] = build_record(
                digest, ADDRESS_B, timestamp_ms=ts,
                changes=[(ADDRESS_B, -(i + 1) * 1_000_000_000 - 1_500_000), (ADDRESS_A, (i + 1) * 1_000_000_000)],
            )
    return fake_ledger(outgoing=outgoing, incoming=incoming, records=records, **kwargs)


def _service(ledger, events=None, **kwargs) -> HistoryService:
    kwargs.setdefault("batch_pause_sec", 0)
    return HistoryService(ledger, events=events or NullEventSink(), **kwargs)


def test_third_page_of_twenty_five(fake_ledger):
    """25 transactions, page 3 of size 10: the 5 oldest, no next page."""
    ledger = _ledger_with_history(fake_ledger)
    result = asyncio.run(_service(ledger).fetch_history_page(ADDRESS_A, page=3, page_size=10))

    assert [e.digest for e in result.entries] == ["t04", "t03", "t02", "t01", "t00"]
    assert result.has_next_page is False
    assert result.next_page_token is None


def test_first_page_is_newest_and_merged(fake_ledger):
    ledger = _ledger_with_history(fake_ledger)
    result = asyncio.run(_service(ledger).fetch_history_page(ADDRESS_A, page=1, page_size=10))

    assert [e.digest for e in result.entries] == [f"t{i:02d}" for i in range(24, 14, -1)]
    assert result.has_next_page is True
    assert result.next_page_token == "2"
    first, second = result.entries[0], result.entries[1]
    assert first.direction == "Sent"
    assert first.to == ADDRESS_B
    assert first.amount == "25.000000"
    assert second.direction == "Received"
    assert second.from_address == ADDRESS_B
    timestamps = [e.timestamp_ms for e in result.entries]
    assert timestamps == sorted(timestamps, reverse=True)


def test_page_past_end_is_empty(fake_ledger):
    ledger = _ledger_with_history(fake_ledger, count=5)
    result = asyncio.run(_service(ledger).fetch_history_page(ADDRESS_A, page=3, page_size=10))
    assert result == PageResult.empty()


def test_one_failing_direction_still_returns_the_other(fake_ledger, event_sink):
    ledger = _ledger_with_history(fake_ledger, count=10, fail_directions=(Direction.INCOMING,))
    result = asyncio.run(_service(ledger, events=event_sink).fetch_history_page(ADDRESS_A, page=1, page_size=10))

    assert [e.digest for e in result.entries] == ["t08", "t06", "t04", "t02", "t00"]
    assert all(e.direction == "Sent" for e in result.entries)
    assert result.has_next_page is False
    assert "history_direction_failed" in event_sink.names()
    assert "history_page_built" in event_sink.names()


def test_failed_direction_with_more_data_left_keeps_next_page(fake_ledger):
    """Incoming fails; outgoing stopped at the quota with data left, so page 3 may exist."""
    ledger = _ledger_with_history(fake_ledger, count=60, fail_directions=(Direction.INCOMING,))
    result = asyncio.run(_service(ledger).fetch_history_page(ADDRESS_A, page=2, page_size=10))

    assert len(result.entries) == 10
    assert all(e.direction == "Sent" for e in result.entries)
    assert result.has_next_page is True
    assert result.next_page_token == "3"


def test_failed_hydration_batch_still_returns_a_page(fake_ledger):
    ledger = _ledger_with_history(fake_ledger, count=10, fail_batches=(0,))
    result = asyncio.run(_service(ledger, batch_size=4).fetch_history_page(ADDRESS_A, page=1, page_size=10))

    assert len(result.entries) == 6
    assert result.has_next_page is False


def test_total_remote_failure_yields_empty_page(fake_ledger):
    ledger = _ledger_with_history(fake_ledger, fail_directions=(Direction.OUTGOING, Direction.INCOMING))
    result = asyncio.run(_service(ledger).fetch_history_page(ADDRESS_A))
    assert result.to_dict() == {"entries": [], "hasNextPage": False, "nextPageToken": None}


def test_unexpected_error_is_contained(event_sink):
    class _BrokenClient:
        async def query_by_direction(self, address, cursor, limit, direction):
            return None

    result = asyncio.run(_service(_BrokenClient(), events=event_sink).fetch_history_page(ADDRESS_A))

    assert result == PageResult.empty()
    failed = [f for name, f in event_sink.events if name == "history_page_failed"]
    assert failed and failed[0]["error_type"] == "AttributeError"


def test_next_page_reported_while_stream_has_more(fake_ledger):
    """Exactly one page collected but the outgoing stream is not exhausted."""
    ledger = _ledger_with_history(fake_ledger, count=40)
    ledger.streams[Direction.INCOMING] = []
    service = _service(ledger, per_round_limit=5, max_rounds=1)
    result = asyncio.run(service.fetch_history_page(ADDRESS_A, page=1, page_size=5))

    assert len(result.entries) == 5
    assert result.has_next_page is True
    assert result.next_page_token == "2"


@pytest.mark.parametrize(
    "address,page,page_size",
    [("", 1, 10), ("   ", 1, 10), (ADDRESS_A, 0, 10), (ADDRESS_A, 1, 0), (ADDRESS_A, -2, 10)],
)
def test_invalid_arguments_return_empty_without_queries(fake_ledger, event_sink, address, page, page_size):
    ledger = _ledger_with_history(fake_ledger, count=3)
    result = asyncio.run(
        _service(ledger, events=event_sink).fetch_history_page(address, page=page, page_size=page_size)
    )
    assert result == PageResult.empty()
    assert ledger.query_calls == []
    assert event_sink.names() == ["history_page_failed"]


def test_pages_are_consistent_across_calls(fake_ledger):
    ledger = _ledger_with_history(fake_ledger)
    service = _service(ledger)
    seen = []
    for page in (1, 2, 3):
        result = asyncio.run(service.fetch_history_page(ADDRESS_A, page=page, page_size=10))
        seen.extend(e.digest for e in result.entries)
    assert seen == [f"t{i:02d}" for i in range(24, -1, -1)]


def test_get_transaction_detail(fake_ledger):
    ledger = _ledger_with_history(fake_ledger, count=3)
    detail = asyncio.run(_service(ledger).get_transaction_detail("t02"))
    assert detail.digest == "t02"
    assert detail.recipient == ADDRESS_B
    assert detail.amount == "3.000000"

    with pytest.raises(TransactionNotFound):
        asyncio.run(_service(ledger).get_transaction_detail("missing"))


def test_get_balance_formats_and_validates(fake_ledger):
    ledger = fake_ledger(balances={(ADDRESS_A, SUI_COIN_TYPE): 12_345_000_000})
    balance = asyncio.run(_service(ledger).get_balance(ADDRESS_A))

    assert balance.total_balance_raw == 12_345_000_000
    assert balance.balance == "12.345000"
    assert balance.formatted_balance == "12.345000 SUI"
    assert asyncio.run(_service(ledger).get_balance(ADDRESS_B)).balance == "0.000000"
    with pytest.raises(ValueError):
        asyncio.run(_service(ledger).get_balance("  "))


def test_from_settings_applies_tuning(fake_ledger):
    settings = Settings(rpc_url="http://localhost:9000", per_round_limit=3, max_rounds=1, batch_pause_sec=0)
    ledger = _ledger_with_history(fake_ledger, count=20)
    service = HistoryService.from_settings(ledger, settings, events=NullEventSink())
    result = asyncio.run(service.fetch_history_page(ADDRESS_A, page=1, page_size=10))

    assert [limit for _, _, limit in ledger.query_calls] == [3, 3]
    assert len(result.entries) == 6
    assert result.has_next_page is True
