"""
Pytest tests for the searched-address store (database.searched_addresses).

Uses a temporary SQLite DB via the searched_db conftest fixture.
"""

from __future__ import annotations

import pytest

from conftest import ADDRESS_A, ADDRESS_B


def test_save_and_get(searched_db):
    stored = searched_db.save_searched_address(ADDRESS_A, "12.5", timestamp=1000, source_info={"from": "search"})

    assert stored == {
        "address": ADDRESS_A,
        "balance": "12.5",
        "formattedBalance": "12.5 SUI",
        "timestamp": 1000,
        "sourceInfo": {"from": "search"},
    }
    assert searched_db.get_searched_address(ADDRESS_A) == stored
    assert searched_db.get_searched_address(ADDRESS_B) is None
    assert searched_db.get_searched_address("") is None


def test_save_upserts_and_keeps_source_info(searched_db):
    searched_db.save_searched_address(ADDRESS_A, "1", timestamp=1000, source_info={"tag": "first"})
    updated = searched_db.save_searched_address(ADDRESS_A, "2", timestamp=2000)

    assert updated["balance"] == "2"
    assert updated["timestamp"] == 2000
    assert updated["sourceInfo"] == {"tag": "first"}
    assert len(searched_db.list_searched_addresses()) == 1


def test_save_with_symbol_labels_balance(searched_db):
    stored = searched_db.save_searched_address(ADDRESS_A, "2.500000", timestamp=1000, symbol="USDC")
    assert stored["formattedBalance"] == "2.500000 USDC"


def test_save_defaults_timestamp_to_now(searched_db):
    stored = searched_db.save_searched_address(ADDRESS_A, "0")
    assert stored["timestamp"] > 1_600_000_000_000


def test_list_is_newest_first(searched_db):
    searched_db.save_searched_address(ADDRESS_A, "1", timestamp=1000)
    searched_db.save_searched_address(ADDRESS_B, "2", timestamp=5000)
    assert [r["address"] for r in searched_db.list_searched_addresses()] == [ADDRESS_B, ADDRESS_A]


def test_delete_and_clear(searched_db):
    searched_db.save_searched_address(ADDRESS_A, "1", timestamp=1000)
    searched_db.save_searched_address(ADDRESS_B, "2", timestamp=2000)

    assert searched_db.delete_searched_address(ADDRESS_A) is True
    assert searched_db.delete_searched_address(ADDRESS_A) is False
    assert searched_db.clear_searched_addresses() == 1
    assert searched_db.list_searched_addresses() == []


def test_empty_address_rejected(searched_db):
    with pytest.raises(ValueError, match="non-empty"):
        searched_db.save_searched_address("  ", "1")
    with pytest.raises(ValueError, match="non-empty"):
        searched_db.delete_searched_address("")
