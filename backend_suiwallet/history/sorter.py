"""Global newest-first ordering of hydrated transactions."""

from __future__ import annotations

from typing import Iterable

from backend_suiwallet.sui_client.models import HydratedTransaction


def sort_by_time_desc(transactions: Iterable[HydratedTransaction]) -> list[HydratedTransaction]:
    """
    Order by timestamp_ms descending; unknown timestamps sort as 0 (oldest).
    sorted() is stable, so equal timestamps keep their fetch order.
    """
    return sorted(transactions, key=lambda tx: tx.timestamp_ms or 0, reverse=True)
