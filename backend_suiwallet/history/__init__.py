"""
Transaction history pipeline.

Collects digests from the outgoing and incoming query streams, hydrates
detail in batches, orders them globally by time, slices pages, and turns
each record into a display-ready transfer.
"""

from backend_suiwallet.history.events import (
    HistoryEventSink,
    LoggingEventSink,
    NullEventSink,
)
from backend_suiwallet.history.hydrator import DetailHydrator
from backend_suiwallet.history.interpreter import TransferInterpreter
from backend_suiwallet.history.page_slicer import PageSlice, slice_page
from backend_suiwallet.history.paginator import DualDirectionPaginator, PaginationOutcome
from backend_suiwallet.history.service import HistoryService
from backend_suiwallet.history.sorter import sort_by_time_desc

__all__ = [
    "DetailHydrator",
    "DualDirectionPaginator",
    "HistoryEventSink",
    "HistoryService",
    "LoggingEventSink",
    "NullEventSink",
    "PageSlice",
    "PaginationOutcome",
    "TransferInterpreter",
    "slice_page",
    "sort_by_time_desc",
]
