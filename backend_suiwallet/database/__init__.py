"""
Persistence for previously searched addresses.

SQLite by default via SQLAlchemy; any SQLAlchemy URL works through
SUIWALLET_DB_URL / DATABASE_URL.
"""

from backend_suiwallet.database.searched_addresses import (
    SearchedAddress,
    clear_searched_addresses,
    delete_searched_address,
    get_searched_address,
    init_db,
    list_searched_addresses,
    save_searched_address,
)

__all__ = [
    "SearchedAddress",
    "clear_searched_addresses",
    "delete_searched_address",
    "get_searched_address",
    "init_db",
    "list_searched_addresses",
    "save_searched_address",
]
