"""
Searched-address store: SQLAlchemy-backed list of previously viewed addresses.

Uses SUIWALLET_DB_URL / DATABASE_URL when set; otherwise falls back to SQLite
(SEARCHED_ADDRESSES_DB_PATH or suiwallet.db). One row per address, upserted
on every lookup and listed newest first.
"""

from __future__ import annotations

import json
import os
import time
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import BigInteger, Column, String, Text, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend_suiwallet.suiwallet_logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()

DEFAULT_SQLITE_PATH = "suiwallet.db"
BALANCE_SYMBOL = "SUI"


class SearchedAddress(Base):
    """One previously searched address with its last seen balance."""

    __tablename__ = "searched_addresses"

    address = Column(String(128), primary_key=True)
    balance = Column(String(64), nullable=False)  # SUI as text; avoids float rounding
    formatted_balance = Column(String(80), nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)  # Unix milliseconds
    source_info = Column(Text, nullable=True)  # JSON object

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "balance": self.balance,
            "formattedBalance": self.formatted_balance,
            "timestamp": self.timestamp,
            "sourceInfo": json.loads(self.source_info) if self.source_info else None,
        }


def _get_database_url() -> str:
    """Return SUIWALLET_DB_URL or DATABASE_URL if set; else SQLite from SEARCHED_ADDRESSES_DB_PATH or default."""
    url = (os.getenv("SUIWALLET_DB_URL") or os.getenv("DATABASE_URL") or "").strip()
    if url:
        return url
    path = (os.getenv("SEARCHED_ADDRESSES_DB_PATH") or "").strip() or DEFAULT_SQLITE_PATH
    return f"sqlite:///{path}"


_engine = None
_SessionLocal: sessionmaker | None = None


def _get_engine():
    """Create or return cached engine."""
    global _engine
    if _engine is None:
        url = _get_database_url()
        connect_args = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        logger.info("searched_addresses_engine", url=url.split("?")[0].split("//")[-1])
    return _engine


def _get_session_factory() -> sessionmaker:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_get_engine())
    return _SessionLocal


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Context manager for a single session. Commits on success, rolls back on error."""
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _normalize_address(address: str) -> str:
    address = (address or "").strip()
    if not address:
        raise ValueError("address must be non-empty")
    return address


def init_db() -> None:
    """Create the searched_addresses table if missing. Safe to call on every startup."""
    try:
        Base.metadata.create_all(bind=_get_engine())
        logger.info("searched_addresses_init_db", url=_get_database_url().split("?")[0].split("//")[-1])
    except Exception as e:
        logger.exception("searched_addresses_init_db_failed", error=str(e))
        raise


def save_searched_address(
    address: str,
    balance: str | float | int,
    timestamp: int | None = None,
    source_info: dict[str, Any] | None = None,
    symbol: str = BALANCE_SYMBOL,
) -> dict[str, Any]:
    """
    Insert or replace the row for address. When source_info is None the
    existing row's source_info is kept. timestamp defaults to now (ms).
    symbol labels the balance in formatted_balance (SUI unless told otherwise).
    Returns the stored row as a dict.
    """
    address = _normalize_address(address)
    ts = int(timestamp) if timestamp is not None else int(time.time() * 1000)
    balance_text = str(balance)
    try:
        with _session_scope() as session:
            row = session.get(SearchedAddress, address)
            if row is None:
                row = SearchedAddress(address=address)
                session.add(row)
            if source_info is not None:
                row.source_info = json.dumps(source_info)
            row.balance = balance_text
            row.formatted_balance = f"{balance_text} {symbol or BALANCE_SYMBOL}"
            row.timestamp = ts
            session.flush()
            stored = row.to_dict()
        logger.debug("searched_address_saved", address=address[:16] + "...")
        return stored
    except Exception as e:
        logger.exception("searched_address_save_failed", address=address[:16], error=str(e))
        raise


def get_searched_address(address: str) -> dict[str, Any] | None:
    address = (address or "").strip()
    if not address:
        return None
    with _session_scope() as session:
        row = session.get(SearchedAddress, address)
        return row.to_dict() if row else None


def list_searched_addresses() -> list[dict[str, Any]]:
    """All searched addresses, newest timestamp first."""
    try:
        with _session_scope() as session:
            rows = (
                session.query(SearchedAddress)
                .order_by(SearchedAddress.timestamp.desc())
                .all()
            )
            return [r.to_dict() for r in rows]
    except Exception as e:
        logger.exception("searched_addresses_list_failed", error=str(e))
        raise


def delete_searched_address(address: str) -> bool:
    """Delete one address. Returns False when it was not stored."""
    address = _normalize_address(address)
    with _session_scope() as session:
        deleted = (
            session.query(SearchedAddress)
            .filter(SearchedAddress.address == address)
            .delete(synchronize_session=False)
        )
    if deleted:
        logger.info("searched_address_deleted", address=address[:16] + "...")
    return bool(deleted)


def clear_searched_addresses() -> int:
    """Delete every row; returns how many were removed."""
    with _session_scope() as session:
        deleted = session.query(SearchedAddress).delete(synchronize_session=False)
    logger.info("searched_addresses_cleared", count=deleted)
    return int(deleted)


def reset_engine_for_test() -> None:
    """
    Clear cached engine and session factory. For tests only; use with a new SEARCHED_ADDRESSES_DB_PATH.
    """
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
