"""
FastAPI server: history, balance and transaction lookups over a Sui fullnode,
plus the searched-address list.

The lifespan opens one SuiRpcClient for the process and builds the
HistoryService on app.state; the searched-address table is created on startup.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend_suiwallet.api_server.history_routes import router as history_router
from backend_suiwallet.config import get_settings
from backend_suiwallet.config.env import mask_rpc_url
from backend_suiwallet.database import (
    clear_searched_addresses,
    delete_searched_address,
    get_searched_address,
    init_db as searched_addresses_init_db,
    list_searched_addresses,
    save_searched_address,
)
from backend_suiwallet.history import HistoryService
from backend_suiwallet.suiwallet_logging import get_logger
from backend_suiwallet.sui_client import SuiRpcClient

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class SearchedAddressModel(BaseModel):
    address: str
    balance: str
    formattedBalance: str
    timestamp: int = Field(..., description="Unix milliseconds of the last lookup")
    sourceInfo: dict[str, Any] | None = None


class SaveSearchedAddressRequest(BaseModel):
    """POST /searched-addresses body."""

    address: str = Field(..., min_length=3, max_length=128, description="Sui address (0x...)")
    balance: str = Field(..., description="Balance in SUI as shown to the user")
    timestamp: int | None = Field(None, description="Unix ms; defaults to now")
    sourceInfo: dict[str, Any] | None = Field(None, description="Where the address came from; kept when omitted")


class ClearSearchedAddressesResponse(BaseModel):
    deleted: int


# -----------------------------------------------------------------------------
# Lifespan: shared RPC client and history service
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    client = SuiRpcClient.from_settings(settings)
    app.state.history_service = HistoryService.from_settings(client, settings)
    logger.info("api_started", rpc_url=mask_rpc_url(settings.rpc_url))
    try:
        searched_addresses_init_db()
    except Exception as e:
        logger.warning("searched_addresses_init_skip", error=str(e))

    try:
        yield
    finally:
        await client.aclose()
        logger.info("api_stopped")


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Backend SuiWallet API",
    description="Sui address history, balances and transaction details.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(history_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}


@app.get("/searched-addresses", response_model=list[SearchedAddressModel])
def get_searched_addresses() -> list[dict[str, Any]]:
    """Previously searched addresses, newest first."""
    return list_searched_addresses()


@app.post("/searched-addresses", response_model=SearchedAddressModel)
def post_searched_address(body: SaveSearchedAddressRequest):
    """Upsert one searched address. 201 when new, 200 when updated."""
    address = body.address.strip()
    if not address:
        raise HTTPException(status_code=400, detail="address must be non-empty")
    existed = get_searched_address(address) is not None
    stored = save_searched_address(
        address,
        body.balance,
        timestamp=body.timestamp,
        source_info=body.sourceInfo,
    )
    return JSONResponse(
        status_code=200 if existed else 201,
        content=SearchedAddressModel.model_validate(stored).model_dump(),
    )


@app.delete("/searched-addresses/{address}")
def remove_searched_address(address: str) -> dict[str, Any]:
    try:
        deleted = delete_searched_address(address)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Address not found: {address[:16]}")
    return {"address": address.strip(), "deleted": True}


@app.delete("/searched-addresses", response_model=ClearSearchedAddressesResponse)
def remove_all_searched_addresses() -> ClearSearchedAddressesResponse:
    return ClearSearchedAddressesResponse(deleted=clear_searched_addresses())
