"""
FastAPI router: GET /history/{address}, GET /balance/{address}, GET /transaction/{digest}.

All three delegate to the HistoryService held on app.state. History pages
never fail (partial data or an empty page); balance and transaction
lookups map RPC failures to 502 and unknown digests to 404.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict, Field

from backend_suiwallet.core.exceptions import (
    MalformedRecord,
    SuiRpcError,
    TransactionNotFound,
)
from backend_suiwallet.database import save_searched_address
from backend_suiwallet.history import HistoryService
from backend_suiwallet.suiwallet_logging import bind_address, get_logger
from backend_suiwallet.sui_client.models import SUI_COIN_TYPE

logger = get_logger(__name__)

router = APIRouter(tags=["history"])

MAX_PAGE_SIZE = 100


# -----------------------------------------------------------------------------
# Response models (camelCase keys, matching DisplayTransaction.to_dict)
# -----------------------------------------------------------------------------


class HistoryEntryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    digest: str
    from_: str = Field(..., alias="from", description="Sender address")
    to: str = Field(..., description="Resolved counterparty, or 'Unknown'")
    amount: str = Field(..., description="Amount in display units, six decimals")
    amountRaw: int
    assetSymbol: str
    assetType: str
    timestampMs: int
    formattedDatetime: str
    direction: str = Field(..., description="Sent | Received | Self | Other")
    status: str
    rawStatus: str
    errorMessage: str | None = None


class HistoryPageResponse(BaseModel):
    entries: list[HistoryEntryModel]
    hasNextPage: bool
    nextPageToken: str | None = None


class BalanceResponse(BaseModel):
    address: str
    coinType: str
    totalBalanceRaw: int
    balance: str
    symbol: str
    formattedBalance: str


class TransactionDetailResponse(BaseModel):
    digest: str
    sender: str
    recipient: str
    amount: str
    amountRaw: int
    coinType: str
    status: str
    rawStatus: str
    timestampMs: int | None = None
    formattedDatetime: str
    gasUsed: str
    gasUsedRaw: int
    errorMessage: str | None = None
    rawData: dict[str, Any] | None = None


def get_history_service(request: Request) -> HistoryService:
    """Dependency: service created in the app lifespan."""
    service = getattr(request.app.state, "history_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="history service not initialised")
    return service


@router.get("/history/{address}", response_model=HistoryPageResponse)
async def get_history(
    address: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    service: HistoryService = Depends(get_history_service),
) -> HistoryPageResponse:
    """One page of merged, newest-first history for address."""
    address = address.strip()
    if not address:
        raise HTTPException(status_code=400, detail="address must be non-empty")
    result = await service.fetch_history_page(address, page=page, page_size=page_size)
    return HistoryPageResponse.model_validate(result.to_dict())


@router.get("/balance/{address}", response_model=BalanceResponse)
async def get_balance(
    address: str,
    coin_type: str = Query(SUI_COIN_TYPE),
    save: bool = Query(False, description="Record the lookup in searched addresses"),
    service: HistoryService = Depends(get_history_service),
) -> BalanceResponse:
    try:
        result = await service.get_balance(address, coin_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SuiRpcError as e:
        bind_address(address).warning("balance_lookup_failed", error=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    if save:
        await run_in_threadpool(
            save_searched_address,
            result.address,
            result.balance,
            symbol=result.symbol,
        )
    return BalanceResponse.model_validate(result.to_dict())


@router.get("/transaction/{digest}", response_model=TransactionDetailResponse)
async def get_transaction(
    digest: str,
    include_raw: bool = Query(False),
    service: HistoryService = Depends(get_history_service),
) -> TransactionDetailResponse:
    try:
        detail = await service.get_transaction_detail(digest)
    except MalformedRecord as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransactionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SuiRpcError as e:
        logger.warning("transaction_lookup_failed", digest=digest, error=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    return TransactionDetailResponse.model_validate(detail.to_dict(include_raw=include_raw))
