"""
Data models for Sui RPC responses and history output.

Raw fullnode payloads are normalized into frozen dataclasses here so the
history pipeline never touches nested JSON directly. Amount fields from the
RPC arrive as decimal strings; they are parsed to int with safe defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from backend_suiwallet.core.exceptions import MalformedRecord

TransactionDigest = str
Cursor = str | None
TimestampIndex = dict[TransactionDigest, int]

UNKNOWN_ADDRESS = "Unknown"
SUI_COIN_TYPE = "0x2::sui::SUI"


class Direction(str, Enum):
    """Query direction: transactions sent by the address, or received by it."""

    OUTGOING = "from"
    INCOMING = "to"

    @property
    def rpc_filter_key(self) -> str:
        return "FromAddress" if self is Direction.OUTGOING else "ToAddress"


def to_int(value: Any, default: int = 0) -> int:
    """Parse RPC numeric strings/ints; anything unparseable -> default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def _optional_timestamp(value: Any) -> int | None:
    ts = to_int(value, default=0)
    return ts if ts > 0 else None


@dataclass(frozen=True)
class DirectionQueryResult:
    """One page of suix_queryTransactionBlocks for a single direction."""

    digests: list[TransactionDigest]
    next_cursor: Cursor
    has_next_page: bool
    timestamp_hints: TimestampIndex = field(default_factory=dict)

    @classmethod
    def from_rpc_result(cls, result: dict[str, Any] | None) -> "DirectionQueryResult":
        result = result or {}
        digests: list[str] = []
        hints: TimestampIndex = {}
        for item in result.get("data") or []:
            if not isinstance(item, dict) or not item.get("digest"):
                continue
            digest = str(item["digest"])
            digests.append(digest)
            ts = _optional_timestamp(item.get("timestampMs"))
            if ts is not None:
                hints[digest] = ts
        return cls(
            digests=digests,
            next_cursor=result.get("nextCursor") or None,
            has_next_page=bool(result.get("hasNextPage")),
            timestamp_hints=hints,
        )


@dataclass
class DirectionStreamState:
    """
    Pagination state for one direction stream.

    Mutated only by DualDirectionPaginator during a single collect() call.
    """

    direction: Direction
    cursor: Cursor = None
    has_more: bool = True
    collected_digests: list[TransactionDigest] = field(default_factory=list)


@dataclass(frozen=True)
class BalanceChange:
    """Signed change of one owner's balance in one coin type."""

    owner: str | None
    """AddressOwner; None for object, shared or immutable owners."""
    coin_type: str
    amount: int

    @classmethod
    def from_rpc(cls, item: dict[str, Any]) -> "BalanceChange":
        owner = item.get("owner")
        address = owner.get("AddressOwner") if isinstance(owner, dict) else None
        return cls(
            owner=str(address) if address else None,
            coin_type=str(item.get("coinType") or SUI_COIN_TYPE),
            amount=to_int(item.get("amount")),
        )


@dataclass(frozen=True)
class TransactionInput:
    """One programmable-transaction input (pure value or object reference)."""

    type: str
    value_type: str | None
    value: Any

    @classmethod
    def from_rpc(cls, item: dict[str, Any]) -> "TransactionInput":
        return cls(
            type=str(item.get("type") or ""),
            value_type=item.get("valueType"),
            value=item.get("value"),
        )


@dataclass(frozen=True)
class HydratedTransaction:
    """
    Full detail record for one digest, as returned by
    sui_getTransactionBlock / sui_multiGetTransactionBlocks.
    """

    digest: TransactionDigest
    sender: str
    inputs: tuple[TransactionInput, ...] = ()
    balance_changes: tuple[BalanceChange, ...] = ()
    events: tuple[dict[str, Any], ...] = ()
    status: str = "unknown"
    error: str | None = None
    gas_used: dict[str, Any] = field(default_factory=dict)
    timestamp_ms: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_rpc(cls, record: Any) -> "HydratedTransaction":
        """
        Build from a raw RPC record. Raises MalformedRecord when the record is
        not an object or has no digest; every other missing field defaults.
        """
        if not isinstance(record, dict):
            raise MalformedRecord(f"transaction record is not an object: {type(record).__name__}")
        digest = record.get("digest")
        if not digest:
            raise MalformedRecord("transaction record has no digest")

        data = (record.get("transaction") or {}).get("data") or {}
        kind = data.get("transaction") or {}
        effects = record.get("effects") or {}
        status_obj = effects.get("status") or {}

        inputs = tuple(
            TransactionInput.from_rpc(i) for i in (kind.get("inputs") or []) if isinstance(i, dict)
        )
        changes = tuple(
            BalanceChange.from_rpc(c) for c in (record.get("balanceChanges") or []) if isinstance(c, dict)
        )
        events = tuple(e for e in (record.get("events") or []) if isinstance(e, dict))
        error = status_obj.get("error") or status_obj.get("errorMessage")

        return cls(
            digest=str(digest),
            sender=str(data.get("sender") or UNKNOWN_ADDRESS),
            inputs=inputs,
            balance_changes=changes,
            events=events,
            status=str(status_obj.get("status") or "unknown"),
            error=str(error) if error else None,
            gas_used=dict(effects.get("gasUsed") or {}),
            timestamp_ms=_optional_timestamp(record.get("timestampMs")),
            raw=record,
        )

    @property
    def failed(self) -> bool:
        return self.status == "failure"

    @property
    def gas_fee_raw(self) -> int:
        """computationCost + storageCost - storageRebate, in MIST."""
        g = self.gas_used
        return (
            to_int(g.get("computationCost"))
            + to_int(g.get("storageCost"))
            - to_int(g.get("storageRebate"))
        )

    def with_timestamp(self, timestamp_ms: int) -> "HydratedTransaction":
        return replace(self, timestamp_ms=timestamp_ms)


@dataclass(frozen=True)
class TransferInterpretation:
    """Best-effort transfer reading of one transaction from one address's viewpoint."""

    to: str
    amount_raw: int
    asset_type: str
    direction: str


@dataclass(frozen=True)
class DisplayTransaction:
    """Display-ready history entry."""

    digest: TransactionDigest
    from_address: str
    to: str
    amount: str
    amount_raw: int
    asset_symbol: str
    asset_type: str
    timestamp_ms: int
    formatted_datetime: str
    direction: str
    status: str
    raw_status: str
    error_message: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "digest": self.digest,
            "from": self.from_address,
            "to": self.to,
            "amount": self.amount,
            "amountRaw": self.amount_raw,
            "assetSymbol": self.asset_symbol,
            "assetType": self.asset_type,
            "timestampMs": self.timestamp_ms,
            "formattedDatetime": self.formatted_datetime,
            "direction": self.direction,
            "status": self.status,
            "rawStatus": self.raw_status,
            "errorMessage": self.error_message,
        }


@dataclass(frozen=True)
class PageResult:
    """One page of history: the unit returned to callers."""

    entries: list[DisplayTransaction]
    has_next_page: bool
    next_page_token: str | None = None

    @classmethod
    def empty(cls) -> "PageResult":
        return cls(entries=[], has_next_page=False, next_page_token=None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "hasNextPage": self.has_next_page,
            "nextPageToken": self.next_page_token,
        }


@dataclass(frozen=True)
class TransactionDetail:
    """Single-transaction view with gas fee, for the detail lookup."""

    digest: TransactionDigest
    sender: str
    recipient: str
    amount: str
    amount_raw: int
    coin_type: str
    status: str
    raw_status: str
    timestamp_ms: int | None
    formatted_datetime: str
    gas_fee: str
    gas_fee_raw: int
    error_message: str | None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def to_dict(self, *, include_raw: bool = False) -> dict[str, Any]:
        out: dict[str, Any] = {
            "digest": self.digest,
            "sender": self.sender,
            "recipient": self.recipient,
            "amount": self.amount,
            "amountRaw": self.amount_raw,
            "coinType": self.coin_type,
            "status": self.status,
            "rawStatus": self.raw_status,
            "timestampMs": self.timestamp_ms,
            "formattedDatetime": self.formatted_datetime,
            "gasUsed": self.gas_fee,
            "gasUsedRaw": self.gas_fee_raw,
            "errorMessage": self.error_message,
        }
        if include_raw:
            out["rawData"] = self.raw
        return out


@dataclass(frozen=True)
class BalanceResult:
    """suix_getBalance result for one address and coin type."""

    address: str
    coin_type: str
    total_balance_raw: int
    balance: str
    symbol: str

    @property
    def formatted_balance(self) -> str:
        return f"{self.balance} {self.symbol}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "coinType": self.coin_type,
            "totalBalanceRaw": self.total_balance_raw,
            "balance": self.balance,
            "symbol": self.symbol,
            "formattedBalance": self.formatted_balance,
        }
