"""
Transfer interpretation for hydrated Sui transactions.

Sui transaction records do not label transfers, so counterparty and amount
are reconstructed by an ordered chain of resolver steps. Each step fills
only what earlier steps left unresolved (no counterparty, or amount 0):

1. balance deltas  - non-sender owner with the largest absolute delta
2. declared inputs - pure `address` / `u64` programmable-transaction inputs
3. gas residual    - sender's own delta minus a typical gas cost

The single-transaction detail view runs a transfer-event step first.
Results are display aids, not accounting.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Sequence

from backend_suiwallet.sui_client.models import (
    SUI_COIN_TYPE,
    UNKNOWN_ADDRESS,
    DisplayTransaction,
    HydratedTransaction,
    TransactionDetail,
    TransferInterpretation,
    to_int,
)

DEFAULT_GAS_ESTIMATE = 1_500_000

NATIVE_DECIMALS = 9
NATIVE_SYMBOL = "SUI"
STABLECOIN_MARKER = "usdc"
STABLECOIN_DECIMALS = 6
STABLECOIN_SYMBOL = "USDC"

DIRECTION_SENT = "Sent"
DIRECTION_RECEIVED = "Received"
DIRECTION_SELF = "Self"
DIRECTION_OTHER = "Other"

DEFAULT_FAILURE_MESSAGE = "Transaction failed"

_TRANSFER_EVENT_MARKERS = ("TransferEvent", "::coin::Transfer")


@dataclass
class Resolution:
    to: str | None = None
    amount_raw: int = 0
    asset_type: str | None = None

    @property
    def complete(self) -> bool:
        return self.to is not None and self.amount_raw != 0


ResolverStep = Callable[[HydratedTransaction, Resolution, int], None]


def _same_address(a: str | None, b: str | None) -> bool:
    return bool(a) and bool(b) and a.lower() == b.lower()


def resolve_from_transfer_events(tx: HydratedTransaction, res: Resolution, gas_estimate: int) -> None:
    """First coin transfer event: parsedJson.recipient / parsedJson.amount."""
    for event in tx.events:
        event_type = str(event.get("type") or "")
        if not any(marker in event_type for marker in _TRANSFER_EVENT_MARKERS):
            continue
        parsed = event.get("parsedJson") or {}
        if not isinstance(parsed, dict):
            continue
        recipient = parsed.get("recipient")
        if res.to is None and recipient:
            res.to = str(recipient)
        if res.amount_raw == 0:
            res.amount_raw = abs(to_int(parsed.get("amount")))
        return


def resolve_from_balance_deltas(tx: HydratedTransaction, res: Resolution, gas_estimate: int) -> None:
    """
    Non-sender owner with the largest absolute delta. Largest, not first:
    a small rebate entry can precede the real transfer.
    """
    candidates = [
        c for c in tx.balance_changes
        if c.owner and not _same_address(c.owner, tx.sender)
    ]
    if not candidates:
        return
    best = max(candidates, key=lambda c: abs(c.amount))
    if res.to is None:
        res.to = best.owner
    if res.amount_raw == 0:
        res.amount_raw = abs(best.amount)
    if res.asset_type is None:
        res.asset_type = best.coin_type


def resolve_from_declared_inputs(tx: HydratedTransaction, res: Resolution, gas_estimate: int) -> None:
    """Pure inputs typed `address` (counterparty) and `u64` (amount)."""
    pure = [i for i in tx.inputs if i.type == "pure"]
    if res.to is None:
        address_input = next((i for i in pure if i.value_type == "address" and i.value), None)
        if address_input is not None:
            res.to = str(address_input.value)
    if res.amount_raw == 0:
        amount_input = next((i for i in pure if i.value_type == "u64"), None)
        if amount_input is not None:
            res.amount_raw = abs(to_int(amount_input.value))


def resolve_from_gas_residual(tx: HydratedTransaction, res: Resolution, gas_estimate: int) -> None:
    """
    Sender's own delta. Failed tx: the whole debit is shown as the intended
    amount. Otherwise the excess over twice the gas estimate is treated as
    transferred value.
    """
    if res.amount_raw != 0:
        return
    sender_change = next(
        (c for c in tx.balance_changes if _same_address(c.owner, tx.sender)), None
    )
    if sender_change is None:
        return
    debit = abs(sender_change.amount)
    if tx.failed:
        res.amount_raw = debit
    elif debit > gas_estimate * 2:
        res.amount_raw = debit - gas_estimate
    else:
        return
    if res.asset_type is None:
        res.asset_type = sender_change.coin_type


DEFAULT_STEPS: tuple[ResolverStep, ...] = (
    resolve_from_balance_deltas,
    resolve_from_declared_inputs,
    resolve_from_gas_residual,
)

DETAIL_STEPS: tuple[ResolverStep, ...] = (resolve_from_transfer_events,) + DEFAULT_STEPS


def asset_display(asset_type: str | None) -> tuple[int, str]:
    """(decimals, symbol). Only SUI and the USDC family are known; anything else shows as SUI."""
    if asset_type and STABLECOIN_MARKER in asset_type.lower():
        return STABLECOIN_DECIMALS, STABLECOIN_SYMBOL
    return NATIVE_DECIMALS, NATIVE_SYMBOL


def format_amount(amount_raw: int, decimals: int) -> str:
    """Exact decimal shift of the raw integer, shown with six fractional digits."""
    return f"{Decimal(amount_raw).scaleb(-decimals):.6f}"


def format_datetime(timestamp_ms: int | None) -> str:
    if not timestamp_ms:
        return "N/A"
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def status_label(raw_status: str, error: str | None = None) -> tuple[str, str | None]:
    """Map ledger status to (display label, error message)."""
    if raw_status == "success":
        return "Confirmed", None
    if raw_status == "failure":
        return "Failed", error or DEFAULT_FAILURE_MESSAGE
    if not raw_status:
        return "Unknown", None
    return raw_status[:1].upper() + raw_status[1:], None


def infer_direction(tx: HydratedTransaction, address: str, counterparty: str | None) -> str:
    if _same_address(tx.sender, address) and _same_address(counterparty, address):
        return DIRECTION_SELF
    own = [c.amount for c in tx.balance_changes if _same_address(c.owner, address)]
    has_credit = any(a > 0 for a in own)
    has_debit = any(a < 0 for a in own)
    if has_debit and has_credit:
        return DIRECTION_SELF
    if has_credit:
        return DIRECTION_RECEIVED
    if has_debit:
        return DIRECTION_SENT
    if _same_address(tx.sender, address):
        return DIRECTION_SENT
    if _same_address(counterparty, address):
        return DIRECTION_RECEIVED
    return DIRECTION_OTHER


class TransferInterpreter:
    """Stateless; the same transaction and address always give the same result."""

    def __init__(
        self,
        gas_estimate: int = DEFAULT_GAS_ESTIMATE,
        steps: Sequence[ResolverStep] = DEFAULT_STEPS,
    ) -> None:
        if gas_estimate < 0:
            raise ValueError("gas_estimate must be non-negative")
        self.gas_estimate = gas_estimate
        self.steps = tuple(steps)

    def resolve(self, tx: HydratedTransaction, steps: Sequence[ResolverStep] | None = None) -> Resolution:
        res = Resolution()
        for step in steps if steps is not None else self.steps:
            if res.complete:
                break
            step(tx, res, self.gas_estimate)
        return res

    def interpret(self, tx: HydratedTransaction, address: str) -> TransferInterpretation:
        res = self.resolve(tx)
        return TransferInterpretation(
            to=res.to or UNKNOWN_ADDRESS,
            amount_raw=res.amount_raw,
            asset_type=res.asset_type or SUI_COIN_TYPE,
            direction=infer_direction(tx, address, res.to),
        )

    def to_display(self, tx: HydratedTransaction, address: str) -> DisplayTransaction:
        interp = self.interpret(tx, address)
        decimals, symbol = asset_display(interp.asset_type)
        status, error_message = status_label(tx.status, tx.error)
        return DisplayTransaction(
            digest=tx.digest,
            from_address=tx.sender,
            to=interp.to,
            amount=format_amount(interp.amount_raw, decimals),
            amount_raw=interp.amount_raw,
            asset_symbol=symbol,
            asset_type=interp.asset_type,
            timestamp_ms=tx.timestamp_ms or 0,
            formatted_datetime=format_datetime(tx.timestamp_ms),
            direction=interp.direction,
            status=status,
            raw_status=tx.status,
            error_message=error_message,
        )

    def to_detail(self, tx: HydratedTransaction) -> TransactionDetail:
        res = self.resolve(tx, DETAIL_STEPS)
        coin_type = res.asset_type or SUI_COIN_TYPE
        decimals, _ = asset_display(coin_type)
        status, error_message = status_label(tx.status, tx.error)
        gas_fee_raw = tx.gas_fee_raw
        return TransactionDetail(
            digest=tx.digest,
            sender=tx.sender,
            recipient=res.to or UNKNOWN_ADDRESS,
            amount=format_amount(res.amount_raw, decimals),
            amount_raw=res.amount_raw,
            coin_type=coin_type,
            status=status,
            raw_status=tx.status,
            timestamp_ms=tx.timestamp_ms,
            formatted_datetime=format_datetime(tx.timestamp_ms),
            gas_fee=format_amount(gas_fee_raw, NATIVE_DECIMALS),
            gas_fee_raw=gas_fee_raw,
            error_message=error_message,
            raw=tx.raw,
        )
