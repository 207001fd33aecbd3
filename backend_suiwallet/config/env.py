"""
Environment variable loading and validation for SuiWallet.

- SUI_NETWORK: mainnet | testnet | devnet (default: mainnet)
- SUI_RPC_URL: fullnode JSON-RPC endpoint (overrides SUI_NETWORK)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_suiwallet/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_RPC_URL = "https://fullnode.mainnet.sui.io:443"
TESTNET_RPC_URL = "https://fullnode.testnet.sui.io:443"
DEVNET_RPC_URL = "https://fullnode.devnet.sui.io:443"

_NETWORK_URLS = {
    "mainnet": MAINNET_RPC_URL,
    "testnet": TESTNET_RPC_URL,
    "devnet": DEVNET_RPC_URL,
}


def load_suiwallet_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set variables."""
    load_dotenv(_ENV_PATH, override=False)


def get_sui_network() -> str:
    """
    Return SUI_NETWORK from env: mainnet | testnet | devnet.
    Default: mainnet. Unknown values fall back to mainnet.
    """
    load_suiwallet_env()
    raw = (os.getenv("SUI_NETWORK") or "mainnet").strip().lower()
    return raw if raw in _NETWORK_URLS else "mainnet"


def get_sui_rpc_url() -> str:
    """
    Resolve Sui RPC URL from env.
    Order: SUI_RPC_URL > SUI_NETWORK public fullnode.
    """
    load_suiwallet_env()
    url = (os.getenv("SUI_RPC_URL") or "").strip()
    if url:
        return url
    return _NETWORK_URLS[get_sui_network()]


def env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    """Read an integer env var; missing, malformed or below minimum -> default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def env_float(name: str, default: float, *, minimum: float | None = None) -> float:
    """Read a float env var; missing, malformed or below minimum -> default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def mask_rpc_url(url: str) -> str:
    """Hide API keys embedded in provider URLs before logging."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url
