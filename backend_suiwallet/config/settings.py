"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and .env files.
- Provide defaults for optional settings; malformed values fall back to defaults.
- Expose typed settings (Sui RPC URL, history tuning, API host/port)
  for use across the history service, API server, and CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from backend_suiwallet.config.env import (
    env_float,
    env_int,
    get_sui_rpc_url,
    load_suiwallet_env,
)

# sui_multiGetTransactionBlocks and suix_queryTransactionBlocks both cap at 50 items
SUI_QUERY_MAX_LIMIT = 50
DEFAULT_PER_ROUND_LIMIT = 50
DEFAULT_MAX_ROUNDS = 10
DEFAULT_HYDRATION_BATCH_SIZE = 50
DEFAULT_BATCH_PAUSE_SEC = 0.1
# Typical gas for a plain SUI transfer, in MIST
DEFAULT_GAS_ESTIMATE = 1_500_000
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF_SEC = 0.5


@dataclass(frozen=True)
class Settings:
    """Resolved configuration; build with get_settings()."""

    rpc_url: str
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_backoff_sec: float = DEFAULT_RETRY_BACKOFF_SEC
    per_round_limit: int = DEFAULT_PER_ROUND_LIMIT
    max_rounds: int = DEFAULT_MAX_ROUNDS
    hydration_batch_size: int = DEFAULT_HYDRATION_BATCH_SIZE
    batch_pause_sec: float = DEFAULT_BATCH_PAUSE_SEC
    gas_estimate: int = DEFAULT_GAS_ESTIMATE
    api_host: str = "0.0.0.0"
    api_port: int = 8000


def get_settings() -> Settings:
    """
    Return the current application settings.

    Returns:
        Settings with rpc_url, request/retry tuning, history pagination and
        hydration tuning, and API host/port.
    """
    load_suiwallet_env()
    return Settings(
        rpc_url=get_sui_rpc_url(),
        request_timeout_sec=env_float("REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC, minimum=0.1),
        max_retries=env_int("RPC_MAX_RETRIES", DEFAULT_MAX_RETRIES, minimum=1),
        retry_backoff_sec=env_float("RPC_RETRY_BACKOFF_SEC", DEFAULT_RETRY_BACKOFF_SEC, minimum=0.0),
        per_round_limit=min(
            env_int("HISTORY_PER_ROUND_LIMIT", DEFAULT_PER_ROUND_LIMIT, minimum=1),
            SUI_QUERY_MAX_LIMIT,
        ),
        max_rounds=env_int("HISTORY_MAX_ROUNDS", DEFAULT_MAX_ROUNDS, minimum=1),
        hydration_batch_size=min(
            env_int("HISTORY_BATCH_SIZE", DEFAULT_HYDRATION_BATCH_SIZE, minimum=1),
            SUI_QUERY_MAX_LIMIT,
        ),
        batch_pause_sec=env_float("HISTORY_BATCH_PAUSE_SEC", DEFAULT_BATCH_PAUSE_SEC, minimum=0.0),
        gas_estimate=env_int("HISTORY_GAS_ESTIMATE", DEFAULT_GAS_ESTIMATE, minimum=0),
        api_host=(os.getenv("API_HOST") or "0.0.0.0").strip(),
        api_port=env_int("API_PORT", 8000, minimum=1),
    )
