"""
Main entrypoint: FastAPI server, or one-shot lookups printed as JSON.

    python main.py serve [--host 0.0.0.0] [--port 8000]
    python main.py history <address> [--page 1] [--page-size 10]
    python main.py balance <address> [--coin-type 0x2::sui::SUI]
    python main.py tx <digest> [--raw]

Env: SUI_RPC_URL or SUI_NETWORK, API_HOST, API_PORT, LOG_LEVEL, LOG_FORMAT,
HISTORY_* tuning (see backend_suiwallet.config.settings).

API-only: uvicorn backend_suiwallet.api_server.app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Any

# Configure structured JSON logging before other imports that may log
from backend_suiwallet.suiwallet_logging import get_logger

from backend_suiwallet.config import get_settings
from backend_suiwallet.core.exceptions import SuiWalletError
from backend_suiwallet.history import HistoryService
from backend_suiwallet.sui_client import SuiRpcClient
from backend_suiwallet.sui_client.models import SUI_COIN_TYPE

logger = get_logger("main")


async def _run_lookup(args: argparse.Namespace) -> dict[str, Any]:
    settings = get_settings()
    async with SuiRpcClient.from_settings(settings) as client:
        service = HistoryService.from_settings(client, settings)
        if args.command == "history":
            result = await service.fetch_history_page(
                args.address, page=args.page, page_size=args.page_size
            )
            return result.to_dict()
        if args.command == "balance":
            return (await service.get_balance(args.address, args.coin_type)).to_dict()
        detail = await service.get_transaction_detail(args.digest)
        return detail.to_dict(include_raw=args.raw)


def _serve(args: argparse.Namespace) -> None:
    import uvicorn

    from backend_suiwallet.api_server.app import app

    settings = get_settings()
    host = args.host or settings.api_host
    port = args.port or settings.api_port
    logger.info("main_server_starting", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sui address history and lookups")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    history = sub.add_parser("history", help="Print one page of transaction history")
    history.add_argument("address")
    history.add_argument("--page", type=int, default=1)
    history.add_argument("--page-size", type=int, default=10)

    balance = sub.add_parser("balance", help="Print the coin balance of an address")
    balance.add_argument("address")
    balance.add_argument("--coin-type", default=SUI_COIN_TYPE)

    tx = sub.add_parser("tx", help="Print details of one transaction")
    tx.add_argument("digest")
    tx.add_argument("--raw", action="store_true", help="Include the raw RPC record")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "serve":
        _serve(args)
        return 0
    if args.command == "history" and (args.page < 1 or args.page_size < 1):
        print("--page and --page-size must be >= 1", file=sys.stderr)
        return 2
    try:
        output = asyncio.run(_run_lookup(args))
    except (SuiWalletError, ValueError) as e:
        logger.error("main_lookup_failed", command=args.command, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
