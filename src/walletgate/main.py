"""Command-line entry point.

Usage:
    walletgate host [--set URL]
    walletgate routes [--refresh]
    walletgate chains
    walletgate check-origin ADDRESS ORIGIN
    walletgate gas CHAIN_ID [--custom-price WEI]
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from walletgate.config import get_settings
from walletgate.errors import is_service_unavailable
from walletgate.gateway.service import Gateway
from walletgate.store.database import close_db, init_db

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="walletgate", description="Wallet gateway to the risk/analysis backend"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    host = commands.add_parser("host", help="Show or change the backend host")
    host.add_argument("--set", dest="new_host", help="New backend host URL")

    routes = commands.add_parser("routes", help="Show the route table")
    routes.add_argument(
        "--refresh", action="store_true", help="Reload routes from the backend first"
    )

    commands.add_parser("chains", help="List supported chains")

    origin = commands.add_parser("check-origin", help="Security check for a dapp origin")
    origin.add_argument("address", help="Wallet address")
    origin.add_argument("origin", help="Dapp origin, e.g. https://app.example")

    gas = commands.add_parser("gas", help="Show gas market levels")
    gas.add_argument("chain_id", help="Backend chain id (eth, bsc, ...)")
    gas.add_argument("--custom-price", type=int, default=None, help="Custom gas price in wei")

    return parser


def _dump(value: Any) -> None:
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json")
    elif isinstance(value, list):
        value = [v.model_dump(mode="json") if hasattr(v, "model_dump") else v for v in value]
    print(json.dumps(value, indent=2, default=str))


async def run(args: argparse.Namespace) -> int:
    await init_db()
    try:
        async with Gateway() as gateway:
            if args.command == "host":
                if args.new_host:
                    await gateway.set_host(args.new_host)
                print(gateway.get_host())
            elif args.command == "routes":
                if args.refresh and not await gateway.refresh():
                    logger.warning("Refresh failed, showing stored routes")
                _dump(gateway.config.routes.to_wire())
            elif args.command == "chains":
                _dump(await gateway.operations.get_supported_chains())
            elif args.command == "check-origin":
                _dump(await gateway.operations.check_origin(args.address, args.origin))
            elif args.command == "gas":
                _dump(await gateway.operations.gas_market(args.chain_id, args.custom_price))
    except Exception as e:
        if is_service_unavailable(e):
            logger.error(f"Service unavailable: {e}")
            return 2
        raise
    finally:
        await close_db()
    return 0


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.debug(f"Settings: {settings.get_safe_dict()}")
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
