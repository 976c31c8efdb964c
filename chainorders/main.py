"""
Command-line entry point.

Prints the marketplace's open sell orders as JSON:

    python -m chainorders.main --config config/config.json --from-block 4000000
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from .events.fetcher import LogFetcher
from .market.marketplace import OrderEventFilters, group_orders_by_collection
from .market.open_orders import DecodeErrorPolicy, OpenOrderService
from .node.network_config import NodeConfig, load_node_config
from .node.web3_gateway import Web3Gateway
from .utils.logger import LOG_FORMATS, EventType, log_system_event, setup_logger


class OpenOrderSnapshot:
    """One-shot open order snapshot against a configured node."""

    def __init__(
        self,
        config: NodeConfig,
        log_level: str = "INFO",
        log_dir: str = "logs",
        log_format: str = "json"
    ):
        """
        Initialize the snapshot runner.

        Args:
            config: Node configuration value
            log_level: Logging level
            log_dir: Directory for log files
            log_format: "json" or "console"
        """
        if not config.contracts.marketplace:
            raise ValueError("Configuration has no contracts.marketplace address")

        self.config = config
        self.logger = setup_logger(
            log_level=log_level,
            log_dir=log_dir,
            log_format=log_format,
            service_name="chainorders"
        )
        self.gateway = Web3Gateway(config)

    async def run(
        self,
        from_block: int,
        to_block="latest",
        apply_expiry_filter: bool = True,
        strict: bool = False
    ) -> dict:
        log_system_event(
            self.logger,
            EventType.STARTUP,
            "Open order snapshot starting",
            network=self.config.network_type.value,
            marketplace=self.config.contracts.marketplace,
            from_block=from_block
        )

        await self.gateway.connect()
        try:
            service = OpenOrderService(
                LogFetcher(self.gateway, max_block_span=self.config.max_block_span),
                OrderEventFilters.for_address(self.config.contracts.marketplace),
                decode_error_policy=DecodeErrorPolicy.RAISE if strict else DecodeErrorPolicy.SKIP_AND_WARN,
                apply_expiry_filter=apply_expiry_filter
            )
            orders = await service.get_open_orders(from_block, to_block)
        finally:
            await self.gateway.disconnect()
            log_system_event(self.logger, EventType.SHUTDOWN, "Open order snapshot finished")

        groups = group_orders_by_collection(orders, self.config.contracts.collections)
        return {
            name: [order.to_dict() for order in group]
            for name, group in sorted(groups.items())
        }


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconstruct open marketplace sell orders from event logs"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.json",
        help="Path to configuration file"
    )
    parser.add_argument("--from-block", type=int, default=0, help="First block to scan")
    parser.add_argument("--to-block", type=int, default=None, help="Last block to scan (default: latest)")
    parser.add_argument(
        "--include-expired",
        action="store_true",
        help="Keep orders whose expiry has passed"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on undecodable logs instead of skipping them"
    )
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default="json")
    parser.add_argument("--log-dir", type=str, default="logs")
    return parser.parse_args(argv)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    snapshot = OpenOrderSnapshot(
        load_node_config(args.config),
        log_level=args.log_level,
        log_dir=args.log_dir,
        log_format=args.log_format
    )
    result = await snapshot.run(
        from_block=args.from_block,
        to_block=args.to_block if args.to_block is not None else "latest",
        apply_expiry_filter=not args.include_expired,
        strict=args.strict
    )

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
