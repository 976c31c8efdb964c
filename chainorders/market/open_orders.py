"""
Open Order Service.

Fetches the three order event streams of a marketplace concurrently and
reconciles them into the set of open sell orders.
"""

import asyncio
import time
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Tuple, Type, TypeVar

from ..events.decoder import decode
from ..events.fetcher import LogFetcher
from ..contracts.binding import EventFilter
from ..node.exceptions import DecodeError
from ..node.gateway import BlockIdentifier
from ..utils.logger import EventType, get_logger
from .marketplace import OrderEventFilters
from .models import OrderCancelled, OrderCreated, OrderExecuted, SellOrder
from .reconciler import ReconciliationReport, compute_open_orders, reconcile

logger = get_logger(__name__)

E = TypeVar("E", OrderCreated, OrderCancelled, OrderExecuted)
OrderStreams = Tuple[List[OrderCreated], List[OrderCancelled], List[OrderExecuted]]


class DecodeErrorPolicy(Enum):
    """What to do with a log that does not match its event signature."""
    SKIP_AND_WARN = "SKIP_AND_WARN"
    RAISE = "RAISE"


def _now_ms() -> int:
    return int(time.time() * 1000)


class OpenOrderService:
    """
    Derives open sell orders from marketplace event logs.

    Holds no state between calls: every query re-reads the logs for the
    requested range and reconciles from scratch.
    """

    def __init__(
        self,
        fetcher: LogFetcher,
        filters: OrderEventFilters,
        decode_error_policy: DecodeErrorPolicy = DecodeErrorPolicy.SKIP_AND_WARN,
        apply_expiry_filter: bool = True,
        clock: Callable[[], int] = _now_ms
    ):
        """
        Initialize Open Order Service.

        Args:
            fetcher: Log fetcher instance
            filters: Event filters of the marketplace to read
            decode_error_policy: Skip-and-warn (default) or raise on undecodable logs
            apply_expiry_filter: Default for excluding expired orders
            clock: Millisecond clock used when no ``now_ms`` is given
        """
        self.fetcher = fetcher
        self.filters = filters
        self.decode_error_policy = decode_error_policy
        self.apply_expiry_filter = apply_expiry_filter
        self.clock = clock

    async def fetch_stream(
        self,
        event_filter: EventFilter,
        event_type: Type[E],
        from_block: int,
        to_block: BlockIdentifier = "latest"
    ) -> List[E]:
        """
        Fetch and decode one event stream.

        Returns:
            Order events in (block_number, log_index) order

        Raises:
            DecodeError: If a log cannot be decoded and the policy is RAISE
            NetworkError: If the node is unreachable after retries
        """
        raw_logs = await self.fetcher.fetch_logs(
            event_filter.signature,
            from_block,
            to_block,
            address=event_filter.address
        )

        events: List[E] = []
        for raw_log in raw_logs:
            try:
                decoded = decode(raw_log, event_filter.signature)
                events.append(event_type.from_decoded(decoded))
            except (DecodeError, KeyError, TypeError, ValueError) as e:
                if self.decode_error_policy == DecodeErrorPolicy.RAISE:
                    if isinstance(e, DecodeError):
                        raise
                    raise DecodeError(f"{event_filter.signature.name}: {e}") from e

                logger.warning(
                    "Skipping undecodable log",
                    event_name=event_filter.signature.name,
                    block_number=raw_log.block_number,
                    log_index=raw_log.log_index,
                    transaction_hash=raw_log.transaction_hash,
                    error=str(e)
                )

        return events

    async def fetch_order_events(
        self,
        from_block: int,
        to_block: BlockIdentifier = "latest"
    ) -> OrderStreams:
        """Fetch the created, cancelled and executed streams concurrently."""
        created, cancelled, executed = await asyncio.gather(
            self.fetch_stream(self.filters.created, OrderCreated, from_block, to_block),
            self.fetch_stream(self.filters.cancelled, OrderCancelled, from_block, to_block),
            self.fetch_stream(self.filters.executed, OrderExecuted, from_block, to_block)
        )
        return created, cancelled, executed

    async def get_open_orders(
        self,
        from_block: int = 0,
        to_block: BlockIdentifier = "latest",
        now_ms: Optional[int] = None,
        apply_expiry_filter: Optional[bool] = None
    ) -> FrozenSet[SellOrder]:
        """
        Get the orders that are open as of ``to_block``.

        Args:
            from_block: First block to read events from (marketplace deployment)
            to_block: Last block to read events from
            now_ms: Time used for expiry (default: clock())
            apply_expiry_filter: Override the service default

        Returns:
            Frozen set of open SellOrder
        """
        created, cancelled, executed = await self.fetch_order_events(from_block, to_block)

        if now_ms is None:
            now_ms = self.clock()
        if apply_expiry_filter is None:
            apply_expiry_filter = self.apply_expiry_filter

        open_orders = compute_open_orders(created, cancelled, executed, now_ms, apply_expiry_filter)

        logger.info(
            "Open orders computed",
            event_type=EventType.OPEN_ORDERS_COMPUTED,
            from_block=from_block,
            to_block=to_block,
            created=len(created),
            cancelled=len(cancelled),
            executed=len(executed),
            open=len(open_orders)
        )
        return open_orders

    async def get_report(
        self,
        from_block: int = 0,
        to_block: BlockIdentifier = "latest",
        now_ms: Optional[int] = None,
        apply_expiry_filter: Optional[bool] = None
    ) -> ReconciliationReport:
        """Like get_open_orders(), but return the full report without logging inconsistencies."""
        created, cancelled, executed = await self.fetch_order_events(from_block, to_block)
        return reconcile(
            created,
            cancelled,
            executed,
            self.clock() if now_ms is None else now_ms,
            self.apply_expiry_filter if apply_expiry_filter is None else apply_expiry_filter
        )
