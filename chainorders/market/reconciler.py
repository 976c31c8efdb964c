"""
Order reconciler.

Derives the set of open sell orders from the created / cancelled / executed
event streams. Everything here is a pure function of its arguments: the
streams may arrive in any order, contain duplicates, and be replayed from
fixtures with identical results.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from ..utils.logger import EventType, get_logger
from .models import OrderCancelled, OrderCreated, OrderExecuted, SellOrder

logger = get_logger(__name__)

# Inconsistency kinds
MULTIPLE_TERMINAL_EVENTS = "multiple_terminal_events"
ORPHAN_TERMINAL_EVENT = "orphan_terminal_event"


@dataclass(frozen=True)
class ReconciliationInconsistency:
    """
    A history the log source should not produce in a settled chain.

    Transient cross-stream delivery lag or a reorganization can cause these,
    so they are recorded and the order excluded, never raised.
    """
    order_id: str
    kind: str
    detail: str = ""


@dataclass(frozen=True)
class ReconciliationReport:
    """Result of one reconciliation pass."""
    open_orders: FrozenSet[SellOrder]
    inconsistencies: Tuple[ReconciliationInconsistency, ...] = ()

    @property
    def open_order_ids(self) -> FrozenSet[str]:
        return frozenset(order.id for order in self.open_orders)


def _created_sort_key(event: OrderCreated) -> Tuple:
    # Position decides; remaining fields break exact ties deterministically
    return (
        event.block_number,
        event.log_index,
        event.transaction_hash or "",
        event.asset_id,
        event.price_in_wei,
        event.expires_at,
        event.seller,
        event.nft_address,
    )


def latest_creations(created: Iterable[OrderCreated]) -> Dict[str, OrderCreated]:
    """
    Collapse duplicate OrderCreated emissions.

    Returns:
        id -> the Created event with the greatest (block_number, log_index)
    """
    latest: Dict[str, OrderCreated] = {}
    for event in created:
        current = latest.get(event.id)
        if current is None or _created_sort_key(event) > _created_sort_key(current):
            latest[event.id] = event
    return latest


def reconcile(
    created: Iterable[OrderCreated],
    cancelled: Iterable[OrderCancelled],
    executed: Iterable[OrderExecuted],
    now_ms: int,
    apply_expiry_filter: bool = True
) -> ReconciliationReport:
    """
    Combine the three order event streams into the open-order set.

    Open = Created - Cancelled - Executed, optionally minus expired orders.

    Args:
        created: OrderCreated events, any order
        cancelled: OrderCancelled events, any order
        executed: OrderExecuted events, any order
        now_ms: Current time in milliseconds, compared with expires_at
        apply_expiry_filter: Drop orders with expires_at <= now_ms

    Returns:
        ReconciliationReport with open orders and recorded inconsistencies
    """
    creations = latest_creations(created)
    cancelled_ids: Set[str] = {event.id for event in cancelled}
    executed_ids: Set[str] = {event.id for event in executed}

    inconsistencies: List[ReconciliationInconsistency] = []

    for order_id in sorted(cancelled_ids & executed_ids):
        inconsistencies.append(ReconciliationInconsistency(
            order_id=order_id,
            kind=MULTIPLE_TERMINAL_EVENTS,
            detail="order both cancelled and executed"
        ))

    # Ids closed by both streams are already recorded above
    for order_id in sorted((cancelled_ids ^ executed_ids) - creations.keys()):
        inconsistencies.append(ReconciliationInconsistency(
            order_id=order_id,
            kind=ORPHAN_TERMINAL_EVENT,
            detail="terminal event without a matching creation"
        ))

    closed_ids = cancelled_ids | executed_ids
    open_orders = frozenset(
        event.to_sell_order()
        for order_id, event in creations.items()
        if order_id not in closed_ids
        and (not apply_expiry_filter or event.expires_at > now_ms)
    )

    return ReconciliationReport(
        open_orders=open_orders,
        inconsistencies=tuple(sorted(inconsistencies, key=lambda i: (i.order_id, i.kind)))
    )


def compute_open_orders(
    created: Iterable[OrderCreated],
    cancelled: Iterable[OrderCancelled],
    executed: Iterable[OrderExecuted],
    now_ms: int,
    apply_expiry_filter: bool = True
) -> FrozenSet[SellOrder]:
    """
    Compute the currently open sell orders.

    Same as reconcile(), but logs each inconsistency and returns only the
    order set.
    """
    report = reconcile(created, cancelled, executed, now_ms, apply_expiry_filter)

    for inconsistency in report.inconsistencies:
        logger.warning(
            "reconciliation_inconsistency",
            event_type=EventType.RECONCILIATION_INCONSISTENCY,
            order_id=inconsistency.order_id,
            kind=inconsistency.kind,
            detail=inconsistency.detail
        )

    return report.open_orders
