"""
Marketplace module.

Provides order models, reconciliation of order event streams into the
open-order set, and the marketplace contract wrapper.
"""

from .models import (
    OrderCancelled,
    OrderCreated,
    OrderEvent,
    OrderExecuted,
    SellOrder,
    normalize_order_id,
)
from .reconciler import (
    ReconciliationInconsistency,
    ReconciliationReport,
    compute_open_orders,
    reconcile,
)
from .marketplace import (
    ORDER_CANCELLED,
    ORDER_CREATED,
    ORDER_EXECUTED,
    Marketplace,
    OrderEventFilters,
    group_orders_by_collection,
)
from .open_orders import DecodeErrorPolicy, OpenOrderService

__all__ = [
    # Models
    "OrderCancelled",
    "OrderCreated",
    "OrderEvent",
    "OrderExecuted",
    "SellOrder",
    "normalize_order_id",

    # Reconciliation
    "ReconciliationInconsistency",
    "ReconciliationReport",
    "compute_open_orders",
    "reconcile",

    # Marketplace
    "ORDER_CANCELLED",
    "ORDER_CREATED",
    "ORDER_EXECUTED",
    "Marketplace",
    "OrderEventFilters",
    "group_orders_by_collection",

    # Service
    "DecodeErrorPolicy",
    "OpenOrderService",
]
