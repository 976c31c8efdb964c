"""
Unit tests for the order reconciler.
"""

import random

import pytest
from structlog.testing import capture_logs

from chainorders.market.models import OrderCancelled, OrderCreated, OrderExecuted, normalize_order_id
from chainorders.market.reconciler import (
    MULTIPLE_TERMINAL_EVENTS,
    ORPHAN_TERMINAL_EVENT,
    compute_open_orders,
    latest_creations,
    reconcile,
)

from conftest import BUYER, NFT, SELLER

NOW_MS = 1_700_000_000_000
FUTURE = NOW_MS + 86_400_000
PAST = NOW_MS - 86_400_000


def created(n, expires_at=FUTURE, price=100, block=1, log_index=0):
    return OrderCreated(
        id=normalize_order_id(n),
        asset_id=1000 + n,
        seller=SELLER,
        nft_address=NFT,
        block_number=block,
        log_index=log_index,
        price_in_wei=price,
        expires_at=expires_at
    )


def cancelled(n, block=2):
    return OrderCancelled(
        id=normalize_order_id(n),
        asset_id=1000 + n,
        seller=SELLER,
        nft_address=NFT,
        block_number=block
    )


def executed(n, block=2):
    return OrderExecuted(
        id=normalize_order_id(n),
        asset_id=1000 + n,
        seller=SELLER,
        nft_address=NFT,
        block_number=block,
        total_price=100,
        buyer=BUYER
    )


def ids(orders):
    return {order.id for order in orders}


# ============================================================================
# Examples
# ============================================================================

@pytest.mark.unit
def test_single_created_order_is_open():
    open_orders = compute_open_orders([created(1)], [], [], NOW_MS, True)

    assert ids(open_orders) == {normalize_order_id(1)}


@pytest.mark.unit
def test_cancelled_order_is_not_open():
    open_orders = compute_open_orders([created(1), created(2)], [cancelled(1)], [], NOW_MS, True)

    assert ids(open_orders) == {normalize_order_id(2)}


@pytest.mark.unit
def test_executed_order_is_not_open():
    open_orders = compute_open_orders([created(1), created(2)], [], [executed(2)], NOW_MS, True)

    assert ids(open_orders) == {normalize_order_id(1)}


@pytest.mark.unit
def test_expiry_filter_is_caller_configurable():
    """Expired orders are dropped only when filtering is enabled."""
    stream = [created(1, expires_at=PAST)]

    assert compute_open_orders(stream, [], [], NOW_MS, True) == frozenset()
    assert ids(compute_open_orders(stream, [], [], NOW_MS, False)) == {normalize_order_id(1)}


@pytest.mark.unit
def test_expiry_boundary_is_exclusive():
    """An order expiring exactly now is expired."""
    assert compute_open_orders([created(1, expires_at=NOW_MS)], [], [], NOW_MS, True) == frozenset()
    assert len(compute_open_orders([created(1, expires_at=NOW_MS + 1)], [], [], NOW_MS, True)) == 1


@pytest.mark.unit
def test_cancelled_and_executed_records_one_inconsistency():
    report = reconcile([created(1), created(2)], [cancelled(1)], [executed(1)], NOW_MS, True)

    assert ids(report.open_orders) == {normalize_order_id(2)}
    assert len(report.inconsistencies) == 1
    assert report.inconsistencies[0].order_id == normalize_order_id(1)
    assert report.inconsistencies[0].kind == MULTIPLE_TERMINAL_EVENTS


@pytest.mark.unit
def test_inconsistency_is_logged_once_not_raised():
    with capture_logs() as logs:
        open_orders = compute_open_orders([created(1)], [cancelled(1)], [executed(1)], NOW_MS, True)

    warnings = [entry for entry in logs if entry["event"] == "reconciliation_inconsistency"]
    assert open_orders == frozenset()
    assert len(warnings) == 1
    assert warnings[0]["log_level"] == "warning"
    assert warnings[0]["order_id"] == normalize_order_id(1)


@pytest.mark.unit
def test_cancelled_and_executed_without_creation_records_one_inconsistency():
    report = reconcile([], [cancelled(1)], [executed(1)], NOW_MS, True)

    assert report.open_orders == frozenset()
    assert [(i.order_id, i.kind) for i in report.inconsistencies] == [
        (normalize_order_id(1), MULTIPLE_TERMINAL_EVENTS)
    ]

    with capture_logs() as logs:
        compute_open_orders([], [cancelled(1)], [executed(1)], NOW_MS, True)

    assert len([entry for entry in logs if entry["event"] == "reconciliation_inconsistency"]) == 1


@pytest.mark.unit
def test_terminal_event_without_creation_is_recorded():
    """Cross-stream lag can deliver a cancellation before its creation."""
    report = reconcile([created(2)], [cancelled(1)], [], NOW_MS, True)

    assert ids(report.open_orders) == {normalize_order_id(2)}
    assert [(i.order_id, i.kind) for i in report.inconsistencies] == [
        (normalize_order_id(1), ORPHAN_TERMINAL_EVENT)
    ]


@pytest.mark.unit
def test_duplicate_terminal_events_of_same_kind_are_not_inconsistent():
    """Re-emitted cancellations still close the order once."""
    report = reconcile([created(1)], [cancelled(1, block=2), cancelled(1, block=3)], [], NOW_MS, True)

    assert report.open_orders == frozenset()
    assert report.inconsistencies == ()


# ============================================================================
# Duplicate creations
# ============================================================================

@pytest.mark.unit
def test_latest_duplicate_creation_wins():
    """The Created event with the greatest (block, log_index) sets the attributes."""
    early = created(1, price=100, block=5, log_index=9)
    late = created(1, price=250, block=6, log_index=0)

    for stream in ([early, late], [late, early]):
        open_orders = compute_open_orders(stream, [], [], NOW_MS, True)
        assert len(open_orders) == 1
        assert next(iter(open_orders)).price_in_wei == 250


@pytest.mark.unit
def test_duplicate_creation_uses_log_index_within_block():
    first = created(1, price=1, block=5, log_index=1)
    second = created(1, price=2, block=5, log_index=2)

    assert latest_creations([second, first])[normalize_order_id(1)].price_in_wei == 2


@pytest.mark.unit
def test_duplicate_creation_does_not_reopen_cancelled_order():
    stream = [created(1, block=1), created(1, block=10)]

    assert compute_open_orders(stream, [cancelled(1, block=5)], [], NOW_MS, True) == frozenset()


@pytest.mark.unit
def test_expiry_follows_winning_duplicate():
    """A re-emitted creation with a later expiry keeps the order open."""
    stream = [created(1, expires_at=PAST, block=1), created(1, expires_at=FUTURE, block=2)]

    assert len(compute_open_orders(stream, [], [], NOW_MS, True)) == 1


# ============================================================================
# Properties
# ============================================================================

def _random_history(rng, size=40):
    """Disjoint created / cancelled / executed id sets with distinct ids."""
    order_ids = list(range(1, size + 1))
    rng.shuffle(order_ids)
    created_events = [
        created(n, expires_at=rng.choice([PAST, FUTURE]), block=rng.randint(1, 50), log_index=rng.randint(0, 5))
        for n in order_ids
    ]
    closed = order_ids[: size // 2]
    cancelled_events = [cancelled(n) for n in closed[: size // 4]]
    executed_events = [executed(n) for n in closed[size // 4:]]
    return created_events, cancelled_events, executed_events


@pytest.mark.unit
@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
@pytest.mark.parametrize("apply_filter", [True, False])
def test_open_set_is_created_minus_closed(seed, apply_filter):
    rng = random.Random(seed)
    created_events, cancelled_events, executed_events = _random_history(rng)

    closed = ids(cancelled_events) | ids(executed_events)
    expected = {
        e.id for e in created_events
        if e.id not in closed and (not apply_filter or e.expires_at > NOW_MS)
    }

    result = compute_open_orders(created_events, cancelled_events, executed_events, NOW_MS, apply_filter)

    assert ids(result) == expected


@pytest.mark.unit
@pytest.mark.parametrize("seed", [7, 8, 9])
def test_result_is_independent_of_stream_order(seed):
    rng = random.Random(seed)
    created_events, cancelled_events, executed_events = _random_history(rng)
    # Add duplicates and an inconsistency so tie-breaking is exercised too
    created_events += [created(1, price=999, block=60), created(2, price=5, block=60, log_index=1)]
    cancelled_events += [cancelled(40)]
    executed_events += [executed(40)]

    baseline = reconcile(created_events, cancelled_events, executed_events, NOW_MS, True)

    for _ in range(5):
        shuffled = [list(s) for s in (created_events, cancelled_events, executed_events)]
        for stream in shuffled:
            rng.shuffle(stream)
        assert reconcile(*shuffled, NOW_MS, True) == baseline


@pytest.mark.unit
def test_repeated_calls_are_identical():
    created_events = [created(1), created(2)]

    first = compute_open_orders(created_events, [cancelled(2)], [], NOW_MS, True)
    second = compute_open_orders(created_events, [cancelled(2)], [], NOW_MS, True)

    assert first == second
    assert created_events == [created(1), created(2)]


@pytest.mark.unit
def test_accepts_generators():
    """Streams are consumed once; iterables other than lists work."""
    open_orders = compute_open_orders(
        (e for e in [created(1), created(2)]),
        (e for e in [cancelled(1)]),
        iter([]),
        NOW_MS,
        True
    )

    assert ids(open_orders) == {normalize_order_id(2)}
