"""
Integration tests against a live JSON-RPC node.

These tests read config/config.json and expect a node at its rpc_url
(typically a local fork on localhost:8545). A ``wallet.private_key`` entry
enables the transaction tests.
Run with: pytest tests/integration/ -m integration
"""

import json
from pathlib import Path

import pytest

from chainorders.action.models import ActionStatus
from chainorders.action.tracker import ActionTracker
from chainorders.action.wallet import LocalAccountWallet
from chainorders.events.fetcher import LogFetcher
from chainorders.market.marketplace import OrderEventFilters
from chainorders.market.open_orders import OpenOrderService
from chainorders.node.network_config import NodeConfig
from chainorders.node.web3_gateway import Web3Gateway


CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.json"


@pytest.fixture(scope="module")
def raw_config():
    """Load node settings from the config file."""
    if not CONFIG_PATH.exists():
        pytest.skip("config.json not found")

    with open(CONFIG_PATH) as f:
        return json.load(f)


@pytest.fixture(scope="module")
def node_config(raw_config):
    return NodeConfig.from_dict(raw_config)


@pytest.fixture
async def gateway(node_config):
    """Create and connect a Web3Gateway."""
    gw = Web3Gateway(node_config)

    await gw.connect()
    yield gw
    await gw.disconnect()


@pytest.fixture
def wallet(raw_config):
    private_key = raw_config.get("wallet", {}).get("private_key")
    if not private_key:
        pytest.skip("No wallet.private_key in config")
    return LocalAccountWallet(private_key)


# ============================================================================
# Read Tests
# ============================================================================

@pytest.mark.integration
@pytest.mark.asyncio
async def test_connect_and_block_number(gateway):
    block_number = await gateway.get_block_number()

    assert block_number > 0
    assert gateway.is_connected


@pytest.mark.integration
@pytest.mark.asyncio
async def test_open_orders_snapshot(gateway, node_config):
    if not node_config.contracts.marketplace:
        pytest.skip("No contracts.marketplace in config")

    latest = await gateway.get_block_number()
    service = OpenOrderService(
        LogFetcher(gateway, max_block_span=node_config.max_block_span),
        OrderEventFilters.for_address(node_config.contracts.marketplace)
    )

    first = await service.get_open_orders(from_block=max(0, latest - 5000), to_block=latest)
    second = await service.get_open_orders(from_block=max(0, latest - 5000), to_block=latest)

    assert first == second


# ============================================================================
# Transaction Tests
# ============================================================================

@pytest.mark.integration
@pytest.mark.asyncio
async def test_self_transfer_confirms(gateway, wallet, node_config):
    """A zero-value transfer to self advances the account nonce."""
    chain_id = await gateway.get_chain_id()
    tracker = ActionTracker(gateway, wallet)

    action = await tracker.submit_and_wait({
        "to": wallet.address,
        "value": 0,
        "gas": 21000,
        "gasPrice": 2 * 10 ** 9,
        "chainId": chain_id
    })

    assert action.status == ActionStatus.CONFIRMED
    assert await gateway.get_transaction_count(wallet.address) > action.nonce_at_submission
