"""
Unit tests for node configuration and JSON-RPC error classification.
"""

import json

import pytest

from chainorders.node.network_config import (
    LOCAL_FORK_CONFIG,
    MAINNET_CONFIG,
    NetworkType,
    NodeConfig,
    get_network_config,
    is_range_limit_error,
    is_transient_rpc_error,
    load_node_config,
)

from conftest import MARKETPLACE, NFT


@pytest.mark.unit
def test_local_fork_defaults():
    assert LOCAL_FORK_CONFIG.rpc_url == "http://localhost:8545"
    assert LOCAL_FORK_CONFIG.polling_interval_ms == 250
    assert LOCAL_FORK_CONFIG.max_block_span is None


@pytest.mark.unit
def test_get_network_config():
    assert get_network_config(NetworkType.MAINNET) is MAINNET_CONFIG
    assert MAINNET_CONFIG.chain_id == 1


@pytest.mark.unit
def test_from_dict_overrides_registered_network():
    config = NodeConfig.from_dict({
        "node": {"network": "mainnet", "rpc_url": "https://node.example:8545", "polling_interval_ms": 1000},
        "contracts": {"marketplace": MARKETPLACE, "collections": {"land": NFT}}
    })

    assert config.network_type == NetworkType.MAINNET
    assert config.rpc_url == "https://node.example:8545"
    assert config.polling_interval_ms == 1000
    assert config.chain_id == 1
    assert config.contracts.marketplace == MARKETPLACE
    assert config.contracts.collections == {"land": NFT}
    # Registered values are untouched
    assert MAINNET_CONFIG.polling_interval_ms == 4000


@pytest.mark.unit
def test_from_dict_custom_endpoint():
    config = NodeConfig.from_dict({"node": {"rpc_url": "http://10.0.0.5:8545", "chain_id": 1337}})

    assert config.name == "custom"
    assert config.chain_id == 1337
    assert config.contracts.marketplace is None


@pytest.mark.unit
def test_from_dict_requires_endpoint():
    with pytest.raises(ValueError):
        NodeConfig.from_dict({"node": {"polling_interval_ms": 100}})


@pytest.mark.unit
def test_from_dict_rejects_unknown_settings():
    """Settings nothing reads are refused rather than silently kept."""
    with pytest.raises(ValueError, match="event_timeout_ms"):
        NodeConfig.from_dict({"node": {"network": "local_fork", "event_timeout_ms": 2000}})


@pytest.mark.unit
def test_from_dict_rejects_unknown_network():
    with pytest.raises(ValueError):
        NodeConfig.from_dict({"node": {"network": "ropsten"}})


@pytest.mark.unit
def test_load_node_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "node": {"network": "local_fork"},
        "contracts": {"marketplace": MARKETPLACE}
    }))

    config = load_node_config(str(path))

    assert config.rpc_url == LOCAL_FORK_CONFIG.rpc_url
    assert config.contracts.marketplace == MARKETPLACE


@pytest.mark.unit
def test_load_node_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_node_config(str(tmp_path / "missing.json"))


# ============================================================================
# Error Classification Tests
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize("message", [
    "query returned more than 10000 results",
    "exceed maximum block range: 5000",
    "Log response size exceeded. You can make eth_getLogs requests with up to a 2K block range",
])
def test_range_limit_messages(message):
    assert is_range_limit_error(-32005, message)


@pytest.mark.unit
def test_transient_classification():
    assert is_transient_rpc_error(-32603, "internal error")
    assert is_transient_rpc_error(-32000, "header not found")
    assert is_transient_rpc_error(None, "Too Many Requests")
    assert not is_transient_rpc_error(-32000, "nonce too low")
    assert not is_transient_rpc_error(-32602, "invalid params")
