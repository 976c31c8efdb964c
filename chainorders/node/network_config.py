"""
Network-specific configuration for JSON-RPC nodes.

This module contains node settings such as:
- RPC endpoints
- Polling and confirmation timings
- Log query limits
- JSON-RPC error classification
"""

import json
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class NetworkType(Enum):
    """Known networks."""
    LOCAL_FORK = "local_fork"
    MAINNET = "mainnet"
    SEPOLIA = "sepolia"


@dataclass(frozen=True)
class ContractAddresses:
    """Deployed addresses of the marketplace and the contracts it trades."""
    marketplace: Optional[str] = None
    payment_token: Optional[str] = None        # ERC20 used to pay (MANA)
    collections: Dict[str, str] = field(default_factory=dict)   # name -> ERC721 address


@dataclass(frozen=True)
class NodeConfig:
    """
    Configuration for a JSON-RPC node connection.

    Instances are plain values: they are passed to constructors and never
    stored in module-level state.
    """
    network_type: NetworkType
    name: str

    # Endpoint
    rpc_url: str
    chain_id: Optional[int] = None
    request_timeout_s: float = 30.0

    # Polling
    polling_interval_ms: int = 250
    confirmation_timeout_ms: int = 60_000
    poll_jitter: float = 0.1         # +/- fraction applied to each poll sleep

    # Log queries
    max_block_span: Optional[int] = None   # pre-chunk eth_getLogs ranges wider than this

    # Deployed contracts
    contracts: ContractAddresses = field(default_factory=ContractAddresses)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeConfig":
        """
        Build a config from the ``node``/``contracts`` sections of a JSON file.

        A ``network`` key selects a registered network whose values are then
        overridden by any other keys present.

        Args:
            data: Parsed configuration mapping

        Returns:
            NodeConfig instance

        Raises:
            ValueError: If neither a known network nor an rpc_url is given, or
                the node section has unknown keys
        """
        node = dict(data.get("node", {}))
        contracts = data.get("contracts", {})

        settable = {f.name for f in fields(cls)} - {"network_type", "contracts"}
        unknown = set(node) - settable - {"network"}
        if unknown:
            raise ValueError(f"Unknown node settings: {', '.join(sorted(unknown))}")

        network = node.pop("network", None)
        if network is not None:
            base = get_network_config(NetworkType(network))
        elif "rpc_url" in node:
            base = cls(network_type=NetworkType.LOCAL_FORK, name="custom", rpc_url=node["rpc_url"])
        else:
            raise ValueError("Node configuration needs either 'network' or 'rpc_url'")

        addresses = ContractAddresses(
            marketplace=contracts.get("marketplace"),
            payment_token=contracts.get("payment_token"),
            collections=dict(contracts.get("collections", {}))
        )

        return replace(base, contracts=addresses, **node)


# ============================================================================
# LOCAL FORK CONFIGURATION
# ============================================================================

LOCAL_FORK_CONFIG = NodeConfig(
    network_type=NetworkType.LOCAL_FORK,
    name="Local fork",

    rpc_url="http://localhost:8545",

    # Forked chains mine instantly, poll fast
    polling_interval_ms=250,
    confirmation_timeout_ms=30_000,
)


# ============================================================================
# PUBLIC NETWORKS
# ============================================================================

MAINNET_CONFIG = NodeConfig(
    network_type=NetworkType.MAINNET,
    name="Ethereum mainnet",

    rpc_url="https://ethereum-rpc.publicnode.com",
    chain_id=1,

    # ~12s blocks
    polling_interval_ms=4000,
    confirmation_timeout_ms=300_000,

    # Public endpoints reject wide eth_getLogs ranges
    max_block_span=50_000,
)

SEPOLIA_CONFIG = NodeConfig(
    network_type=NetworkType.SEPOLIA,
    name="Sepolia testnet",

    rpc_url="https://ethereum-sepolia-rpc.publicnode.com",
    chain_id=11155111,

    polling_interval_ms=4000,
    confirmation_timeout_ms=300_000,

    max_block_span=50_000,
)


# ============================================================================
# NETWORK REGISTRY
# ============================================================================

NETWORK_CONFIGS: Dict[NetworkType, NodeConfig] = {
    NetworkType.LOCAL_FORK: LOCAL_FORK_CONFIG,
    NetworkType.MAINNET: MAINNET_CONFIG,
    NetworkType.SEPOLIA: SEPOLIA_CONFIG,
}


def get_network_config(network_type: NetworkType) -> NodeConfig:
    """
    Get configuration for a known network.

    Args:
        network_type: Type of network

    Returns:
        NodeConfig instance

    Raises:
        ValueError: If network is not registered
    """
    if network_type not in NETWORK_CONFIGS:
        raise ValueError(f"Unsupported network: {network_type}")

    return NETWORK_CONFIGS[network_type]


def load_node_config(path: str) -> NodeConfig:
    """
    Load a NodeConfig from a JSON configuration file.

    Args:
        path: Path to configuration file

    Returns:
        NodeConfig instance

    Raises:
        FileNotFoundError: If the file does not exist
    """
    config_file = Path(path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(config_file, 'r') as f:
        return NodeConfig.from_dict(json.load(f))


# ============================================================================
# JSON-RPC ERROR CLASSIFICATION
# ============================================================================

# Error codes that should trigger retry (transient)
TRANSIENT_RPC_CODES = {
    -32603,  # Internal error
    -32002,  # Resource unavailable
    429,     # Too many requests (HTTP status surfaced as code by some gateways)
}

TRANSIENT_RPC_MESSAGES = (
    "header not found",
    "rate limit",
    "too many requests",
    "timeout",
    "timed out",
    "temporarily unavailable",
)

# Messages used by node implementations and hosted providers when an
# eth_getLogs query spans too much
RANGE_LIMIT_MESSAGES = (
    "query returned more than",
    "block range",
    "range too large",
    "range is too large",
    "exceed maximum block range",
    "too many blocks",
    "log response size exceeded",
    "query timeout exceeded",
)


def is_range_limit_error(error_code: Optional[int], message: str) -> bool:
    """
    Check if an RPC error means the log query range must be narrowed.

    Args:
        error_code: JSON-RPC error code (may be None)
        message: Error message returned by the node

    Returns:
        True if the query should be split into smaller ranges
    """
    lowered = (message or "").lower()
    return any(pattern in lowered for pattern in RANGE_LIMIT_MESSAGES)


def is_transient_rpc_error(error_code: Optional[int], message: str) -> bool:
    """
    Check if an RPC error represents a transient (retryable) error.

    Args:
        error_code: JSON-RPC error code (may be None)
        message: Error message returned by the node

    Returns:
        True if error is transient and should be retried
    """
    if error_code in TRANSIENT_RPC_CODES:
        return True

    lowered = (message or "").lower()
    return any(pattern in lowered for pattern in TRANSIENT_RPC_MESSAGES)
