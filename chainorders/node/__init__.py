"""
Node gateway module for JSON-RPC access.
"""

from .gateway import NodeGateway, BlockIdentifier
from .web3_gateway import Web3Gateway
from .exceptions import (
    ChainError,
    NetworkError,
    TransientError,
    NodeRPCError,
    BlockRangeTooLargeError,
    DecodeError,
    WalletError,
    InvalidTransitionError,
    ActionError,
    ActionTimeout,
    ActionReverted
)
from .models import RawLog, TransactionReceipt
from .network_config import (
    NetworkType,
    NodeConfig,
    ContractAddresses,
    get_network_config,
    load_node_config,
    is_range_limit_error,
    is_transient_rpc_error
)

__all__ = [
    # Gateway interfaces
    "NodeGateway",
    "Web3Gateway",
    "BlockIdentifier",

    # Exceptions
    "ChainError",
    "NetworkError",
    "TransientError",
    "NodeRPCError",
    "BlockRangeTooLargeError",
    "DecodeError",
    "WalletError",
    "InvalidTransitionError",
    "ActionError",
    "ActionTimeout",
    "ActionReverted",

    # Data models
    "RawLog",
    "TransactionReceipt",

    # Network config
    "NetworkType",
    "NodeConfig",
    "ContractAddresses",
    "get_network_config",
    "load_node_config",
    "is_range_limit_error",
    "is_transient_rpc_error"
]
