"""
Abstract base class for node gateway operations.

This module defines the interface for the JSON-RPC surface consumed by the
log fetcher and the action tracker.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from .models import RawLog, TransactionReceipt
from .network_config import NodeConfig

BlockIdentifier = Union[int, str]


class NodeGateway(ABC):
    """
    Abstract base class for Ethereum-compatible node access.

    All node implementations must inherit from this class and implement
    every abstract method.
    """

    def __init__(self, config: NodeConfig):
        """
        Initialize the node gateway.

        Args:
            config: Node configuration value
        """
        self.config = config
        self._is_connected = False

    # =========================================================================
    # Logs
    # =========================================================================

    @abstractmethod
    async def get_logs(
        self,
        topics: List[Optional[str]],
        from_block: BlockIdentifier,
        to_block: BlockIdentifier = "latest",
        address: Optional[str] = None
    ) -> List[RawLog]:
        """
        Get event logs matching a topic filter (eth_getLogs).

        Args:
            topics: Topic filter, topic0 first
            from_block: First block of the range (inclusive)
            to_block: Last block of the range (inclusive) or "latest"
            address: Emitting contract address (optional)

        Returns:
            List of RawLog in node order

        Raises:
            BlockRangeTooLargeError: If the node refuses the range
            NetworkError: If the node is unreachable or erroring
        """
        pass

    @abstractmethod
    async def get_block_number(self) -> int:
        """
        Get the number of the most recent block (eth_blockNumber).

        Raises:
            NetworkError: If the node is unreachable or erroring
        """
        pass

    # =========================================================================
    # Accounts & transactions
    # =========================================================================

    @abstractmethod
    async def get_transaction_count(
        self,
        address: str,
        block_identifier: BlockIdentifier = "latest"
    ) -> int:
        """
        Get the account nonce (eth_getTransactionCount).

        Args:
            address: Account address
            block_identifier: Block to read the nonce at

        Returns:
            Number of transactions sent from the account

        Raises:
            NetworkError: If the node is unreachable or erroring
        """
        pass

    @abstractmethod
    async def get_transaction_receipt(self, transaction_hash: str) -> Optional[TransactionReceipt]:
        """
        Get a transaction receipt (eth_getTransactionReceipt).

        Args:
            transaction_hash: 0x-prefixed transaction hash

        Returns:
            TransactionReceipt, or None if the transaction is not mined yet

        Raises:
            NetworkError: If the node is unreachable or erroring
        """
        pass

    @abstractmethod
    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        """
        Broadcast a signed transaction (eth_sendRawTransaction).

        Args:
            raw_transaction: Signed, RLP-encoded transaction

        Returns:
            0x-prefixed transaction hash

        Raises:
            NodeRPCError: If the node rejects the transaction
            NetworkError: If the node is unreachable or erroring
        """
        pass

    @abstractmethod
    async def get_chain_id(self) -> int:
        """Get the chain id (eth_chainId)."""
        pass

    # =========================================================================
    # Connection Management
    # =========================================================================

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the node.

        Raises:
            NetworkError: If connection fails
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the node."""
        pass

    @property
    def is_connected(self) -> bool:
        """Check if gateway is connected to the node."""
        return self._is_connected

    def describe(self) -> Dict[str, Any]:
        """Connection summary for logging."""
        return {
            "network": self.config.network_type.value,
            "rpc_url": self.config.rpc_url,
            "connected": self._is_connected
        }
