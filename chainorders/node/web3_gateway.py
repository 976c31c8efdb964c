"""
web3.py node gateway implementation.

This module implements the NodeGateway interface on top of web3's async
HTTP provider, converting library responses to the package's normalized
models and library exceptions to the package's error taxonomy.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
from eth_utils import to_checksum_address, to_hex
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ProviderConnectionError, TransactionNotFound, Web3RPCError

from .exceptions import (
    BlockRangeTooLargeError,
    NetworkError,
    NodeRPCError,
    TransientError,
)
from .gateway import BlockIdentifier, NodeGateway
from .models import RawLog, TransactionReceipt
from .network_config import NodeConfig, is_range_limit_error, is_transient_rpc_error
from ..utils.logger import EventType, get_logger
from ..utils.retry import retry_on_transient_error


logger = get_logger(__name__)

# Failures below the JSON-RPC layer: connection refused, DNS, socket timeouts
TRANSPORT_ERRORS = (
    Web3RPCError,
    ProviderConnectionError,
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
)


class Web3Gateway(NodeGateway):
    """
    web3.py-backed implementation of NodeGateway.

    Read methods are retried on transient errors; send_raw_transaction is not,
    since rebroadcasting a signed transaction is the caller's decision.
    """

    def __init__(self, config: NodeConfig):
        """
        Initialize web3 gateway.

        Args:
            config: Node configuration value
        """
        super().__init__(config)

        self.w3: Optional[AsyncWeb3] = None

        logger.info(
            "Web3 gateway initialized",
            network=config.network_type.value,
            rpc_url=config.rpc_url
        )

    async def connect(self) -> None:
        """
        Create the async provider and verify connectivity.

        Raises:
            NetworkError: If the node cannot be reached or reports another chain
        """
        self.w3 = AsyncWeb3(AsyncHTTPProvider(
            self.config.rpc_url,
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=self.config.request_timeout_s)}
        ))

        if not await self.w3.is_connected():
            self.w3 = None
            logger.error("Failed to connect to node", rpc_url=self.config.rpc_url)
            raise NetworkError(f"Connection failed: {self.config.rpc_url}")

        chain_id = await self.get_chain_id()
        if self.config.chain_id is not None and chain_id != self.config.chain_id:
            self.w3 = None
            raise NetworkError(
                f"Node at {self.config.rpc_url} serves chain {chain_id}, "
                f"expected {self.config.chain_id}"
            )

        self._is_connected = True
        logger.info(
            "Connected to node",
            event_type=EventType.NODE_CONNECTED,
            rpc_url=self.config.rpc_url,
            chain_id=chain_id
        )

    async def disconnect(self) -> None:
        """Drop the provider."""
        if self.w3:
            self.w3 = None
            self._is_connected = False
            logger.info("Disconnected from node", event_type=EventType.NODE_DISCONNECTED, rpc_url=self.config.rpc_url)

    def _require_w3(self) -> AsyncWeb3:
        if self.w3 is None:
            raise NetworkError("Not connected to node")
        return self.w3

    # ========================================================================
    # Logs
    # ========================================================================

    @retry_on_transient_error(max_attempts=3, backoff_base=2)
    async def get_logs(
        self,
        topics: List[Optional[str]],
        from_block: BlockIdentifier,
        to_block: BlockIdentifier = "latest",
        address: Optional[str] = None
    ) -> List[RawLog]:
        params: Dict[str, Any] = {
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": topics
        }
        if address:
            params["address"] = to_checksum_address(address)

        w3 = self._require_w3()
        try:
            logs = await w3.eth.get_logs(params)
        except TRANSPORT_ERRORS as e:
            raise self._map_exception(e, "get_logs", from_block=from_block, to_block=to_block)

        return [RawLog.from_rpc(log) for log in logs]

    @retry_on_transient_error(max_attempts=3, backoff_base=2)
    async def get_block_number(self) -> int:
        w3 = self._require_w3()
        try:
            return await w3.eth.block_number
        except TRANSPORT_ERRORS as e:
            raise self._map_exception(e, "get_block_number")

    # ========================================================================
    # Accounts & transactions
    # ========================================================================

    @retry_on_transient_error(max_attempts=3, backoff_base=2)
    async def get_transaction_count(
        self,
        address: str,
        block_identifier: BlockIdentifier = "latest"
    ) -> int:
        w3 = self._require_w3()
        try:
            return await w3.eth.get_transaction_count(
                to_checksum_address(address),
                block_identifier
            )
        except TRANSPORT_ERRORS as e:
            raise self._map_exception(e, "get_transaction_count", address=address)

    @retry_on_transient_error(max_attempts=3, backoff_base=2)
    async def get_transaction_receipt(self, transaction_hash: str) -> Optional[TransactionReceipt]:
        w3 = self._require_w3()
        try:
            receipt = await w3.eth.get_transaction_receipt(transaction_hash)
        except TransactionNotFound:
            return None
        except TRANSPORT_ERRORS as e:
            raise self._map_exception(e, "get_transaction_receipt", transaction_hash=transaction_hash)

        if receipt is None:
            return None
        return TransactionReceipt.from_rpc(receipt)

    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        w3 = self._require_w3()
        try:
            tx_hash = await w3.eth.send_raw_transaction(raw_transaction)
        except TRANSPORT_ERRORS as e:
            raise self._map_exception(e, "send_raw_transaction")

        return to_hex(tx_hash)

    @retry_on_transient_error(max_attempts=3, backoff_base=2)
    async def get_chain_id(self) -> int:
        w3 = self._require_w3()
        try:
            return await w3.eth.chain_id
        except TRANSPORT_ERRORS as e:
            raise self._map_exception(e, "get_chain_id")

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def _map_exception(self, e: Exception, method: str, **context) -> NetworkError:
        """
        Map web3 / transport exceptions to package exceptions.

        Args:
            e: Exception raised by web3 or the HTTP transport
            method: Gateway method name, for logging

        Returns:
            Appropriate NetworkError subclass
        """
        if isinstance(e, Web3RPCError):
            rpc_response = getattr(e, "rpc_response", None) or {}
            error = rpc_response.get("error") or {}
            if not isinstance(error, dict):
                error = {"message": str(error)}
            code = error.get("code")
            message = error.get("message") or str(e)

            logger.warning(
                "Node RPC error",
                event_type=EventType.RPC_ERROR,
                method=method,
                code=code,
                error=message,
                **context
            )

            if is_range_limit_error(code, message):
                return BlockRangeTooLargeError(message, error_code=code)
            if is_transient_rpc_error(code, message):
                return TransientError(message, error_code=code)
            return NodeRPCError(message, error_code=code)

        logger.warning(
            "Node transport error",
            method=method,
            error=str(e),
            error_type=type(e).__name__,
            **context
        )
        return TransientError(f"Node unreachable: {e}")
