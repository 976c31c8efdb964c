"""
Contract bindings.

A binding is the capability set a contract wrapper needs: read-only calls,
building state-changing transactions, and event filters. Wrappers hold a
binding instead of extending a contract base class.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from eth_utils import to_checksum_address
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, Web3RPCError

from ..action.wallet import TransactionRequest, WalletProvider
from ..events.decoder import EventSignature
from ..node.exceptions import NodeRPCError, WalletError
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class EventFilter:
    """Topic filter for one event emitted by one contract."""
    address: Optional[str]
    signature: EventSignature

    @property
    def topics(self) -> List[Optional[str]]:
        return [self.signature.topic]


class ContractBinding(ABC):
    """Capability interface: {call, send, get_event_filter}."""

    @property
    @abstractmethod
    def address(self) -> str:
        pass

    @abstractmethod
    async def call(self, method: str, *args) -> Any:
        """
        Execute a read-only contract method (eth_call).

        Raises:
            NodeRPCError: If the call reverts or the node rejects it
        """
        pass

    @abstractmethod
    async def send(self, method: str, *args, **tx_params) -> TransactionRequest:
        """
        Build an unsigned transaction request for a state-changing method.

        The request is handed to ActionTracker.submit, which pins the nonce,
        signs and broadcasts it.

        Raises:
            WalletError: If the binding has no wallet to send from
        """
        pass

    @abstractmethod
    def get_event_filter(self, event_name: str) -> EventFilter:
        """
        Get the filter for an event declared in the contract ABI.

        Raises:
            KeyError: If the ABI declares no such event
        """
        pass


class Web3ContractBinding(ContractBinding):
    """ContractBinding backed by a web3 AsyncContract."""

    def __init__(
        self,
        w3: AsyncWeb3,
        address: str,
        abi: Sequence[Dict[str, Any]],
        wallet: Optional[WalletProvider] = None
    ):
        """
        Initialize binding.

        Args:
            w3: Connected AsyncWeb3 instance (Web3Gateway.w3)
            address: Contract address
            abi: Contract ABI
            wallet: Wallet whose address is used as ``from`` for send()
        """
        self._address = to_checksum_address(address)
        self.abi = list(abi)
        self.wallet = wallet
        self.contract = w3.eth.contract(address=self._address, abi=self.abi)
        self._events = {
            entry["name"]: EventSignature.from_abi(entry)
            for entry in self.abi
            if entry.get("type") == "event"
        }

    @property
    def address(self) -> str:
        return self._address

    def set_wallet(self, wallet: WalletProvider) -> None:
        self.wallet = wallet

    async def call(self, method: str, *args) -> Any:
        try:
            return await getattr(self.contract.functions, method)(*args).call()
        except (ContractLogicError, Web3RPCError) as e:
            logger.warning("Contract call failed", contract=self._address, method=method, error=str(e))
            raise NodeRPCError(f"{method} failed: {e}") from e

    async def send(self, method: str, *args, **tx_params) -> TransactionRequest:
        if self.wallet is None:
            raise WalletError(f"Cannot send {method}: no wallet set on binding")

        transaction = {"from": self.wallet.address, **tx_params}
        try:
            request = await getattr(self.contract.functions, method)(*args).build_transaction(transaction)
        except (ContractLogicError, Web3RPCError) as e:
            logger.warning("Transaction build failed", contract=self._address, method=method, error=str(e))
            raise NodeRPCError(f"{method} would fail: {e}") from e

        return dict(request)

    def get_event_filter(self, event_name: str) -> EventFilter:
        return EventFilter(address=self._address, signature=self._events[event_name])
