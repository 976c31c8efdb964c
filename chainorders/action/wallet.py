"""
Wallet providers.

A wallet exposes the submitting address and turns a transaction request into
a signed raw transaction. Key storage is the caller's concern.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from eth_account import Account

from ..node.exceptions import WalletError

TransactionRequest = Dict[str, Any]


class WalletProvider(ABC):
    """Signing collaborator used by the action tracker."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the submitting account."""
        pass

    @abstractmethod
    async def sign_transaction(self, request: TransactionRequest) -> bytes:
        """
        Sign a transaction request.

        Args:
            request: Transaction fields (to, data, value, gas, nonce, chainId, ...)

        Returns:
            Signed raw transaction bytes

        Raises:
            WalletError: If the request cannot be signed
        """
        pass


class LocalAccountWallet(WalletProvider):
    """Wallet backed by an in-memory private key (eth_account)."""

    def __init__(self, private_key: str):
        self._account = Account.from_key(private_key)

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_transaction(self, request: TransactionRequest) -> bytes:
        try:
            signed = self._account.sign_transaction(request)
        except (TypeError, ValueError, KeyError) as e:
            raise WalletError(f"Cannot sign transaction: {e}") from e
        return bytes(signed.raw_transaction)
