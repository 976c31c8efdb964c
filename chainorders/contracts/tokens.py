"""
Token contract wrappers.
"""

from eth_utils import to_checksum_address

from ..action.wallet import TransactionRequest
from .binding import ContractBinding


def addresses_are_equal(first: str, second: str) -> bool:
    """Compare two addresses regardless of checksum casing."""
    return to_checksum_address(first) == to_checksum_address(second)


class ERC20Token:
    """Fungible token (e.g. the marketplace payment token)."""

    def __init__(self, binding: ContractBinding):
        self.binding = binding

    @property
    def address(self) -> str:
        return self.binding.address

    async def balance_of(self, owner: str) -> int:
        return await self.binding.call("balanceOf", to_checksum_address(owner))

    async def allowance(self, owner: str, spender: str) -> int:
        return await self.binding.call(
            "allowance",
            to_checksum_address(owner),
            to_checksum_address(spender)
        )

    async def approve(self, spender: str, value: int, **tx_params) -> TransactionRequest:
        return await self.binding.send("approve", to_checksum_address(spender), value, **tx_params)


class ERC721Token:
    """Non-fungible token collection (e.g. land parcels, estates)."""

    def __init__(self, binding: ContractBinding):
        self.binding = binding

    @property
    def address(self) -> str:
        return self.binding.address

    async def balance_of(self, owner: str) -> int:
        return await self.binding.call("balanceOf", to_checksum_address(owner))

    async def owner_of(self, token_id: int) -> str:
        return await self.binding.call("ownerOf", token_id)

    async def get_approved(self, token_id: int) -> str:
        return await self.binding.call("getApproved", token_id)

    async def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return await self.binding.call(
            "isApprovedForAll",
            to_checksum_address(owner),
            to_checksum_address(operator)
        )

    async def can_transfer(self, owner: str, token_id: int, operator: str) -> bool:
        """True if ``operator`` may move ``token_id`` on behalf of ``owner``."""
        approved = await self.get_approved(token_id)
        if addresses_are_equal(approved, operator):
            return True
        return await self.is_approved_for_all(owner, operator)
