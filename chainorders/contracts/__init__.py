"""
Contract bindings and wrappers.
"""

from .abi import ERC20_ABI, ERC721_ABI, MARKETPLACE_ABI
from .binding import ContractBinding, EventFilter, Web3ContractBinding
from .tokens import ERC20Token, ERC721Token, addresses_are_equal

__all__ = [
    "ERC20_ABI",
    "ERC721_ABI",
    "MARKETPLACE_ABI",
    "ContractBinding",
    "EventFilter",
    "Web3ContractBinding",
    "ERC20Token",
    "ERC721Token",
    "addresses_are_equal",
]
