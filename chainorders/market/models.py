"""
Marketplace order and order-event models.

All values are immutable; the same event list can be reconciled any number
of times.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from eth_utils import to_checksum_address, to_hex

from ..events.decoder import DecodedEvent


def normalize_order_id(order_id: Union[bytes, str, int]) -> str:
    """Render an order id as a 0x-prefixed 32-byte hex string."""
    if isinstance(order_id, int):
        return "0x" + order_id.to_bytes(32, "big").hex()
    if isinstance(order_id, str):
        return to_hex(hexstr=order_id).lower()
    return to_hex(order_id)


@dataclass(frozen=True)
class SellOrder:
    """An order listing: open until cancelled, executed or expired."""
    id: str
    asset_id: int
    seller: str
    nft_address: str
    price_in_wei: int
    expires_at: int                  # milliseconds since epoch

    def is_expired(self, now_ms: int) -> bool:
        return self.expires_at <= now_ms

    def to_dict(self) -> Dict[str, Any]:
        # Integers as strings: wei amounts and token ids exceed JSON number precision
        return {
            "id": self.id,
            "asset_id": str(self.asset_id),
            "seller": self.seller,
            "nft_address": self.nft_address,
            "price_in_wei": str(self.price_in_wei),
            "expires_at": self.expires_at,
        }


@dataclass(frozen=True)
class OrderEventBase:
    """Fields common to every marketplace order event."""
    id: str
    asset_id: int
    seller: str
    nft_address: str
    block_number: int = 0
    log_index: int = 0
    transaction_hash: Optional[str] = None

    @property
    def position(self) -> Tuple[int, int]:
        return (self.block_number, self.log_index)

    @staticmethod
    def _common(event: DecodedEvent) -> Dict[str, Any]:
        args = event.args
        return {
            "id": normalize_order_id(args["id"]),
            "asset_id": int(args["assetId"]),
            "seller": to_checksum_address(args["seller"]),
            "nft_address": to_checksum_address(args["nftAddress"]),
            "block_number": event.block_number,
            "log_index": event.log_index,
            "transaction_hash": event.transaction_hash,
        }


@dataclass(frozen=True)
class OrderCreated(OrderEventBase):
    price_in_wei: int = 0
    expires_at: int = 0

    def to_sell_order(self) -> SellOrder:
        return SellOrder(
            id=self.id,
            asset_id=self.asset_id,
            seller=self.seller,
            nft_address=self.nft_address,
            price_in_wei=self.price_in_wei,
            expires_at=self.expires_at
        )

    @classmethod
    def from_decoded(cls, event: DecodedEvent) -> "OrderCreated":
        return cls(
            price_in_wei=int(event.args["priceInWei"]),
            expires_at=int(event.args["expiresAt"]),
            **cls._common(event)
        )


@dataclass(frozen=True)
class OrderCancelled(OrderEventBase):

    @classmethod
    def from_decoded(cls, event: DecodedEvent) -> "OrderCancelled":
        return cls(**cls._common(event))


@dataclass(frozen=True)
class OrderExecuted(OrderEventBase):
    total_price: int = 0
    buyer: Optional[str] = None

    @classmethod
    def from_decoded(cls, event: DecodedEvent) -> "OrderExecuted":
        return cls(
            total_price=int(event.args["totalPrice"]),
            buyer=to_checksum_address(event.args["buyer"]),
            **cls._common(event)
        )


OrderEvent = Union[OrderCreated, OrderCancelled, OrderExecuted]
