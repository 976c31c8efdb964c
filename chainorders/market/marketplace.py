"""
Marketplace contract wrapper.

Holds a ContractBinding by composition and exposes the marketplace's
order methods and event filters.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from eth_utils import to_checksum_address

from ..action.wallet import TransactionRequest
from ..contracts.binding import ContractBinding, EventFilter
from ..events.decoder import EventSignature
from .models import SellOrder, normalize_order_id

ORDER_CREATED = EventSignature.parse(
    "event OrderCreated(bytes32 id,uint256 indexed assetId,address indexed seller,"
    "address nftAddress,uint256 priceInWei,uint256 expiresAt)"
)
ORDER_CANCELLED = EventSignature.parse(
    "event OrderCancelled(bytes32 id,uint256 indexed assetId,address indexed seller,"
    "address nftAddress)"
)
ORDER_EXECUTED = EventSignature.parse(
    "event OrderSuccessful(bytes32 id,uint256 indexed assetId,address indexed seller,"
    "address nftAddress,uint256 totalPrice,address indexed buyer)"
)


@dataclass(frozen=True)
class OrderEventFilters:
    """The three order event streams of one marketplace."""
    created: EventFilter
    cancelled: EventFilter
    executed: EventFilter

    @classmethod
    def for_address(cls, address: Optional[str]) -> "OrderEventFilters":
        if address is not None:
            address = to_checksum_address(address)
        return cls(
            created=EventFilter(address, ORDER_CREATED),
            cancelled=EventFilter(address, ORDER_CANCELLED),
            executed=EventFilter(address, ORDER_EXECUTED)
        )


class Marketplace:
    """NFT marketplace where sellers list assets for an ERC20 price."""

    def __init__(self, binding: ContractBinding):
        self.binding = binding

    @property
    def address(self) -> str:
        return self.binding.address

    def event_filters(self) -> OrderEventFilters:
        return OrderEventFilters(
            created=self.binding.get_event_filter(ORDER_CREATED.name),
            cancelled=self.binding.get_event_filter(ORDER_CANCELLED.name),
            executed=self.binding.get_event_filter(ORDER_EXECUTED.name)
        )

    async def order_by_asset_id(self, nft_address: str, asset_id: int) -> Optional[SellOrder]:
        """
        Read the current listing for an asset from contract storage.

        Returns:
            SellOrder, or None if the asset is not listed
        """
        order_id, seller, listed_nft, price, expires_at = await self.binding.call(
            "orderByAssetId", to_checksum_address(nft_address), asset_id
        )
        if int(price) == 0:
            return None

        return SellOrder(
            id=normalize_order_id(order_id),
            asset_id=asset_id,
            seller=to_checksum_address(seller),
            nft_address=to_checksum_address(listed_nft),
            price_in_wei=int(price),
            expires_at=int(expires_at)
        )

    async def create_order(
        self,
        nft_address: str,
        asset_id: int,
        price_in_wei: int,
        expires_at: int,
        **tx_params
    ) -> TransactionRequest:
        return await self.binding.send(
            "createOrder", to_checksum_address(nft_address), asset_id, price_in_wei, expires_at,
            **tx_params
        )

    async def cancel_order(self, nft_address: str, asset_id: int, **tx_params) -> TransactionRequest:
        return await self.binding.send("cancelOrder", to_checksum_address(nft_address), asset_id, **tx_params)

    async def execute_order(
        self,
        nft_address: str,
        asset_id: int,
        price_in_wei: int,
        **tx_params
    ) -> TransactionRequest:
        return await self.binding.send(
            "executeOrder", to_checksum_address(nft_address), asset_id, price_in_wei, **tx_params
        )

    async def safe_execute_order(
        self,
        nft_address: str,
        asset_id: int,
        price_in_wei: int,
        fingerprint: bytes,
        **tx_params
    ) -> TransactionRequest:
        """Execute an order only if the asset fingerprint (estate contents) is unchanged."""
        return await self.binding.send(
            "safeExecuteOrder", to_checksum_address(nft_address), asset_id, price_in_wei, fingerprint,
            **tx_params
        )


def group_orders_by_collection(
    orders: Iterable[SellOrder],
    collections: Mapping[str, str]
) -> Dict[str, List[SellOrder]]:
    """
    Split orders by NFT collection.

    Args:
        orders: Sell orders
        collections: collection name -> contract address

    Returns:
        collection name -> orders sorted by id; orders from unknown
        collections are grouped under "other"
    """
    by_address = {to_checksum_address(address): name for name, address in collections.items()}

    groups: Dict[str, List[SellOrder]] = defaultdict(list)
    for order in sorted(orders, key=lambda o: o.id):
        groups[by_address.get(to_checksum_address(order.nft_address), "other")].append(order)

    return dict(groups)
