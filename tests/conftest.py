"""
Shared test fixtures.

Logs are built by ABI-encoding values against an EventSignature, the same
way a node would return them.
"""

from typing import Any, Dict, Optional

import pytest
from eth_abi import encode
from eth_utils import to_bytes

from chainorders.events.decoder import EventSignature
from chainorders.node.models import RawLog

MARKETPLACE = "0x4444444444444444444444444444444444444444"
SELLER = "0x1111111111111111111111111111111111111111"
NFT = "0x2222222222222222222222222222222222222222"
BUYER = "0x3333333333333333333333333333333333333333"


def order_id(n: int) -> bytes:
    return n.to_bytes(32, "big")


def build_raw_log(
    signature: EventSignature,
    values: Dict[str, Any],
    block_number: int = 1,
    log_index: int = 0,
    address: str = MARKETPLACE,
    transaction_hash: Optional[str] = None
) -> RawLog:
    """Encode ``values`` into a RawLog for ``signature``."""
    topics = [to_bytes(hexstr=signature.topic)]
    for param in signature.indexed_inputs:
        topics.append(encode([param.type], [values[param.name]]))

    data_params = signature.data_inputs
    data = encode([p.type for p in data_params], [values[p.name] for p in data_params])

    return RawLog(
        address=address,
        topics=tuple(topics),
        data=data,
        block_number=block_number,
        log_index=log_index,
        transaction_hash=transaction_hash or "0x" + f"{block_number:032x}{log_index:032x}"
    )


def created_values(n: int, price: int = 10 ** 18, expires_at: int = 2_000_000_000_000, asset_id: int = None):
    return {
        "id": order_id(n),
        "assetId": asset_id if asset_id is not None else 1000 + n,
        "seller": SELLER,
        "nftAddress": NFT,
        "priceInWei": price,
        "expiresAt": expires_at,
    }


def cancelled_values(n: int):
    return {"id": order_id(n), "assetId": 1000 + n, "seller": SELLER, "nftAddress": NFT}


def executed_values(n: int, total_price: int = 10 ** 18):
    return {
        "id": order_id(n),
        "assetId": 1000 + n,
        "seller": SELLER,
        "nftAddress": NFT,
        "totalPrice": total_price,
        "buyer": BUYER,
    }


@pytest.fixture
def raw_log_factory():
    """Factory building RawLog records for a signature."""
    return build_raw_log
