"""
Minimal ABI fragments for the marketplace and the tokens it trades.

Only the members used by the wrappers are declared.
"""

from typing import Any, Dict, List, Sequence, Tuple

Param = Tuple[str, str]                # (type, name)
EventParamSpec = Tuple[str, str, bool]  # (type, name, indexed)


def _params(params: Sequence[Param]) -> List[Dict[str, Any]]:
    return [{"type": type_, "name": name} for type_, name in params]


def function(
    name: str,
    inputs: Sequence[Param] = (),
    outputs: Sequence[Param] = (),
    mutability: str = "nonpayable"
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": _params(inputs),
        "outputs": _params(outputs),
        "stateMutability": mutability,
    }


def event(name: str, inputs: Sequence[EventParamSpec]) -> Dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [
            {"type": type_, "name": param_name, "indexed": indexed}
            for type_, param_name, indexed in inputs
        ],
    }


MARKETPLACE_ABI = [
    function("createOrder", [("address", "nftAddress"), ("uint256", "assetId"),
                             ("uint256", "priceInWei"), ("uint256", "expiresAt")]),
    function("cancelOrder", [("address", "nftAddress"), ("uint256", "assetId")]),
    function("executeOrder", [("address", "nftAddress"), ("uint256", "assetId"),
                              ("uint256", "price")]),
    function("safeExecuteOrder", [("address", "nftAddress"), ("uint256", "assetId"),
                                  ("uint256", "price"), ("bytes", "fingerprint")]),
    function(
        "orderByAssetId",
        [("address", "nftAddress"), ("uint256", "assetId")],
        [("bytes32", "id"), ("address", "seller"), ("address", "nftAddress"),
         ("uint256", "price"), ("uint256", "expiresAt")],
        mutability="view"
    ),
    event("OrderCreated", [
        ("bytes32", "id", False),
        ("uint256", "assetId", True),
        ("address", "seller", True),
        ("address", "nftAddress", False),
        ("uint256", "priceInWei", False),
        ("uint256", "expiresAt", False),
    ]),
    event("OrderCancelled", [
        ("bytes32", "id", False),
        ("uint256", "assetId", True),
        ("address", "seller", True),
        ("address", "nftAddress", False),
    ]),
    event("OrderSuccessful", [
        ("bytes32", "id", False),
        ("uint256", "assetId", True),
        ("address", "seller", True),
        ("address", "nftAddress", False),
        ("uint256", "totalPrice", False),
        ("address", "buyer", True),
    ]),
]

ERC20_ABI = [
    function("balanceOf", [("address", "owner")], [("uint256", "")], mutability="view"),
    function("allowance", [("address", "owner"), ("address", "spender")], [("uint256", "")],
             mutability="view"),
    function("approve", [("address", "spender"), ("uint256", "value")], [("bool", "")]),
    event("Approval", [("address", "owner", True), ("address", "spender", True),
                       ("uint256", "value", False)]),
    event("Transfer", [("address", "from", True), ("address", "to", True),
                       ("uint256", "value", False)]),
]

ERC721_ABI = [
    function("balanceOf", [("address", "owner")], [("uint256", "")], mutability="view"),
    function("ownerOf", [("uint256", "tokenId")], [("address", "")], mutability="view"),
    function("getApproved", [("uint256", "tokenId")], [("address", "")], mutability="view"),
    function("isApprovedForAll", [("address", "owner"), ("address", "operator")], [("bool", "")],
             mutability="view"),
    event("Transfer", [("address", "from", True), ("address", "to", True),
                       ("uint256", "tokenId", True)]),
]
