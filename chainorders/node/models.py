"""
Normalized data models for node responses.

These models decouple the rest of the package from the shapes returned by
the web3 library (AttributeDict, HexBytes) so that fixtures can be written
with plain values.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from eth_utils import to_bytes, to_hex


def _as_bytes(value: Union[bytes, str]) -> bytes:
    """Convert HexBytes or a 0x-prefixed hex string to bytes."""
    if isinstance(value, str):
        return to_bytes(hexstr=value)
    return bytes(value)


def _as_hex(value: Union[bytes, str, None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.lower()
    return to_hex(value)


def _as_int(value: Union[int, str]) -> int:
    if isinstance(value, str):
        return int(value, 16)
    return int(value)


@dataclass(frozen=True)
class RawLog:
    """
    A single event log record as returned by eth_getLogs.

    Ordering key within a chain history is (block_number, log_index).
    """
    address: str
    topics: Tuple[bytes, ...]
    data: bytes
    block_number: int
    log_index: int
    transaction_hash: Optional[str] = None
    removed: bool = False

    @property
    def position(self) -> Tuple[int, int]:
        """Position of the log in the chain history."""
        return (self.block_number, self.log_index)

    @classmethod
    def from_rpc(cls, log: Mapping[str, Any]) -> "RawLog":
        """
        Build a RawLog from an eth_getLogs entry.

        Accepts both web3 AttributeDicts (HexBytes, ints) and raw JSON-RPC
        dicts (hex strings).
        """
        return cls(
            address=log["address"],
            topics=tuple(_as_bytes(topic) for topic in log.get("topics", [])),
            data=_as_bytes(log.get("data", b"")),
            block_number=_as_int(log["blockNumber"]),
            log_index=_as_int(log["logIndex"]),
            transaction_hash=_as_hex(log.get("transactionHash")),
            removed=bool(log.get("removed", False))
        )


@dataclass(frozen=True)
class TransactionReceipt:
    """Normalized transaction receipt."""
    transaction_hash: str
    block_number: int
    status: int                      # 1 = success, 0 = reverted
    gas_used: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, receipt: Mapping[str, Any]) -> "TransactionReceipt":
        gas_used = receipt.get("gasUsed")
        return cls(
            transaction_hash=_as_hex(receipt["transactionHash"]),
            block_number=_as_int(receipt["blockNumber"]),
            status=_as_int(receipt.get("status", 1)),
            gas_used=_as_int(gas_used) if gas_used is not None else None
        )
