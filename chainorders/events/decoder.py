"""
Event log decoding.

Parses human-readable event declarations such as::

    event OrderCreated(bytes32 id,uint256 indexed assetId,address indexed seller,...)

and decodes RawLog records against them with eth_abi.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak, to_checksum_address, to_hex

from ..node.exceptions import DecodeError
from ..node.models import RawLog

_DECLARATION_RE = re.compile(r"^\s*(?:event\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*\((.*)\)\s*(anonymous)?\s*;?\s*$")
_STATIC_BASE_RE = re.compile(r"^(u?int\d*|address|bool|bytes([1-9]|[12][0-9]|3[0-2]))$")


@dataclass(frozen=True)
class EventParam:
    """One parameter of an event declaration."""
    type: str
    name: str
    indexed: bool = False

    @property
    def is_dynamic(self) -> bool:
        """Dynamic types (string, bytes, T[]) have no fixed 32-byte encoding."""
        return _STATIC_BASE_RE.match(self.type) is None


@dataclass(frozen=True)
class EventSignature:
    """
    Parsed event declaration.

    ``topic`` is keccak-256 of the canonical form ``Name(type1,type2,...)``
    and is what nodes store in topic0 for non-anonymous events.
    """
    name: str
    inputs: Tuple[EventParam, ...]
    anonymous: bool = False
    topic: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "topic", to_hex(keccak(text=self.canonical)))

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(p.type for p in self.inputs)})"

    @property
    def indexed_inputs(self) -> Tuple[EventParam, ...]:
        return tuple(p for p in self.inputs if p.indexed)

    @property
    def data_inputs(self) -> Tuple[EventParam, ...]:
        return tuple(p for p in self.inputs if not p.indexed)

    @property
    def expected_topic_count(self) -> int:
        return len(self.indexed_inputs) + (0 if self.anonymous else 1)

    @classmethod
    def parse(cls, declaration: str) -> "EventSignature":
        """
        Parse a human-readable event declaration.

        Raises:
            ValueError: If the declaration is malformed
        """
        match = _DECLARATION_RE.match(declaration)
        if not match:
            raise ValueError(f"Malformed event declaration: {declaration!r}")

        name, params, anonymous = match.groups()
        inputs: List[EventParam] = []
        for position, chunk in enumerate(p.strip() for p in params.split(",") if p.strip()):
            words = chunk.split()
            indexed = "indexed" in words[1:]
            rest = [w for w in words[1:] if w != "indexed"]
            param_name = rest[0] if rest else f"arg{position}"
            inputs.append(EventParam(type=_canonical_type(words[0]), name=param_name, indexed=indexed))

        return cls(name=name, inputs=tuple(inputs), anonymous=anonymous is not None)

    @classmethod
    def from_abi(cls, entry: Mapping[str, Any]) -> "EventSignature":
        """Build a signature from a JSON ABI event entry."""
        if entry.get("type") != "event":
            raise ValueError(f"ABI entry {entry.get('name')!r} is not an event")

        inputs = tuple(
            EventParam(
                type=_canonical_type(item["type"]),
                name=item.get("name") or f"arg{position}",
                indexed=bool(item.get("indexed", False))
            )
            for position, item in enumerate(entry.get("inputs", []))
        )
        return cls(name=entry["name"], inputs=inputs, anonymous=bool(entry.get("anonymous", False)))


def _canonical_type(type_name: str) -> str:
    # uint/int aliases hash as uint256/int256
    if type_name == "uint":
        return "uint256"
    if type_name == "int":
        return "int256"
    return type_name


@dataclass(frozen=True)
class DecodedEvent:
    """A log decoded against an EventSignature."""
    name: str
    args: Dict[str, Any]
    address: str
    block_number: int
    log_index: int
    transaction_hash: Optional[str] = None

    @property
    def position(self) -> Tuple[int, int]:
        return (self.block_number, self.log_index)


def decode(raw_log: RawLog, signature: EventSignature) -> DecodedEvent:
    """
    Decode a raw log against an event signature.

    Args:
        raw_log: Log record as returned by the node
        signature: Parsed event declaration

    Returns:
        DecodedEvent with one entry in ``args`` per declared parameter

    Raises:
        DecodeError: If topic0, topic count or data length do not match
    """
    topics = list(raw_log.topics)

    if len(topics) != signature.expected_topic_count:
        raise DecodeError(
            f"{signature.name}: expected {signature.expected_topic_count} topics, "
            f"got {len(topics)} (block {raw_log.block_number}, log {raw_log.log_index})"
        )

    if not signature.anonymous:
        topic0 = to_hex(topics.pop(0))
        if topic0 != signature.topic:
            raise DecodeError(f"{signature.name}: topic0 {topic0} does not match {signature.topic}")

    data_params = signature.data_inputs
    if not any(p.is_dynamic for p in data_params) and len(raw_log.data) != 32 * len(data_params):
        raise DecodeError(
            f"{signature.name}: expected {32 * len(data_params)} data bytes, "
            f"got {len(raw_log.data)} (block {raw_log.block_number}, log {raw_log.log_index})"
        )

    values: Dict[str, Any] = {}
    try:
        for param, topic in zip(signature.indexed_inputs, topics):
            if param.is_dynamic:
                # Only the hash of a dynamic indexed value is recorded
                values[param.name] = bytes(topic)
            else:
                values[param.name] = _normalize(param.type, abi_decode([param.type], topic)[0])

        decoded = abi_decode([p.type for p in data_params], raw_log.data) if data_params else ()
        for param, value in zip(data_params, decoded):
            values[param.name] = _normalize(param.type, value)
    except (DecodingError, ValueError, TypeError) as e:
        raise DecodeError(f"{signature.name}: {e}") from e

    # Keep declaration order
    args = {p.name: values[p.name] for p in signature.inputs}

    return DecodedEvent(
        name=signature.name,
        args=args,
        address=to_checksum_address(raw_log.address),
        block_number=raw_log.block_number,
        log_index=raw_log.log_index,
        transaction_hash=raw_log.transaction_hash
    )


def _normalize(type_name: str, value: Any) -> Any:
    if type_name == "address":
        return to_checksum_address(value)
    return value
