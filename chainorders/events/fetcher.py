"""
Event log fetching with transparent range splitting.
"""

from typing import List, Optional, Tuple

from ..node.exceptions import BlockRangeTooLargeError
from ..node.gateway import BlockIdentifier, NodeGateway
from ..node.models import RawLog
from ..utils.logger import get_logger
from .decoder import EventSignature

logger = get_logger(__name__)


class LogFetcher:
    """
    Retrieves raw logs for one event signature over a block range.

    Responsibilities:
    - Derive the topic filter from the event signature
    - Split ranges the node refuses as too large, and pre-chunk ranges wider
      than ``max_block_span`` when one is configured
    - Return logs in ascending (block_number, log_index) order

    Retries of transient node errors happen in the gateway; anything the
    gateway gives up on propagates as NetworkError.
    """

    def __init__(self, gateway: NodeGateway, max_block_span: Optional[int] = None):
        """
        Initialize Log Fetcher.

        Args:
            gateway: Node gateway instance
            max_block_span: Widest range sent in a single eth_getLogs call
        """
        self.gateway = gateway
        self.max_block_span = max_block_span

    async def fetch_logs(
        self,
        event_signature: EventSignature,
        from_block: int,
        to_block: BlockIdentifier = "latest",
        address: Optional[str] = None
    ) -> List[RawLog]:
        """
        Fetch every log matching the event signature in [from_block, to_block].

        Args:
            event_signature: Event to filter on (topic0)
            from_block: First block (inclusive)
            to_block: Last block (inclusive) or "latest"
            address: Emitting contract address (optional)

        Returns:
            Logs sorted by (block_number, log_index)

        Raises:
            BlockRangeTooLargeError: If a single block still exceeds the node limit
            NetworkError: If the node is unreachable after retries
        """
        topics = [event_signature.topic]

        if self.max_block_span is not None:
            if not isinstance(to_block, int):
                to_block = await self.gateway.get_block_number()
            ranges = _chunk(from_block, to_block, self.max_block_span)
        else:
            ranges = [(from_block, to_block)]

        logs: List[RawLog] = []
        for start, end in ranges:
            logs.extend(await self._fetch_range(topics, start, end, address))

        logs.sort(key=lambda log: log.position)

        logger.debug(
            "Fetched logs",
            event_name=event_signature.name,
            from_block=from_block,
            to_block=to_block,
            count=len(logs)
        )
        return logs

    async def _fetch_range(
        self,
        topics: List[str],
        from_block: int,
        to_block: BlockIdentifier,
        address: Optional[str]
    ) -> List[RawLog]:
        try:
            return await self.gateway.get_logs(topics, from_block, to_block, address)
        except BlockRangeTooLargeError:
            if not isinstance(to_block, int):
                to_block = await self.gateway.get_block_number()

            if to_block <= from_block:
                logger.error("Single block exceeds node log limit", block=from_block)
                raise

            middle = (from_block + to_block) // 2
            logger.info(
                "Splitting log range",
                from_block=from_block,
                to_block=to_block,
                middle=middle
            )

            lower = await self._fetch_range(topics, from_block, middle, address)
            upper = await self._fetch_range(topics, middle + 1, to_block, address)
            return lower + upper


def _chunk(from_block: int, to_block: int, span: int) -> List[Tuple[int, int]]:
    """Split [from_block, to_block] into consecutive ranges of at most ``span`` blocks."""
    if span < 1:
        raise ValueError("max_block_span must be positive")

    return [
        (start, min(start + span - 1, to_block))
        for start in range(from_block, to_block + 1, span)
    ]
