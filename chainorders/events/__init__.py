"""
Event log module.

Provides log fetching and decoding against human-readable event signatures.
"""

from .decoder import DecodedEvent, EventParam, EventSignature, decode
from .fetcher import LogFetcher

__all__ = [
    "DecodedEvent",
    "EventParam",
    "EventSignature",
    "decode",
    "LogFetcher",
]
