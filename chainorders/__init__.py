"""
chainorders

Event-sourced reconstruction of open marketplace sell orders from
smart-contract event logs, plus polling-based tracking of submitted
transactions through to on-chain confirmation.
"""

__version__ = "0.1.0"
__author__ = "chainorders maintainers"
