"""
Action module.

Provides transaction submission and polling-based confirmation tracking.
"""

from .models import Action, ActionStateMachine, ActionStatus
from .tracker import ActionTracker
from .wallet import LocalAccountWallet, TransactionRequest, WalletProvider

__all__ = [
    "Action",
    "ActionStateMachine",
    "ActionStatus",
    "ActionTracker",
    "LocalAccountWallet",
    "TransactionRequest",
    "WalletProvider",
]
