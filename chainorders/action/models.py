"""
Action model and state machine.

An Action is the tracked lifecycle of one submitted transaction.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..node.exceptions import ActionReverted, ActionTimeout, InvalidTransitionError
from ..node.models import TransactionReceipt


class ActionStatus(Enum):
    """Lifecycle status of a submitted transaction."""
    PENDING = "PENDING"              # Broadcast, inclusion not yet observed
    CONFIRMED = "CONFIRMED"          # Nonce advanced or success receipt seen
    TIMED_OUT = "TIMED_OUT"          # Nothing observed before the deadline
    FAILED = "FAILED"                # Receipt reports a revert


class ActionStateMachine:
    """
    State machine for action status transitions.

    Valid transitions:
    - PENDING → CONFIRMED
    - PENDING → TIMED_OUT
    - PENDING → FAILED
    """

    VALID_TRANSITIONS = {
        ActionStatus.PENDING: [
            ActionStatus.CONFIRMED,
            ActionStatus.TIMED_OUT,
            ActionStatus.FAILED
        ],
        # Terminal states (no transitions out)
        ActionStatus.CONFIRMED: [],
        ActionStatus.TIMED_OUT: [],
        ActionStatus.FAILED: []
    }

    @classmethod
    def can_transition(cls, from_status: ActionStatus, to_status: ActionStatus) -> bool:
        return to_status in cls.VALID_TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_transition(cls, from_status: ActionStatus, to_status: ActionStatus):
        """
        Validate state transition and raise exception if invalid.

        Raises:
            InvalidTransitionError: If transition is not allowed
        """
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(
                f"Invalid action state transition: {from_status.value} → {to_status.value}"
            )

    @classmethod
    def is_terminal_state(cls, status: ActionStatus) -> bool:
        return not cls.VALID_TRANSITIONS.get(status)


@dataclass
class Action:
    """
    One submitted transaction.

    Owned by the submitting caller. Only ActionTracker changes ``status``.
    """
    submitter_address: str
    nonce_at_submission: int
    transaction_hash: str
    status: ActionStatus = ActionStatus.PENDING
    submitted_at: float = field(default_factory=time.time)
    completed_at: Optional[float] = None
    receipt: Optional[TransactionReceipt] = None

    @property
    def is_terminal(self) -> bool:
        return ActionStateMachine.is_terminal_state(self.status)

    def transition(self, status: ActionStatus, receipt: Optional[TransactionReceipt] = None) -> None:
        ActionStateMachine.validate_transition(self.status, status)
        self.status = status
        if receipt is not None:
            self.receipt = receipt
        self.completed_at = time.time()

    def raise_for_status(self) -> None:
        """
        Raise if the action ended without confirmation.

        Raises:
            ActionTimeout: If status is TIMED_OUT
            ActionReverted: If status is FAILED
        """
        if self.status == ActionStatus.TIMED_OUT:
            raise ActionTimeout(
                f"Transaction {self.transaction_hash} not observed on chain",
                transaction_hash=self.transaction_hash
            )
        if self.status == ActionStatus.FAILED:
            raise ActionReverted(
                f"Transaction {self.transaction_hash} reverted",
                transaction_hash=self.transaction_hash
            )
