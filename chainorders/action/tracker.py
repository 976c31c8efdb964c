"""
Action Tracker.

Submits signed transactions and detects their inclusion by polling the
submitting account's nonce and the transaction receipt. There is no push
channel: every observation is a JSON-RPC round trip on the poll cadence.
"""

import asyncio
import random
from typing import Dict, Optional, Tuple

from ..node.exceptions import NetworkError
from ..node.gateway import NodeGateway
from ..node.models import TransactionReceipt
from ..utils.logger import EventType, get_logger, log_action_event
from .models import Action, ActionStatus
from .wallet import TransactionRequest, WalletProvider

logger = get_logger(__name__)

Observation = Tuple[ActionStatus, Optional[TransactionReceipt]]


class ActionTracker:
    """
    Tracks submitted transactions through to a terminal status.

    Responsibilities:
    - Record the nonce a transaction was submitted with
    - Poll nonce and receipt with jittered sleeps until an outcome or timeout
    - Tolerate individual failed polls

    Submissions through one tracker are serialized with a lock, since nonce
    advance detection relies on in-order submission. Waits are read-only and
    may run concurrently.
    """

    def __init__(self, gateway: NodeGateway, wallet: WalletProvider):
        """
        Initialize Action Tracker.

        Args:
            gateway: Node gateway instance
            wallet: Wallet that signs submitted transactions
        """
        self.gateway = gateway
        self.wallet = wallet
        self.config = gateway.config
        self._submit_lock = asyncio.Lock()
        self._last_nonce: Dict[str, int] = {}    # address -> last nonce broadcast

    async def submit(self, request: TransactionRequest) -> Action:
        """
        Sign and broadcast a transaction.

        If the request carries no nonce, the next one is taken from the
        account's pending transaction count, and never reused: a nonce already
        broadcast through this tracker is skipped even if the node does not
        report it as pending yet. The nonce the transaction is sent with is
        recorded as ``nonce_at_submission``.

        Args:
            request: Unsigned transaction request (e.g. from ContractBinding.send)

        Returns:
            Action in PENDING status

        Raises:
            WalletError: If signing fails
            NetworkError: If the node cannot be reached or rejects the transaction
        """
        async with self._submit_lock:
            address = self.wallet.address
            transaction = dict(request)
            if "nonce" not in transaction:
                transaction["nonce"] = await self._next_nonce(address)

            raw_transaction = await self.wallet.sign_transaction(transaction)
            transaction_hash = await self.gateway.send_raw_transaction(raw_transaction)
            self._last_nonce[address] = max(int(transaction["nonce"]), self._last_nonce.get(address, -1))

        action = Action(
            submitter_address=address,
            nonce_at_submission=int(transaction["nonce"]),
            transaction_hash=transaction_hash
        )

        log_action_event(
            logger,
            EventType.ACTION_SUBMITTED,
            transaction_hash=transaction_hash,
            submitter=address,
            nonce=action.nonce_at_submission
        )
        return action

    async def wait_for_confirmation(
        self,
        action: Action,
        poll_interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None
    ) -> ActionStatus:
        """
        Poll until the action is confirmed, failed, or the timeout elapses.

        CONFIRMED: a success receipt is seen, or the account nonce is greater
        than ``nonce_at_submission``. FAILED: a reverted receipt is seen.
        TIMED_OUT: neither before ``timeout_ms``.

        Cancelling the awaiting task stops observation only. The action stays
        PENDING and the transaction may still be included later.

        Args:
            action: Action returned by submit()
            poll_interval_ms: Delay between polls (default: config.polling_interval_ms)
            timeout_ms: Overall deadline (default: config.confirmation_timeout_ms)

        Returns:
            Terminal ActionStatus (also stored on the action)
        """
        if action.is_terminal:
            return action.status

        if poll_interval_ms is None:
            poll_interval_ms = self.config.polling_interval_ms
        if timeout_ms is None:
            timeout_ms = self.config.confirmation_timeout_ms

        poll_interval = poll_interval_ms / 1000
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000
        ticks = 0

        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break

                ticks += 1
                try:
                    observation = await asyncio.wait_for(self._poll(action), timeout=remaining)
                except asyncio.TimeoutError:
                    break
                except NetworkError as e:
                    logger.warning(
                        "Poll tick failed",
                        transaction_hash=action.transaction_hash,
                        tick=ticks,
                        error=str(e)
                    )
                    observation = None

                if observation is not None:
                    status, receipt = observation
                    action.transition(status, receipt)
                    self._log_outcome(action, ticks)
                    return status

                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                await asyncio.sleep(min(self._jittered(poll_interval), remaining))

        except asyncio.CancelledError:
            logger.info(
                "Confirmation wait cancelled, transaction outcome unknown",
                transaction_hash=action.transaction_hash,
                tick=ticks
            )
            raise

        action.transition(ActionStatus.TIMED_OUT)
        self._log_outcome(action, ticks)
        return action.status

    async def submit_and_wait(
        self,
        request: TransactionRequest,
        poll_interval_ms: Optional[int] = None,
        timeout_ms: Optional[int] = None
    ) -> Action:
        """Submit a transaction and wait for its terminal status."""
        action = await self.submit(request)
        await self.wait_for_confirmation(action, poll_interval_ms, timeout_ms)
        return action

    async def _next_nonce(self, address: str) -> int:
        pending = await self.gateway.get_transaction_count(address, "pending")
        last = self._last_nonce.get(address)
        if last is None:
            return pending
        return max(pending, last + 1)

    async def _poll(self, action: Action) -> Optional[Observation]:
        """
        One observation: receipt and nonce, queried concurrently.

        Returns:
            (status, receipt) if the action reached an outcome, else None

        Raises:
            NetworkError: If both queries failed
        """
        receipt_result, nonce_result = await asyncio.gather(
            self.gateway.get_transaction_receipt(action.transaction_hash),
            self.gateway.get_transaction_count(action.submitter_address, "latest"),
            return_exceptions=True
        )

        for result in (receipt_result, nonce_result):
            if isinstance(result, BaseException) and not isinstance(result, NetworkError):
                raise result

        if isinstance(receipt_result, NetworkError) and isinstance(nonce_result, NetworkError):
            raise nonce_result

        if isinstance(receipt_result, TransactionReceipt):
            if receipt_result.succeeded:
                return ActionStatus.CONFIRMED, receipt_result
            return ActionStatus.FAILED, receipt_result

        if isinstance(nonce_result, int) and nonce_result > action.nonce_at_submission:
            return ActionStatus.CONFIRMED, None

        return None

    def _jittered(self, interval: float) -> float:
        jitter = self.config.poll_jitter
        return interval * random.uniform(1 - jitter, 1 + jitter)

    def _log_outcome(self, action: Action, ticks: int) -> None:
        event_type = {
            ActionStatus.CONFIRMED: EventType.ACTION_CONFIRMED,
            ActionStatus.FAILED: EventType.ACTION_FAILED,
            ActionStatus.TIMED_OUT: EventType.ACTION_TIMED_OUT,
        }[action.status]

        log_action_event(
            logger,
            event_type,
            transaction_hash=action.transaction_hash,
            submitter=action.submitter_address,
            nonce=action.nonce_at_submission,
            status=action.status.value,
            ticks=ticks
        )
