"""
Transaction submitter.

Validates the user's text, moves the tracker to ``Pending`` and sends exactly
one ``setValue`` write as an asyncio task. The task's outcome is handed to
the tracker's ``complete()``.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Generator, Optional

from ..errors import ValidationError
from .guard import NetworkGuard
from .lifecycle import TransactionLifecycleTracker
from .models import (
    ContractClient,
    Failed,
    Outcome,
    PendingInput,
    Succeeded,
    Transaction,
    WalletProvider,
)
from .notify import Notifier

logger = logging.getLogger(__name__)

UINT256_MAX = 2**256 - 1
INVALID_INPUT_MESSAGE = "Invalid input value"

_DECIMAL_RE = re.compile(r"[0-9]+")


def parse_uint256(text: Optional[str]) -> int:
    """
    Parse decimal text as a uint256.

    Raises:
        ValidationError: If the text is empty, not a plain decimal integer,
            or out of range
    """
    candidate = (text or "").strip()
    if not candidate:
        raise ValidationError("Value must not be empty")
    if not _DECIMAL_RE.fullmatch(candidate):
        raise ValidationError(f"Not a non-negative integer: {candidate!r}")
    value = int(candidate)
    if value > UINT256_MAX:
        raise ValidationError("Value does not fit in uint256")
    return value


class PendingHandle:
    """Awaitable handle on an in-flight write; resolves to the final Transaction."""

    def __init__(self, requested_value: int, task: asyncio.Task) -> None:
        self.requested_value = requested_value
        self.task = task

    def done(self) -> bool:
        return self.task.done()

    def __await__(self) -> Generator[object, None, Transaction]:
        return self.task.__await__()


class TransactionSubmitter:
    def __init__(
        self,
        client: ContractClient,
        guard: NetworkGuard,
        wallet: WalletProvider,
        tracker: TransactionLifecycleTracker,
        notifier: Notifier,
        function_name: str = "setValue",
    ) -> None:
        self._client = client
        self._guard = guard
        self._wallet = wallet
        self._tracker = tracker
        self._notifier = notifier
        self.function_name = function_name

    @property
    def pending_input(self) -> PendingInput:
        return self._tracker.pending_input

    @property
    def can_submit(self) -> bool:
        return self._guard.allows(self._wallet.connection) and not self._tracker.is_pending

    def submit(self, candidate_text: Optional[str] = None) -> Optional[PendingHandle]:
        """
        Submit ``candidate_text`` (default: the pending input's text).

        Must be called from a running event loop.

        Returns:
            Handle on the in-flight write, or None if submission is currently
            disabled (disconnected, wrong network, or already pending)

        Raises:
            ValidationError: If the text is not a valid uint256; nothing is sent
                and the transaction state is unchanged
        """
        if candidate_text is None:
            candidate_text = self.pending_input.text

        if not self.can_submit:
            logger.debug("Submit ignored: disabled")
            return None

        try:
            value = parse_uint256(candidate_text)
        except ValidationError:
            self._notifier.error(INVALID_INPUT_MESSAGE)
            raise

        loop = asyncio.get_running_loop()
        self._tracker.begin(value)
        task = loop.create_task(self._send(value))
        return PendingHandle(value, task)

    async def _send(self, value: int) -> Transaction:
        outcome: Outcome
        try:
            tx_hash = await self._client.write(self.function_name, [value])
        except Exception as exc:
            outcome = Failed(reason=str(exc) or type(exc).__name__)
        else:
            outcome = Succeeded(tx_hash=tx_hash)

        transaction = self._tracker.complete(outcome)
        if self._tracker.refresh_task is not None:
            await self._tracker.refresh_task
        return transaction
