"""
Transaction lifecycle tracker.

State machine over ``TxStatus``::

    Idle -> Pending -> Success
                    -> Error

A new submission re-enters ``Pending`` from ``Success`` or ``Error``;
``Idle`` is only ever the initial state. ``complete()`` is the single
transition out of ``Pending`` and takes a tagged outcome.

Failures are classified by matching the free-text reason reported by the
wallet / RPC layer against a rule table. The table is a best-effort
default and can be extended with ``ErrorClassifier.add_rule``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import ErrorKind, InvalidTransition
from .models import (
    Failed,
    Outcome,
    PendingInput,
    Succeeded,
    Transaction,
    TxStatus,
    WalletProvider,
)
from .notify import TX_KEY, Notifier
from .reader import RemoteValueReader

logger = logging.getLogger(__name__)

SUBMITTED_MESSAGE = "Transaction submitted..."
SENT_MESSAGE = "Transaction sent"
UNKNOWN_MESSAGE = "Transaction failed"


@dataclass(frozen=True)
class ClassificationRule:
    pattern: str
    kind: ErrorKind
    message: str


DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("user rejected", ErrorKind.USER_REJECTED, "Transaction rejected by user"),
    ClassificationRule("user denied", ErrorKind.USER_REJECTED, "Transaction rejected by user"),
    ClassificationRule("revert", ErrorKind.REVERTED, "Transaction reverted"),
)


class ErrorClassifier:
    """
    Map a failure reason to an ``ErrorKind`` and a user message.

    Matching is a case-insensitive substring test. When several rules match,
    the one with the longest pattern wins; ties go to the rule added first.
    No match yields ``ErrorKind.UNKNOWN``.
    """

    def __init__(self, rules: Optional[Iterable[ClassificationRule]] = None) -> None:
        self._rules = list(DEFAULT_RULES if rules is None else rules)

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return tuple(self._rules)

    def add_rule(self, pattern: str, kind: ErrorKind, message: str) -> None:
        if not pattern:
            raise ValueError("pattern must be non-empty")
        self._rules.append(ClassificationRule(pattern, kind, message))

    def classify(self, reason: Optional[str]) -> tuple[ErrorKind, str]:
        lowered = (reason or "").lower()
        best: Optional[ClassificationRule] = None
        for rule in self._rules:
            if rule.pattern.lower() not in lowered:
                continue
            if best is None or len(rule.pattern) > len(best.pattern):
                best = rule
        if best is None:
            return ErrorKind.UNKNOWN, UNKNOWN_MESSAGE
        return best.kind, best.message


class TransactionLifecycleTracker:
    """
    Owns the single Transaction slot.

    Args:
        notifier: Receives submitted / sent / failure notifications
        wallet: Completions arriving while disconnected are recorded silently
        reader: Refreshed after a successful write
        pending_input: Cleared after a successful write, kept on failure
        classifier: Failure classifier (default rules if None)
    """

    def __init__(
        self,
        notifier: Notifier,
        wallet: WalletProvider,
        reader: Optional[RemoteValueReader] = None,
        pending_input: Optional[PendingInput] = None,
        classifier: Optional[ErrorClassifier] = None,
    ) -> None:
        self._notifier = notifier
        self._wallet = wallet
        self._reader = reader
        self.pending_input = pending_input if pending_input is not None else PendingInput()
        self.classifier = classifier or ErrorClassifier()
        self._transaction = Transaction()
        self.refresh_task: Optional[asyncio.Task] = None

    @property
    def transaction(self) -> Transaction:
        return self._transaction

    @property
    def status(self) -> TxStatus:
        return self._transaction.status

    @property
    def is_pending(self) -> bool:
        return self._transaction.status is TxStatus.PENDING

    def begin(self, requested_value: int) -> Transaction:
        if self.is_pending:
            raise InvalidTransition("A transaction is already pending")

        self._transaction = Transaction(
            status=TxStatus.PENDING, requested_value=requested_value
        )
        self.refresh_task = None
        logger.info("Transaction pending: setValue(%d)", requested_value)
        self._notifier.info(SUBMITTED_MESSAGE, key=TX_KEY)
        return self._transaction

    def complete(self, outcome: Outcome) -> Transaction:
        if not self.is_pending:
            raise InvalidTransition(
                f"Cannot complete a transaction in state {self.status.value}"
            )

        visible = self._wallet.connection.connected
        requested = self._transaction.requested_value

        if isinstance(outcome, Succeeded):
            self._transaction = Transaction(
                status=TxStatus.SUCCESS,
                requested_value=requested,
                tx_hash=outcome.tx_hash,
                message=SENT_MESSAGE,
            )
            self.pending_input.clear()
            logger.info("Transaction sent: %s", outcome.tx_hash)
            if visible:
                self._trigger_refresh()
                self._notifier.success(SENT_MESSAGE, key=TX_KEY)
        elif isinstance(outcome, Failed):
            kind, message = self.classifier.classify(outcome.reason)
            self._transaction = Transaction(
                status=TxStatus.ERROR,
                requested_value=requested,
                error_kind=kind,
                reason=outcome.reason,
                message=message,
            )
            logger.info("Transaction failed (%s): %s", kind.value, outcome.reason)
            if visible:
                self._notifier.error(message, key=TX_KEY)
        else:
            raise TypeError(f"Unknown outcome: {outcome!r}")

        if not visible:
            logger.info("Wallet disconnected; completion not displayed")
        return self._transaction

    def _trigger_refresh(self) -> None:
        if self._reader is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; skipping refresh")
            return
        self.refresh_task = loop.create_task(self._reader.refresh())
