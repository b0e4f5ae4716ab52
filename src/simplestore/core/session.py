"""
Session: the guard, reader, submitter and tracker wired to one wallet and
one contract client, plus a display snapshot for a UI to render.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .guard import NetworkGuard
from .lifecycle import ErrorClassifier, TransactionLifecycleTracker
from .models import ContractClient, PendingInput, TxStatus, WalletProvider
from .notify import Notifier
from .reader import RemoteValueReader
from .submitter import PendingHandle, TransactionSubmitter

LOADING_TEXT = "Loading..."
UNAVAILABLE_TEXT = "Unavailable"

STATUS_TEXT = {
    TxStatus.IDLE: "",
    TxStatus.PENDING: "Transaction pending...",
    TxStatus.SUCCESS: "Transaction sent",
    TxStatus.ERROR: "Transaction failed",
}


@dataclass(frozen=True)
class SessionView:
    connected: bool
    account: Optional[str]
    chain_id: int
    network_label: str
    wrong_network: bool
    value_text: str
    tx_status: TxStatus
    tx_status_text: str
    can_submit: bool


class StorageSession:
    def __init__(
        self,
        wallet: WalletProvider,
        client: ContractClient,
        guard: NetworkGuard,
        notifier: Optional[Notifier] = None,
        classifier: Optional[ErrorClassifier] = None,
    ) -> None:
        self.wallet = wallet
        self.guard = guard
        self.notifier = notifier or Notifier()
        self.input = PendingInput()
        self.reader = RemoteValueReader(client, guard, wallet)
        self.tracker = TransactionLifecycleTracker(
            self.notifier,
            wallet,
            reader=self.reader,
            pending_input=self.input,
            classifier=classifier,
        )
        self.submitter = TransactionSubmitter(
            client, guard, wallet, self.tracker, self.notifier
        )

    def submit(self, text: Optional[str] = None) -> Optional[PendingHandle]:
        return self.submitter.submit(text)

    def _value_text(self) -> str:
        value = self.reader.value
        if value.raw is not None:
            return str(value.raw)
        if value.loading:
            return LOADING_TEXT
        if value.error is not None:
            return UNAVAILABLE_TEXT
        return ""

    def snapshot(self) -> SessionView:
        connection = self.wallet.connection
        status = self.tracker.status
        return SessionView(
            connected=connection.connected,
            account=connection.account,
            chain_id=connection.chain_id,
            network_label=self.guard.network_label(connection.chain_id),
            wrong_network=not self.guard.is_authorized(connection.chain_id),
            value_text=self._value_text(),
            tx_status=status,
            tx_status_text=STATUS_TEXT[status],
            can_submit=self.submitter.can_submit,
        )

    def close(self) -> None:
        self.reader.close()
