from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol, Union

from ..errors import ErrorKind


class TxStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Connection:
    """Wallet connection as seen by the core. Owned by the wallet."""

    account: Optional[str] = None
    chain_id: int = 0
    connected: bool = False


DISCONNECTED = Connection()


@dataclass(frozen=True)
class RemoteValue:
    """
    Cached view of the stored value.

    ``raw`` keeps the last successfully fetched value while a refresh is in
    flight or after a failed one. ``fetched_at`` counts successful fetches.
    """

    raw: Optional[int] = None
    fetched_at: int = 0
    loading: bool = False
    error: Optional[str] = None


@dataclass
class PendingInput:
    """Text typed by the user; only validated on submission."""

    text: str = ""

    def clear(self) -> None:
        self.text = ""


@dataclass(frozen=True)
class Transaction:
    status: TxStatus = TxStatus.IDLE
    requested_value: Optional[int] = None
    tx_hash: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    reason: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class Succeeded:
    tx_hash: str


@dataclass(frozen=True)
class Failed:
    reason: str


Outcome = Union[Succeeded, Failed]

ConnectionListener = Callable[[Connection], None]


class WalletProvider(Protocol):
    @property
    def connection(self) -> Connection: ...

    def subscribe(self, listener: ConnectionListener) -> Callable[[], None]: ...


class ContractClient(Protocol):
    def read(self, function_name: str) -> Awaitable[int]: ...

    def write(self, function_name: str, args: list) -> Awaitable[str]: ...
