"""Shared fakes for the wallet and contract collaborators."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Iterator, Optional
from unittest.mock import patch

import pytest
from eth_account import Account

from simplestore.core.guard import NetworkGuard
from simplestore.core.models import DISCONNECTED, Connection
from simplestore.core.notify import Notification, Notifier

FUJI = 43113
ACCOUNT = "0x1111111111111111111111111111111111111111"


def new_key() -> tuple[str, str]:
    """Fresh (private_key, address) pair."""
    account = Account.create()
    return "0x" + bytes(account.key).hex(), account.address


class FakeWallet:
    """In-memory wallet provider with an observable connection."""

    def __init__(self) -> None:
        self._connection = DISCONNECTED
        self._listeners: list[Callable[[Connection], None]] = []

    @property
    def connection(self) -> Connection:
        return self._connection

    def subscribe(self, listener: Callable[[Connection], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _set(self, connection: Connection) -> None:
        self._connection = connection
        for listener in list(self._listeners):
            listener(connection)

    def connect(self, chain_id: int = FUJI, account: str = ACCOUNT) -> None:
        self._set(Connection(account=account, chain_id=chain_id, connected=True))

    def disconnect(self) -> None:
        self._set(DISCONNECTED)


class FakeContract:
    """Contract client that records calls.

    Writes block on ``release`` when ``hold_writes`` is set, so tests can
    observe the Pending state.
    """

    def __init__(self, value: int = 0) -> None:
        self.value = value
        self.reads = 0
        self.writes: list[tuple[str, list]] = []
        self.read_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.hold_writes = False
        self.release = asyncio.Event()
        self.read_gate: Optional[asyncio.Event] = None

    async def read(self, function_name: str = "getValue") -> int:
        self.reads += 1
        # The node answers with the state at the time the call was made.
        value = self.value
        if self.read_gate is not None:
            await self.read_gate.wait()
        await asyncio.sleep(0)
        if self.read_error is not None:
            raise self.read_error
        return value

    async def write(self, function_name: str, args: list) -> str:
        self.writes.append((function_name, list(args)))
        if self.hold_writes:
            await self.release.wait()
        await asyncio.sleep(0)
        if self.write_error is not None:
            raise self.write_error
        self.value = args[0]
        return "0x" + "ab" * 32


@pytest.fixture()
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture()
def contract() -> FakeContract:
    return FakeContract(value=7)


@pytest.fixture()
def guard() -> NetworkGuard:
    return NetworkGuard(FUJI)


@pytest.fixture()
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture()
def notifications(notifier: Notifier) -> list[Notification]:
    received: list[Notification] = []
    notifier.subscribe(received.append)
    return received


ENV_VARS = (
    "CONTRACT_ADDRESS",
    "EXPECTED_CHAIN_ID",
    "RPC_URL",
    "RPC_TIMEOUT",
    "PRIVATE_KEY",
    "SIMPLESTORE_LOG_LEVEL",
)


@pytest.fixture()
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Scrub settings from the environment and run from an empty directory.

    ``patch.dict`` also drops anything python-dotenv adds during the test.
    """
    with patch.dict(os.environ):
        for name in ENV_VARS:
            os.environ.pop(name, None)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("simplestore.config.SIMPLESTORE_ENV", tmp_path / "home" / ".env")
        monkeypatch.setattr("simplestore.wallet.SIMPLESTORE_ENV", tmp_path / "home" / ".env")
        yield


@pytest.fixture()
def restore_logging() -> Iterator[None]:
    """Undo ``configure_logging`` so later tests don't write to closed streams."""
    logger = logging.getLogger("simplestore")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
