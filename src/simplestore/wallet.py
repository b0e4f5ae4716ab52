"""
Local key wallet.

Implements the wallet provider side of SimpleStore with an
Ethereum-compatible secp256k1 key:

- connect/disconnect with an observable ``Connection``
- the active chain id, as reported by the RPC node
- transaction signing behind an optional confirmation prompt

The key lives in a dotenv file (``Settings.key_file``, by default
~/.simplestore/.env) as PRIVATE_KEY. An exported PRIVATE_KEY takes
precedence over the file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import dotenv_values, set_key
from eth_account import Account
from eth_account.signers.local import LocalAccount

from .chain.rpc import RpcClient
from .config import SIMPLESTORE_ENV
from .core.models import DISCONNECTED, Connection, ConnectionListener
from .errors import RpcError, UserRejectedRequestError

logger = logging.getLogger(__name__)

KEY_VAR = "PRIVATE_KEY"

ConfirmCallback = Callable[[dict], bool]


class KeyStore:
    """PRIVATE_KEY entry of a dotenv file; other entries are left alone."""

    def __init__(self, env_path: Optional[Path] = None) -> None:
        self.env_path = env_path or SIMPLESTORE_ENV

    def load(self) -> str:
        """
        Return the 0x-prefixed key.

        Raises:
            ValueError: If neither the environment nor the file has one
        """
        private_key = os.environ.get(KEY_VAR)
        if not private_key and self.env_path.exists():
            private_key = dotenv_values(self.env_path).get(KEY_VAR)
        if not private_key:
            raise ValueError(
                f"{KEY_VAR} not found. Run 'simplestore init' or set "
                f"{KEY_VAR} in {self.env_path}"
            )
        return private_key if private_key.startswith("0x") else "0x" + private_key

    def account(self) -> LocalAccount:
        return Account.from_key(self.load())

    def save(self, private_key: str) -> Path:
        self.env_path.parent.mkdir(parents=True, exist_ok=True)
        set_key(self.env_path, KEY_VAR, private_key, quote_mode="never")
        if os.name != "nt":
            self.env_path.chmod(0o600)
        logger.info("Wallet key written to %s", self.env_path)
        return self.env_path

    def create(self) -> LocalAccount:
        """Generate a fresh key, save it and return its account."""
        account = Account.create()
        self.save("0x" + bytes(account.key).hex())
        return account


class LocalWallet:
    """
    Wallet provider backed by a local private key.

    Args:
        rpc: RPC client used to learn the active chain id
        private_key: 0x-prefixed hex key; read from ``keystore`` on connect if None
        confirm: Called with the unsigned transaction before signing;
            returning False rejects the request
        keystore: Where the key is read from (default: ``KeyStore()``)
    """

    def __init__(
        self,
        rpc: RpcClient,
        private_key: Optional[str] = None,
        confirm: Optional[ConfirmCallback] = None,
        keystore: Optional[KeyStore] = None,
    ) -> None:
        self.rpc = rpc
        self._private_key = private_key
        self._confirm = confirm
        self._keystore = keystore
        self._account: Optional[LocalAccount] = None
        self._connection = DISCONNECTED
        self._listeners: list[ConnectionListener] = []

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def address(self) -> Optional[str]:
        return self._account.address if self._account else None

    def subscribe(self, listener: ConnectionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_connection(self, connection: Connection) -> None:
        if connection == self._connection:
            return
        self._connection = connection
        logger.info(
            "Wallet %s (account=%s chain=%d)",
            "connected" if connection.connected else "disconnected",
            connection.account,
            connection.chain_id,
        )
        for listener in list(self._listeners):
            try:
                listener(connection)
            except Exception as exc:
                logger.error("Error in connection listener: %s", exc)

    async def connect(self) -> Connection:
        """
        Load the key and query the node's chain id.

        Raises:
            ValueError: If no private key is available
            RpcError: If the chain id cannot be fetched
        """
        if self._private_key is not None:
            self._account = Account.from_key(self._private_key)
        else:
            self._account = (self._keystore or KeyStore()).account()
        chain_id = await self.rpc.chain_id()
        self._set_connection(
            Connection(account=self._account.address, chain_id=chain_id, connected=True)
        )
        return self._connection

    def disconnect(self) -> None:
        self._account = None
        self._set_connection(DISCONNECTED)

    def chain_changed(self, chain_id: int) -> None:
        """Report that the active network switched."""
        if not self._connection.connected:
            return
        self._set_connection(
            Connection(
                account=self._connection.account, chain_id=chain_id, connected=True
            )
        )

    def sign_transaction(self, tx: dict[str, Any]) -> str:
        """
        Sign a transaction after the user confirms it.

        Returns:
            0x-prefixed raw signed transaction

        Raises:
            RpcError: If the wallet is not connected
            UserRejectedRequestError: If the confirmation prompt is declined
        """
        if self._account is None or not self._connection.connected:
            raise RpcError("Wallet not connected")

        if self._confirm is not None and not self._confirm(tx):
            logger.info("Signing request declined")
            raise UserRejectedRequestError()

        signed = self._account.sign_transaction(tx)
        raw = signed.raw_transaction.hex()
        return raw if raw.startswith("0x") else "0x" + raw
