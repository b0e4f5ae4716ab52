"""
Contract RPC client for the SimpleStorage contract.

Reads go through ``eth_call``. Writes are built here, signed by the wallet
and broadcast with ``eth_sendRawTransaction``.
"""

from __future__ import annotations

import logging
from typing import Optional

from eth_abi.exceptions import DecodingError

from ..errors import ErrorKind, RemoteReadError, RpcError, TransactionError
from ..wallet import LocalWallet
from .abi import SIMPLE_STORAGE_ABI
from .rpc import RpcClient, parse_quantity
from .tx import build_contract_tx

logger = logging.getLogger(__name__)


class SimpleStorageContract:
    """
    Args:
        rpc: JSON-RPC client
        address: 0x-prefixed contract address
        wallet: Wallet that signs writes
        abi: Contract ABI (default: SIMPLE_STORAGE_ABI)
        gas_limit: Fixed gas limit for writes
        wait_for_receipt: If True, ``write`` returns only after the
            transaction is mined and fails if it reverted
        receipt_timeout: Seconds to wait for the receipt
    """

    def __init__(
        self,
        rpc: RpcClient,
        address: str,
        wallet: LocalWallet,
        abi: Optional[list] = None,
        gas_limit: Optional[int] = None,
        wait_for_receipt: bool = False,
        receipt_timeout: float = 120,
    ) -> None:
        self.rpc = rpc
        self.address = address
        self.wallet = wallet
        self.abi = abi or SIMPLE_STORAGE_ABI
        self.gas_limit = gas_limit
        self.wait_for_receipt = wait_for_receipt
        self.receipt_timeout = receipt_timeout

    async def read(self, function_name: str = "getValue") -> int:
        """
        Call a view function returning a single uint256.

        Raises:
            RemoteReadError: If the call fails or returns nothing
        """
        try:
            value = await self.rpc.read_contract(self.address, self.abi, function_name)
        except RpcError as exc:
            raise RemoteReadError(f"{function_name}() failed: {exc}") from exc
        except (DecodingError, ValueError) as exc:
            raise RemoteReadError(f"{function_name}() returned undecodable data: {exc}") from exc

        if value is None:
            raise RemoteReadError(
                f"{function_name}() returned no data; is {self.address} a contract?"
            )
        return int(value)

    async def write(self, function_name: str, args: list) -> str:
        """
        Submit a state-changing call. Exactly one transaction is broadcast.

        Returns:
            Transaction hash

        Raises:
            UserRejectedRequestError: If the wallet prompt is declined
            RpcError: If building or broadcasting fails
            TransactionError: If waiting for the receipt and it reverted
        """
        connection = self.wallet.connection
        if not connection.connected or connection.account is None:
            raise RpcError("Wallet not connected")

        tx = await build_contract_tx(
            self.rpc,
            self.address,
            self.abi,
            function_name,
            args,
            sender=connection.account,
            chain_id=connection.chain_id,
            gas_limit=self.gas_limit,
        )
        raw_tx = self.wallet.sign_transaction(tx)
        tx_hash = await self.rpc.send_raw_transaction(raw_tx)
        logger.info("Broadcast %s(%s): %s", function_name, args, tx_hash)

        if self.wait_for_receipt:
            receipt = await self.rpc.wait_for_receipt(tx_hash, timeout=self.receipt_timeout)
            status = parse_quantity("eth_getTransactionReceipt", receipt.get("status", "0x0"))
            if status != 1:
                raise TransactionError(
                    f"execution reverted (tx {tx_hash})",
                    kind=ErrorKind.REVERTED,
                    reason="execution reverted",
                )

        return tx_hash
