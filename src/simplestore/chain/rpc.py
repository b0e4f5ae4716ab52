"""
JSON-RPC client for EVM nodes.

Lightweight alternative to web3.py: httpx for HTTP, eth-abi for encoding.
Supports chain id lookup, read-only contract calls, nonce/gas price queries,
raw transaction broadcast and receipt polling.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Optional

import httpx

from ..config import DEFAULT_RPC_TIMEOUT, DEFAULT_RPC_URL
from ..errors import RpcError
from .abi import decode_function_result, encode_function_call

logger = logging.getLogger(__name__)


def parse_quantity(method: str, value: Any) -> int:
    """Decode a 0x-prefixed hex quantity from a ``method`` result."""
    if not isinstance(value, str) or not value.startswith("0x"):
        raise RpcError(f"Malformed result for {method}: {value!r}")
    try:
        return int(value, 16)
    except ValueError:
        raise RpcError(f"Malformed result for {method}: {value!r}")


class RpcClient:
    """
    Minimal async JSON-RPC client.

    A new ``httpx.AsyncClient`` is opened per request, so instances hold no
    connection state and can be shared freely.

    Args:
        rpc_url: JSON-RPC endpoint
        timeout: HTTP timeout in seconds
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)

    async def call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: RPC parameters

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: On HTTP failure, a malformed response or an error payload
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("-> %s %s", method, params)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(self.rpc_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise RpcError(f"RPC transport error calling {method}: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"RPC returned invalid JSON for {method}") from exc

        if not isinstance(data, dict):
            raise RpcError(f"Malformed response for {method}: {data!r}")

        if "error" in data:
            error = data["error"] or {}
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            raise RpcError(f"RPC error: {message}", code=code)

        return data.get("result")

    async def chain_id(self) -> int:
        result = await self.call("eth_chainId", [])
        return parse_quantity("eth_chainId", result)

    async def read_contract(
        self,
        contract_address: str,
        abi: list,
        function_name: str,
        args: Optional[list] = None,
    ) -> Any:
        """
        Read from a smart contract (eth_call).

        Returns:
            Decoded return value(s), or None for empty return data
        """
        calldata = encode_function_call(abi, function_name, args or [])
        result = await self.call(
            "eth_call",
            [{"to": contract_address, "data": calldata}, "latest"],
        )

        if result is None or result == "0x":
            return None
        if not isinstance(result, str):
            raise RpcError(f"Malformed result for eth_call: {result!r}")

        return decode_function_result(abi, function_name, result)

    async def get_nonce(self, address: str) -> int:
        result = await self.call("eth_getTransactionCount", [address, "pending"])
        return parse_quantity("eth_getTransactionCount", result)

    async def get_gas_price(self) -> int:
        result = await self.call("eth_gasPrice", [])
        return parse_quantity("eth_gasPrice", result)

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed transaction and return its 0x-prefixed hash."""
        tx_hash = await self.call("eth_sendRawTransaction", [raw_tx])
        if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
            raise RpcError(f"Malformed result for eth_sendRawTransaction: {tx_hash!r}")
        return tx_hash

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        receipt = await self.call("eth_getTransactionReceipt", [tx_hash])
        if receipt is not None and not isinstance(receipt, dict):
            raise RpcError(f"Malformed result for eth_getTransactionReceipt: {receipt!r}")
        return receipt

    async def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict:
        """
        Poll for a transaction receipt.

        Raises:
            TimeoutError: If the receipt is not found within ``timeout`` seconds
        """
        start = time.monotonic()
        while time.monotonic() - start < timeout:
            receipt = await self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            await asyncio.sleep(poll_interval)

        raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")
