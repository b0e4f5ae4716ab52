"""A tiny in-process EVM JSON-RPC node for httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
from eth_abi import encode

from simplestore.chain.abi import SIMPLE_STORAGE_ABI, function_selector, keccak256

GET_SELECTOR = "0x" + function_selector(SIMPLE_STORAGE_ABI, "getValue").hex()
SET_SELECTOR = function_selector(SIMPLE_STORAGE_ABI, "setValue").hex()


class FakeNode:
    """Serves the SimpleStorage contract at any address.

    Broadcast transactions are "mined" immediately: the new value is read
    from the calldata embedded in the raw transaction.
    """

    def __init__(self, value: int = 7, chain_id: int = 43113) -> None:
        self.value = value
        self.chain_id = chain_id
        self.nonce = 0
        self.receipt_status = 1
        self.calls: list[str] = []
        self.raw_transactions: list[str] = []
        self.receipts: dict[str, dict] = {}
        self.errors: dict[str, dict[str, Any]] = {}
        self.replies: dict[str, Any] = {}
        self.http_status = 200

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def fail(self, method: str, message: str, code: int = -32000) -> None:
        self.errors[method] = {"code": code, "message": message}

    def reply(self, method: str, result: Any) -> None:
        """Answer ``method`` with ``result`` verbatim, however malformed."""
        self.replies[method] = result

    def handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method = payload["method"]
        self.calls.append(method)

        if self.http_status != 200:
            return httpx.Response(self.http_status, text="unavailable")
        if method in self.errors:
            body = {"jsonrpc": "2.0", "id": payload["id"], "error": self.errors[method]}
            return httpx.Response(200, json=body)

        if method in self.replies:
            result = self.replies[method]
        else:
            result = getattr(self, "_" + method)(payload["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    def _eth_chainId(self, params: list) -> str:
        return hex(self.chain_id)

    def _eth_call(self, params: list) -> str:
        assert params[0]["data"] == GET_SELECTOR
        return "0x" + encode(["uint256"], [self.value]).hex()

    def _eth_getTransactionCount(self, params: list) -> str:
        return hex(self.nonce)

    def _eth_gasPrice(self, params: list) -> str:
        return hex(25 * 10**9)

    def _eth_sendRawTransaction(self, params: list) -> str:
        raw = params[0]
        self.raw_transactions.append(raw)
        start = raw.index(SET_SELECTOR) + len(SET_SELECTOR)
        if self.receipt_status == 1:
            self.value = int(raw[start : start + 64], 16)
        self.nonce += 1
        tx_hash = "0x" + keccak256(bytes.fromhex(raw[2:])).hex()
        self.receipts[tx_hash] = {"transactionHash": tx_hash, "status": hex(self.receipt_status)}
        return tx_hash

    def _eth_getTransactionReceipt(self, params: list) -> Optional[dict]:
        return self.receipts.get(params[0])

    def written_values(self) -> list[int]:
        values = []
        for raw in self.raw_transactions:
            start = raw.index(SET_SELECTOR) + len(SET_SELECTOR)
            values.append(int(raw[start : start + 64], 16))
        return values
