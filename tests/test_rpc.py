"""Tests for the JSON-RPC client and ABI helpers."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from fake_node import FakeNode
from simplestore.chain.abi import (
    SIMPLE_STORAGE_ABI,
    decode_function_result,
    encode_function_call,
    function_selector,
)
from simplestore.chain.rpc import RpcClient
from simplestore.chain.tx import to_checksum_address
from simplestore.errors import RpcError

CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


def _client(node: FakeNode) -> RpcClient:
    return RpcClient("http://node.test", timeout=5, transport=node.transport())


class TestAbi:
    def test_selectors(self) -> None:
        assert function_selector(SIMPLE_STORAGE_ABI, "getValue").hex() == "20965255"
        assert function_selector(SIMPLE_STORAGE_ABI, "setValue").hex() == "55241077"

    def test_encode_set_value(self) -> None:
        data = encode_function_call(SIMPLE_STORAGE_ABI, "setValue", [42])
        assert data == "0x55241077" + "0" * 62 + "2a"

    def test_encode_wrong_arity(self) -> None:
        with pytest.raises(ValueError):
            encode_function_call(SIMPLE_STORAGE_ABI, "setValue", [])

    def test_unknown_function(self) -> None:
        with pytest.raises(ValueError, match="not found"):
            encode_function_call(SIMPLE_STORAGE_ABI, "reset", [])

    def test_decode_uint256(self) -> None:
        assert decode_function_result(SIMPLE_STORAGE_ABI, "getValue", "0x" + "0" * 62 + "2a") == 42

    def test_decode_no_outputs(self) -> None:
        assert decode_function_result(SIMPLE_STORAGE_ABI, "setValue", "0x") is None

    def test_checksum_address(self) -> None:
        assert to_checksum_address(CONTRACT.lower()) == CONTRACT


class TestRpcCall:
    def test_chain_id(self) -> None:
        node = FakeNode(chain_id=43113)
        assert asyncio.run(_client(node).chain_id()) == 43113
        assert node.calls == ["eth_chainId"]

    def test_request_payload(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x1"})

        client = RpcClient("http://node.test", transport=httpx.MockTransport(handler))

        async def scenario() -> None:
            await client.call("eth_blockNumber", [])
            await client.call("eth_blockNumber", [])

        asyncio.run(scenario())
        assert seen[0]["jsonrpc"] == "2.0"
        assert seen[0]["method"] == "eth_blockNumber"
        assert [p["id"] for p in seen] == [1, 2]

    def test_error_payload(self) -> None:
        node = FakeNode()
        node.fail("eth_call", "execution reverted", code=3)
        with pytest.raises(RpcError) as exc_info:
            asyncio.run(_client(node).call("eth_call", [{}, "latest"]))
        assert "execution reverted" in str(exc_info.value)
        assert exc_info.value.code == 3

    def test_http_error(self) -> None:
        node = FakeNode()
        node.http_status = 503
        with pytest.raises(RpcError, match="transport error"):
            asyncio.run(_client(node).chain_id())

    def test_invalid_json(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        client = RpcClient("http://node.test", transport=transport)
        with pytest.raises(RpcError, match="invalid JSON"):
            asyncio.run(client.chain_id())


class TestMalformedResults:
    @pytest.mark.parametrize("result", [None, 43113, "a869", "0xzz"])
    def test_chain_id(self, result) -> None:
        node = FakeNode()
        node.reply("eth_chainId", result)
        with pytest.raises(RpcError, match="Malformed result for eth_chainId"):
            asyncio.run(_client(node).chain_id())

    def test_nonce_and_gas_price(self) -> None:
        node = FakeNode()
        node.reply("eth_getTransactionCount", None)
        node.reply("eth_gasPrice", [1])
        client = _client(node)
        with pytest.raises(RpcError, match="eth_getTransactionCount"):
            asyncio.run(client.get_nonce("0x" + "11" * 20))
        with pytest.raises(RpcError, match="eth_gasPrice"):
            asyncio.run(client.get_gas_price())

    def test_call_result_not_a_string(self) -> None:
        node = FakeNode()
        node.reply("eth_call", {"value": 7})
        with pytest.raises(RpcError, match="eth_call"):
            asyncio.run(_client(node).read_contract(CONTRACT, SIMPLE_STORAGE_ABI, "getValue"))

    def test_send_and_receipt(self) -> None:
        node = FakeNode()
        node.reply("eth_sendRawTransaction", None)
        node.reply("eth_getTransactionReceipt", "0x1")
        client = _client(node)
        with pytest.raises(RpcError, match="eth_sendRawTransaction"):
            asyncio.run(client.send_raw_transaction("0xf8"))
        with pytest.raises(RpcError, match="eth_getTransactionReceipt"):
            asyncio.run(client.get_transaction_receipt("0xabc"))

    def test_response_not_an_object(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=["0x1"]))
        client = RpcClient("http://node.test", transport=transport)
        with pytest.raises(RpcError, match="Malformed response"):
            asyncio.run(client.chain_id())


class TestReadContract:
    def test_reads_value(self) -> None:
        node = FakeNode(value=2**255)
        value = asyncio.run(_client(node).read_contract(CONTRACT, SIMPLE_STORAGE_ABI, "getValue"))
        assert value == 2**255

    def test_empty_result(self) -> None:
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"})
        )
        client = RpcClient("http://node.test", transport=transport)
        assert asyncio.run(client.read_contract(CONTRACT, SIMPLE_STORAGE_ABI, "getValue")) is None


class TestWaitForReceipt:
    def test_returns_receipt(self) -> None:
        node = FakeNode()
        node.receipts["0xabc"] = {"status": "0x1"}
        receipt = asyncio.run(_client(node).wait_for_receipt("0xabc", timeout=1, poll_interval=0.01))
        assert receipt == {"status": "0x1"}

    def test_times_out(self) -> None:
        node = FakeNode()
        with pytest.raises(TimeoutError):
            asyncio.run(_client(node).wait_for_receipt("0xmissing", timeout=0.05, poll_interval=0.01))
        assert node.calls.count("eth_getTransactionReceipt") >= 2
