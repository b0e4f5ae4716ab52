"""
Transaction Builder - Build unsigned contract call transactions.

Signing is delegated to the wallet; broadcasting goes through the RPC client.
"""

from __future__ import annotations

from typing import Any, Optional

from .abi import encode_function_call, keccak256
from .rpc import RpcClient

DEFAULT_GAS_LIMIT = 100_000


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format.

    eth-account requires checksummed addresses in transaction fields.
    """
    addr = address.lower().replace("0x", "")
    addr_hash = keccak256(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


async def build_contract_tx(
    rpc: RpcClient,
    contract_address: str,
    abi: list,
    function_name: str,
    args: list,
    sender: str,
    chain_id: int,
    gas_limit: Optional[int] = None,
) -> dict[str, Any]:
    """
    Build a contract call transaction (unsigned).

    Args:
        rpc: RPC client used for nonce and gas price lookup
        contract_address: 0x-prefixed contract address
        abi: Contract ABI
        function_name: Function to call
        args: Function arguments
        sender: Address the transaction is sent from
        chain_id: Chain id to bind the signature to
        gas_limit: Gas limit (default: DEFAULT_GAS_LIMIT)

    Returns:
        Unsigned legacy transaction dict
    """
    calldata = encode_function_call(abi, function_name, args)
    nonce = await rpc.get_nonce(sender)
    gas_price = await rpc.get_gas_price()

    return {
        "to": to_checksum_address(contract_address),
        "data": calldata,
        "value": 0,
        "nonce": nonce,
        "gas": gas_limit or DEFAULT_GAS_LIMIT,
        "gasPrice": gas_price,
        "chainId": chain_id,
    }
