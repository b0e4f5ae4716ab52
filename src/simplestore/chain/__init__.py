"""
Chain - On-chain interaction layer for SimpleStore.

Provides the JSON-RPC client, the SimpleStorage ABI, transaction building
and the contract client used by the core.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
