"""
Configuration for SimpleStore.

Settings come from the environment. ``.env`` files in the working directory
and in ``~/.simplestore/`` are loaded first (without overriding variables that
are already set).

The target contract address is the only required setting; without it the
process refuses to start.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


# Default config directory
SIMPLESTORE_DIR = Path.home() / ".simplestore"
SIMPLESTORE_ENV = SIMPLESTORE_DIR / ".env"

# Avalanche Fuji C-Chain
DEFAULT_CHAIN_ID = 43113
DEFAULT_RPC_URL = "https://api.avax-test.network/ext/bc/C/rpc"
DEFAULT_RPC_TIMEOUT = 30.0

NETWORK_NAMES = {
    43113: "Avalanche Fuji",
    43114: "Avalanche C-Chain",
    1: "Ethereum",
    11155111: "Sepolia",
}

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings.

    Attributes:
        contract_address: 0x-prefixed 20-byte hex address of the storage contract
        expected_chain_id: The one network reads and writes are allowed on
        rpc_url: JSON-RPC endpoint
        rpc_timeout: HTTP timeout in seconds
        key_file: dotenv file holding the wallet key
    """

    contract_address: str
    expected_chain_id: int = DEFAULT_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    rpc_timeout: float = DEFAULT_RPC_TIMEOUT
    key_file: Path = SIMPLESTORE_ENV

    @property
    def network_name(self) -> str:
        return NETWORK_NAMES.get(self.expected_chain_id, f"Chain {self.expected_chain_id}")


def validate_address(address: str) -> str:
    """
    Check that ``address`` is a 0x-prefixed 20-byte hex string.

    Returns:
        The address with surrounding whitespace removed

    Raises:
        ConfigurationError: If the address is malformed
    """
    address = address.strip()
    if not _ADDRESS_RE.match(address):
        raise ConfigurationError(
            f"Invalid contract address {address!r}: expected 0x followed by 40 hex characters"
        )
    return address


def load_env_files(env_path: Optional[Path] = None) -> None:
    """Load ``./.env`` and the user-level env file into ``os.environ``."""
    load_dotenv(Path.cwd() / ".env", override=False)
    env_path = env_path or SIMPLESTORE_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw, 0)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def load_settings(
    contract_address: Optional[str] = None,
    rpc_url: Optional[str] = None,
    expected_chain_id: Optional[int] = None,
    env_path: Optional[Path] = None,
) -> Settings:
    """
    Build ``Settings`` from explicit overrides and the environment.

    Args:
        contract_address: Overrides ``CONTRACT_ADDRESS``
        rpc_url: Overrides ``RPC_URL``
        expected_chain_id: Overrides ``EXPECTED_CHAIN_ID``
        env_path: User-level .env file (default: ~/.simplestore/.env)

    Raises:
        ConfigurationError: If the contract address is missing or malformed,
            or a numeric variable does not parse
    """
    env_path = env_path or SIMPLESTORE_ENV
    load_env_files(env_path)

    address = contract_address or os.environ.get("CONTRACT_ADDRESS")
    if not address:
        raise ConfigurationError(
            "Contract address not found. Set CONTRACT_ADDRESS in the environment "
            f"or in {env_path}"
        )

    if expected_chain_id is None:
        expected_chain_id = _int_env("EXPECTED_CHAIN_ID", DEFAULT_CHAIN_ID)

    return Settings(
        contract_address=validate_address(address),
        expected_chain_id=expected_chain_id,
        rpc_url=rpc_url or os.environ.get("RPC_URL", DEFAULT_RPC_URL),
        rpc_timeout=_float_env("RPC_TIMEOUT", DEFAULT_RPC_TIMEOUT),
        key_file=env_path,
    )
