"""Network guard: remote operations are only allowed on one chain."""

from __future__ import annotations

from typing import Optional

from ..config import NETWORK_NAMES
from .models import Connection

WRONG_NETWORK_LABEL = "Wrong Network"


class NetworkGuard:
    def __init__(self, expected_chain_id: int, network_name: Optional[str] = None) -> None:
        self.expected_chain_id = expected_chain_id
        self.network_name = network_name or NETWORK_NAMES.get(
            expected_chain_id, f"Chain {expected_chain_id}"
        )

    def is_authorized(self, chain_id: int) -> bool:
        return chain_id == self.expected_chain_id

    def allows(self, connection: Connection) -> bool:
        """True when the wallet is connected to the expected chain."""
        return connection.connected and self.is_authorized(connection.chain_id)

    def network_label(self, chain_id: int) -> str:
        if self.is_authorized(chain_id):
            return self.network_name
        return WRONG_NETWORK_LABEL
