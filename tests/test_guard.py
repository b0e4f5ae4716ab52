"""Tests for the network guard."""

from __future__ import annotations

import pytest

from simplestore.core.guard import WRONG_NETWORK_LABEL, NetworkGuard
from simplestore.core.models import Connection

FUJI = 43113


class TestIsAuthorized:
    def test_expected_chain(self) -> None:
        assert NetworkGuard(FUJI).is_authorized(FUJI) is True

    @pytest.mark.parametrize("chain_id", [1, 0, -1, -FUJI, 43114, FUJI + 1, 2**64])
    def test_other_chains(self, chain_id: int) -> None:
        assert NetworkGuard(FUJI).is_authorized(chain_id) is False

    def test_configurable_expected_id(self) -> None:
        guard = NetworkGuard(11155111)
        assert guard.is_authorized(11155111)
        assert not guard.is_authorized(FUJI)


class TestAllows:
    def test_connected_on_expected_chain(self) -> None:
        conn = Connection(account="0xabc", chain_id=FUJI, connected=True)
        assert NetworkGuard(FUJI).allows(conn)

    def test_disconnected(self) -> None:
        assert not NetworkGuard(FUJI).allows(Connection(chain_id=FUJI, connected=False))

    def test_wrong_chain(self) -> None:
        conn = Connection(account="0xabc", chain_id=1, connected=True)
        assert not NetworkGuard(FUJI).allows(conn)


class TestLabel:
    def test_known_network_name(self) -> None:
        assert NetworkGuard(FUJI).network_label(FUJI) == "Avalanche Fuji"

    def test_wrong_network(self) -> None:
        assert NetworkGuard(FUJI).network_label(1) == WRONG_NETWORK_LABEL == "Wrong Network"

    def test_custom_name(self) -> None:
        assert NetworkGuard(31337, "Anvil").network_label(31337) == "Anvil"

    def test_unknown_chain_fallback_name(self) -> None:
        assert NetworkGuard(999).network_label(999) == "Chain 999"
