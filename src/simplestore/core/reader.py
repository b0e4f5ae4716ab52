"""
Remote value reader.

Keeps a cached ``RemoteValue`` for the contract's ``getValue()``. The reader
watches the wallet and fetches as soon as the wallet is connected to the
expected chain. While disconnected or on the wrong chain it makes no calls.

Failures never propagate: they are stored in ``RemoteValue.error`` and the
last good value is kept.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Optional

from .guard import NetworkGuard
from .models import Connection, ContractClient, RemoteValue, WalletProvider

logger = logging.getLogger(__name__)


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class RemoteValueReader:
    def __init__(
        self,
        client: ContractClient,
        guard: NetworkGuard,
        wallet: WalletProvider,
        function_name: str = "getValue",
    ) -> None:
        self._client = client
        self._guard = guard
        self._wallet = wallet
        self.function_name = function_name
        self._value = RemoteValue()
        self._inflight: Optional[asyncio.Future] = None
        self._queued: Optional[asyncio.Future] = None
        self._issued = False
        self._enabled = False
        self.auto_task: Optional[asyncio.Task] = None
        self._unsubscribe = wallet.subscribe(self._on_connection_change)
        self._on_connection_change(wallet.connection)

    @property
    def value(self) -> RemoteValue:
        return self._value

    @property
    def enabled(self) -> bool:
        return self._guard.allows(self._wallet.connection)

    async def read(self) -> RemoteValue:
        """Return the cached value, fetching only if nothing was fetched yet."""
        if self._value.raw is not None:
            return self._value
        if self._inflight is not None and not self._inflight.done():
            return await asyncio.shield(self._inflight)
        return await self.refresh()

    async def refresh(self) -> RemoteValue:
        """
        Fetch the value again.

        The result always comes from a call issued after ``refresh`` was
        entered. Concurrent callers share one fetch; if the current fetch
        already sent its call, one follow-up fetch is queued behind it and
        shared by everyone who asked in the meantime. When the wallet is
        disconnected or on the wrong chain, no call is made.
        """
        if not self.enabled:
            logger.debug("Read skipped: wallet disconnected or wrong network")
            return self._value

        if self._inflight is None or self._inflight.done():
            self._issued = False
            self._inflight = asyncio.ensure_future(self._fetch())
            future = self._inflight
        elif not self._issued:
            future = self._inflight
        else:
            if self._queued is None or self._queued.done():
                self._queued = asyncio.ensure_future(self._fetch_after(self._inflight))
            future = self._queued
        return await asyncio.shield(future)

    async def _fetch_after(self, previous: asyncio.Future) -> RemoteValue:
        await asyncio.wait([previous])
        self._inflight, self._queued = self._queued, None
        self._issued = False
        return await self._fetch()

    async def _fetch(self) -> RemoteValue:
        self._value = replace(self._value, loading=True)
        self._issued = True
        try:
            raw = await self._client.read(self.function_name)
        except Exception as exc:
            logger.warning("Read of %s() unavailable: %s", self.function_name, exc)
            self._value = replace(
                self._value, loading=False, error=str(exc) or type(exc).__name__
            )
        else:
            self._value = RemoteValue(
                raw=raw,
                fetched_at=self._value.fetched_at + 1,
                loading=False,
                error=None,
            )
            logger.debug("%s() = %d", self.function_name, raw)
        return self._value

    def _on_connection_change(self, connection: Connection) -> None:
        enabled = self._guard.allows(connection)
        became_enabled = enabled and not self._enabled
        self._enabled = enabled
        if not became_enabled:
            return

        loop = _running_loop()
        if loop is None:
            logger.debug("No running event loop; value will be fetched on first read()")
            return
        # Chain or account may differ from the last fetch, so always refetch.
        self.auto_task = loop.create_task(self.refresh())

    def close(self) -> None:
        self._unsubscribe()
