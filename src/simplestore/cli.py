"""
SimpleStore CLI

Command-line front end for the SimpleStorage contract: connect a local
wallet, read the stored value and submit a new one.

Commands:
  status  - Show wallet, network and the stored value
  get     - Print the stored value
  set     - Submit setValue(VALUE) and wait for the outcome
  init    - Generate a wallet key
  whoami  - Show current wallet address
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Optional

import click

from .chain.contract import SimpleStorageContract
from .chain.rpc import RpcClient
from .config import Settings, load_settings
from .core.guard import NetworkGuard
from .core.models import TxStatus
from .core.notify import Notification, NotificationKind
from .core.session import StorageSession
from .errors import (
    ErrorKind,
    NetworkMismatch,
    RemoteReadError,
    RpcError,
    SimpleStoreError,
    TransactionError,
    ValidationError,
)
from .log import configure_logging
from .wallet import ConfirmCallback, KeyStore, LocalWallet


VERSION = "1.0.0"

_NOTIFICATION_COLORS = {
    NotificationKind.INFO: "cyan",
    NotificationKind.SUCCESS: "green",
    NotificationKind.ERROR: "red",
}


def build_session(
    settings: Settings,
    confirm: Optional[ConfirmCallback] = None,
    wait: bool = False,
    transport: Any = None,
) -> StorageSession:
    """Wire an RPC client, local wallet and contract client into a session."""
    rpc = RpcClient(settings.rpc_url, settings.rpc_timeout, transport=transport)
    wallet = LocalWallet(rpc, confirm=confirm, keystore=KeyStore(settings.key_file))
    contract = SimpleStorageContract(
        rpc, settings.contract_address, wallet, wait_for_receipt=wait
    )
    guard = NetworkGuard(settings.expected_chain_id, settings.network_name)
    return StorageSession(wallet, contract, guard)


def _echo_notification(notification: Notification) -> None:
    click.secho(
        f"  [{notification.kind.value}] {notification.message}",
        fg=_NOTIFICATION_COLORS[notification.kind],
    )


def _prompt_confirm(tx: dict) -> bool:
    return click.confirm(
        f"Sign transaction to {tx['to']} (nonce {tx['nonce']}, chain {tx['chainId']})?",
        default=False,
    )


async def _connect(session: StorageSession) -> None:
    try:
        await session.wallet.connect()
    except ValueError as exc:
        raise SimpleStoreError(f"No wallet: {exc}") from exc


def _require_network(session: StorageSession) -> None:
    connection = session.wallet.connection
    if not session.guard.allows(connection):
        raise NetworkMismatch(connection.chain_id, session.guard.expected_chain_id)


def _run(coro) -> Any:
    try:
        return asyncio.run(coro)
    except SimpleStoreError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="simplestore")
@click.option("--contract", envvar="CONTRACT_ADDRESS", help="Storage contract address (0x...)")
@click.option("--rpc-url", envvar="RPC_URL", default=None, help="JSON-RPC endpoint")
@click.option("--chain-id", type=int, default=None, help="Expected chain id (default: 43113)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    contract: Optional[str],
    rpc_url: Optional[str],
    chain_id: Optional[int],
    verbose: bool,
) -> None:
    """SimpleStore - read and update a single on-chain value."""
    configure_logging("DEBUG" if verbose else None)
    ctx.ensure_object(dict)
    ctx.obj["options"] = {
        "contract_address": contract,
        "rpc_url": rpc_url,
        "expected_chain_id": chain_id,
    }


def _settings(ctx: click.Context) -> Settings:
    """Load settings once per invocation; configuration errors are fatal."""
    if "settings" not in ctx.obj:
        try:
            ctx.obj["settings"] = load_settings(**ctx.obj["options"])
        except SimpleStoreError as exc:
            click.secho(f"ERROR: {exc}", fg="red")
            sys.exit(exc.exit_code)
    return ctx.obj["settings"]


def _session_from(ctx: click.Context, **kwargs: Any) -> StorageSession:
    return build_session(
        _settings(ctx), transport=ctx.obj.get("transport"), **kwargs
    )


# ============ Commands ============


@cli.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def init(force: bool) -> None:
    """Generate a wallet key and save it to ~/.simplestore/.env."""
    store = KeyStore()
    if not force:
        try:
            address = store.account().address
        except ValueError:
            pass
        else:
            click.echo(f"Wallet already exists: {address}")
            click.echo("Use --force to replace it.")
            return

    account = store.create()
    click.secho("Wallet created.", fg="green")
    click.echo(f"  Address: {account.address}")
    click.echo(f"  Config:  {store.env_path}")
    click.secho("  Back up this file; the key cannot be recovered.", fg="yellow")


@cli.command()
def whoami() -> None:
    """Show current wallet address."""
    try:
        click.echo(f"Address: {KeyStore().account().address}")
    except ValueError:
        click.echo("No wallet found.")
        click.echo("Run 'simplestore init' or set PRIVATE_KEY in the environment.")
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show wallet, network and the stored value."""
    session = _session_from(ctx)

    async def _status() -> None:
        try:
            await _connect(session)
        except RpcError as exc:
            raise SimpleStoreError(f"Cannot reach node: {exc}") from exc

        if session.reader.enabled:
            await session.reader.read()
        view = session.snapshot()

        click.echo(f"  Address:   {view.account}")
        click.echo(f"  Chain ID:  {view.chain_id}")
        click.echo(
            "  Network:   "
            + click.style(view.network_label, fg="red" if view.wrong_network else "green")
        )
        if view.wrong_network:
            click.echo("  Value:     (switch to the expected network to read)")
        else:
            click.echo(f"  Value:     {view.value_text}")
        session.close()

    _run(_status())


@cli.command()
@click.pass_context
def get(ctx: click.Context) -> None:
    """Print the stored value."""
    session = _session_from(ctx)

    async def _get() -> int:
        await _connect(session)
        _require_network(session)
        value = await session.reader.read()
        session.close()
        if value.raw is None:
            raise RemoteReadError(f"Read unavailable: {value.error}")
        return value.raw

    click.echo(str(_run(_get())))


@cli.command("set")
@click.argument("value")
@click.option("--yes", "-y", is_flag=True, help="Sign without asking")
@click.option("--wait", is_flag=True, help="Wait for the transaction to be mined")
@click.pass_context
def set_value(ctx: click.Context, value: str, yes: bool, wait: bool) -> None:
    """Submit setValue(VALUE)."""
    session = _session_from(ctx, confirm=None if yes else _prompt_confirm, wait=wait)
    session.notifier.subscribe(_echo_notification)

    async def _set() -> None:
        await _connect(session)
        _require_network(session)

        session.input.text = value
        try:
            handle = session.submit()
        except ValidationError as exc:
            raise ValidationError(f"Invalid input value: {exc}") from exc
        if handle is None:
            raise SimpleStoreError("Submission is disabled")

        tx = await handle
        session.close()

        if tx.status is TxStatus.SUCCESS:
            click.echo(f"  TX: {tx.tx_hash}")
            click.echo(f"  Value: {session.snapshot().value_text}")
            return
        raise TransactionError(
            tx.message or "Transaction failed",
            kind=tx.error_kind or ErrorKind.UNKNOWN,
            reason=tx.reason,
        )

    _run(_set())


# ============ Entry Points ============


def main() -> None:
    """SimpleStore CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
