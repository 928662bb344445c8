"""
upx-wallet CLI

Command-line front end for an ``ultrapoint-wallet-rpc`` daemon.

Connection options fall back to ~/.upxwallet/.env and the UPX_WALLET_*
environment variables. Every command prints the daemon's reply as JSON
and exits non-zero when the call did not succeed:

  2  daemon returned an RPC error (or an unexpected response)
  3  daemon unreachable
  4  response could not be parsed
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

import click
from loguru import logger

from . import __version__
from .config import load_config
from .errors import WalletError
from .rpc.outcome import RpcOutcome
from .rpc.request import TransferOptions
from .wallet import Wallet


# ============ Helpers ============


def _wallet(ctx: click.Context) -> Wallet:
    obj = ctx.obj
    return Wallet.from_config(obj["config"], transport=obj.get("transport"))


def _run(ctx: click.Context, call: Callable[[Wallet], Awaitable[RpcOutcome]]) -> None:
    """Run one wallet coroutine, print its outcome, exit with its code."""
    outcome = asyncio.run(call(_wallet(ctx)))
    click.echo(json.dumps(outcome.to_dict(), indent=2, default=str))
    if outcome.ok:
        return
    try:
        outcome.unwrap()
    except WalletError as exc:
        click.secho(f"Error: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
    logger.enable("upxwallet")


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=__version__, prog_name="upx-wallet")
@click.option("--host", default=None, help="Wallet RPC host [UPX_WALLET_HOST, default 127.0.0.1]")
@click.option("--port", type=int, default=None, help="Wallet RPC port [UPX_WALLET_PORT, default 17092]")
@click.option("--username", default=None, help="Digest auth user [UPX_WALLET_USERNAME]")
@click.option("--password", default=None, help="Digest auth password [UPX_WALLET_PASSWORD]")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds (default 30)")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default ~/.upxwallet/.env)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log requests to stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    host: Optional[str],
    port: Optional[int],
    username: Optional[str],
    password: Optional[str],
    timeout: Optional[float],
    env_file: Optional[Path],
    verbose: bool,
) -> None:
    """Talk to an Ultrapoint wallet daemon over JSON-RPC."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(
            env_file,
            host=host,
            port=port,
            username=username,
            password=password,
            timeout=timeout,
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


# ============ Queries ============


@cli.command()
@click.pass_context
def balance(ctx: click.Context) -> None:
    """Show wallet balance (atomic units)."""
    _run(ctx, lambda w: w.get_balance())


@cli.command()
@click.pass_context
def address(ctx: click.Context) -> None:
    """Show wallet address."""
    _run(ctx, lambda w: w.get_address())


@cli.command()
@click.pass_context
def height(ctx: click.Context) -> None:
    """Show current block height."""
    _run(ctx, lambda w: w.get_height())


@cli.command("query-key")
@click.argument("key_type", type=click.Choice(["mnemonic", "view_key"]))
@click.pass_context
def query_key(ctx: click.Context, key_type: str) -> None:
    """Show the mnemonic seed or the private view key."""
    _run(ctx, lambda w: w.query_key(key_type))


# ============ Transfers ============


@cli.command()
@click.argument("destination")
@click.argument("amount")
@click.option("--mixin", type=int, default=None, help="Ring size (default 4)")
@click.option("--unlock-time", type=int, default=None, help="Unlock time (default 0)")
@click.option("--pid", default=None, help="Payment ID")
@click.option("--priority", type=int, default=None, help="Fee priority (default 0)")
@click.option("--do-not-relay", is_flag=True, default=None, help="Build without broadcasting")
@click.option("--get-tx-key", is_flag=True, default=None, help="Return the transaction key")
@click.option("--get-tx-hex", is_flag=True, default=None, help="Return the raw transaction")
@click.option("--split", is_flag=True, help="Use transfer_split")
@click.option("--new-algorithm", is_flag=True, default=None, help="New split algorithm (with --split)")
@click.pass_context
def transfer(
    ctx: click.Context,
    destination: str,
    amount: str,
    mixin: Optional[int],
    unlock_time: Optional[int],
    pid: Optional[str],
    priority: Optional[int],
    do_not_relay: Optional[bool],
    get_tx_key: Optional[bool],
    get_tx_hex: Optional[bool],
    split: bool,
    new_algorithm: Optional[bool],
) -> None:
    """Send AMOUNT UPX to DESTINATION."""
    options = TransferOptions(
        destinations={"address": destination, "amount": amount},
        mixin=mixin,
        unlock_time=unlock_time,
        pid=pid,
        priority=priority,
        do_not_relay=do_not_relay,
        get_tx_key=get_tx_key,
        get_tx_hex=get_tx_hex,
        new_algorithm=new_algorithm,
    )
    if split:
        _run(ctx, lambda w: w.transfer_split(options))
    else:
        _run(ctx, lambda w: w.transfer(options))


@cli.command("sweep-dust")
@click.pass_context
def sweep_dust(ctx: click.Context) -> None:
    """Send all dust outputs back to the wallet."""
    _run(ctx, lambda w: w.sweep_dust())


@cli.command("sweep-all")
@click.argument("destination")
@click.pass_context
def sweep_all(ctx: click.Context, destination: str) -> None:
    """Send all unlocked balance to DESTINATION."""
    _run(ctx, lambda w: w.sweep_all(destination))


# ============ Payments ============


@cli.command()
@click.argument("pid")
@click.pass_context
def payments(ctx: click.Context, pid: str) -> None:
    """List incoming payments for a payment ID."""
    _run(ctx, lambda w: w.get_payments(pid))


@cli.command("bulk-payments")
@click.argument("pids", nargs=-1, required=True)
@click.option("--min-height", type=int, default=0, show_default=True, help="Minimum block height")
@click.pass_context
def bulk_payments(ctx: click.Context, pids: tuple[str, ...], min_height: int) -> None:
    """List incoming payments for several payment IDs."""
    _run(ctx, lambda w: w.get_bulk_payments(list(pids), min_height))


@cli.command()
@click.option(
    "--type",
    "transfer_type",
    type=click.Choice(["all", "available", "unavailable"]),
    default="all",
    show_default=True,
)
@click.pass_context
def incoming(ctx: click.Context, transfer_type: str) -> None:
    """List incoming transfers."""
    _run(ctx, lambda w: w.incoming_transfers(transfer_type))


# ============ Integrated Addresses ============


@cli.command("make-integrated")
@click.argument("pid")
@click.pass_context
def make_integrated(ctx: click.Context, pid: str) -> None:
    """Build an integrated address from the wallet address and PID."""
    _run(ctx, lambda w: w.make_integrated_address(pid))


@cli.command("split-integrated")
@click.argument("integrated_address")
@click.pass_context
def split_integrated(ctx: click.Context, integrated_address: str) -> None:
    """Show the standard address and payment ID of an integrated address."""
    _run(ctx, lambda w: w.split_integrated_address(integrated_address))


# ============ Wallet Files ============


@cli.command()
@click.pass_context
def store(ctx: click.Context) -> None:
    """Save the wallet file."""
    _run(ctx, lambda w: w.store())


@cli.command("create-wallet")
@click.option("--filename", default="upx_wallet", show_default=True)
@click.option("--wallet-password", default="ultrapoint", show_default=True)
@click.option("--language", default="English", show_default=True)
@click.pass_context
def create_wallet(ctx: click.Context, filename: str, wallet_password: str, language: str) -> None:
    """Create a new wallet file on the daemon."""
    _run(ctx, lambda w: w.create_wallet(filename, wallet_password, language))


@cli.command("open-wallet")
@click.option("--filename", default="upx_wallet", show_default=True)
@click.option("--wallet-password", default="ultrapoint", show_default=True)
@click.pass_context
def open_wallet(ctx: click.Context, filename: str, wallet_password: str) -> None:
    """Open an existing wallet file on the daemon."""
    _run(ctx, lambda w: w.open_wallet(filename, wallet_password))


@cli.command()
@click.pass_context
def stop(ctx: click.Context) -> None:
    """Stop the wallet daemon."""
    _run(ctx, lambda w: w.stop_wallet())


# ============ Entry Points ============


def main() -> None:
    """upx-wallet entry point."""
    cli()


if __name__ == "__main__":
    main()
