"""
Stele CLI

Command-line client that builds, signs, submits and tracks smart-contract
transactions against a ledger node, encoding JSON parameters and decoding
return values through a versioned module schema.

Commands:
  deploy   - Deploy a contract module
  init     - Initialize a contract instance
  update   - Update (or view) a contract instance
  inspect  - Show the contracts and methods in a schema
  whoami   - Show the address of a key file
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .config import load_env
from .theurgy.common import load_keys


# ============ Constants ============

VERSION = "0.3.0"


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("        S T E L E", fg="bright_white", bold=True)
        + click.style(f"        v{VERSION}", dim=True)
    )
    click.secho("        ─── Smart Contract Client ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="stele")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic and driver steps")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Stele - smart contract transactions from the command line."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .theurgy.deploy import deploy
from .theurgy.instantiate import instantiate
from .theurgy.update import update
from .theurgy.inspect import inspect

cli.add_command(deploy)
cli.add_command(instantiate)
cli.add_command(update)
cli.add_command(inspect)


# ============ Identity ============


@cli.command()
@click.option(
    "--account",
    "keys_path",
    envvar="STELE_ACCOUNT",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the account key file",
)
@click.option("--password", envvar="STELE_KEY_PASSWORD", default=None, help="Key file password")
def whoami(keys_path: Path, password: Optional[str]) -> None:
    """Show the account address of a key file."""
    keys = load_keys(keys_path, password)
    click.echo(f"Address: {keys.address}")


# ============ Entry Points ============


def main() -> None:
    """Stele CLI entry point."""
    # Ensure UTF-8 output on Windows (banner symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    load_env()
    cli()


if __name__ == "__main__":
    main()
