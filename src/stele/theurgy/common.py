"""
Shared plumbing for the transaction commands.

Every command runs the same sequence: load keys, fetch the nonce, build
the intent, sign, submit, await finalization and print the outcome.  Each
step runs inside ``stage()`` so that a failure names the step that broke.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

import click

from ..codex import VersionedModuleSchema, encode, load_schema_bytes, parse_schema
from ..codex.layout import TypeLayout
from ..config import DEFAULT_ENERGY, DEFAULT_EXPIRY_SECONDS, DEFAULT_NODE_URL
from ..errors import FileIOError, ParseError, SteleError
from ..pneuma.effects import ContractAddress
from ..pneuma.outcome import Outcome, interpret
from ..pneuma.rpc import get_account_nonce
from ..pneuma.tx import TransactionIntent, send_and_await
from ..sigil.keys import AccountKeys, load_account

logger = logging.getLogger(__name__)

_CONTRACT_ADDRESS_RE = re.compile(r"^<?\s*(\d+)\s*(?:,\s*(\d+)\s*)?>?$")
_MODULE_REF_RE = re.compile(r"^[0-9a-fA-F]{64}$")


# ============ Parameter Types ============


class ContractAddressType(click.ParamType):
    """``<index, subindex>``, ``index,subindex`` or a bare index."""

    name = "contract-address"

    def convert(self, value, param, ctx):
        if isinstance(value, ContractAddress):
            return value
        match = _CONTRACT_ADDRESS_RE.match(value.strip())
        if not match:
            self.fail(f"{value!r} is not a contract address like <12, 0>", param, ctx)
        index, subindex = match.groups()
        return ContractAddress(index=int(index), subindex=int(subindex or 0))


class ModuleRefType(click.ParamType):
    """A module reference: 64 hex characters."""

    name = "module-ref"

    def convert(self, value, param, ctx):
        if isinstance(value, bytes):
            return value
        if not _MODULE_REF_RE.match(value):
            self.fail(f"{value!r} is not a 64 character hex module reference", param, ctx)
        return bytes.fromhex(value)


class NameType(click.ParamType):
    """A contract or method name: printable ASCII without whitespace."""

    name = "name"

    def convert(self, value, param, ctx):
        if not value or not value.isascii() or not value.isprintable() or " " in value:
            self.fail(f"{value!r} is not a printable ASCII name", param, ctx)
        return value


CONTRACT_ADDRESS = ContractAddressType()
MODULE_REF = ModuleRefType()
NAME = NameType()


# ============ Shared Options ============


def node_options(func: Callable) -> Callable:
    """Options every command that talks to a node accepts."""
    options = [
        click.option(
            "--node",
            "node_url",
            envvar="STELE_NODE",
            default=DEFAULT_NODE_URL,
            show_default=True,
            help="JSON-RPC endpoint of the node",
        ),
        click.option(
            "--account",
            "keys_path",
            envvar="STELE_ACCOUNT",
            required=True,
            type=click.Path(dir_okay=False, path_type=Path),
            help="Path to the account key file",
        ),
        click.option(
            "--password",
            envvar="STELE_KEY_PASSWORD",
            default=None,
            help="Password of an encrypted key file",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def transaction_options(func: Callable) -> Callable:
    """Options for commands that send a transaction."""
    options = [
        click.option(
            "--energy",
            default=DEFAULT_ENERGY,
            show_default=True,
            type=click.IntRange(min=0),
            help="Energy budget for the transaction",
        ),
        click.option(
            "--expiry",
            default=DEFAULT_EXPIRY_SECONDS,
            show_default=True,
            type=click.IntRange(min=1),
            help="Seconds until the transaction expires",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


amount_option = click.option(
    "--amount",
    default=0,
    show_default=True,
    type=click.IntRange(min=0),
    help="Amount (in micro units) sent with the call",
)


# ============ Stages ============


@contextmanager
def stage(name: str) -> Iterator[None]:
    """Abort the command with a stage-named message on any stele error."""
    try:
        yield
    except SteleError as exc:
        logger.debug("stage %r failed", name, exc_info=True)
        click.secho(f"ERROR: {name}: {exc}", fg="red")
        sys.exit(exc.exit_code)


def load_keys(keys_path: Path, password: Optional[str]) -> AccountKeys:
    with stage("could not read the keys file"):
        return load_account(keys_path, password=password)


def load_schema(schema_path: Path) -> VersionedModuleSchema:
    with stage("unable to read the schema file"):
        try:
            raw = schema_path.read_bytes()
        except OSError as exc:
            raise FileIOError(f"Could not read {schema_path}: {exc}") from exc
    with stage("unable to parse the schema"):
        return parse_schema(load_schema_bytes(raw))


def read_parameter(parameter_path: Optional[Path], layout_for: Callable[[], TypeLayout]) -> bytes:
    """
    Read a JSON parameter file and encode it.

    Args:
        parameter_path: JSON file, or None for an empty parameter
        layout_for: Returns the layout to encode with; only called when a
            parameter file is given

    Returns:
        Encoded parameter bytes
    """
    if parameter_path is None:
        return b""
    with stage("unable to read parameter file"):
        try:
            raw = parameter_path.read_bytes()
        except OSError as exc:
            raise FileIOError(f"Could not read {parameter_path}: {exc}") from exc
    with stage("unable to parse parameter JSON"):
        try:
            value = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise ParseError(f"{parameter_path} is not UTF-8 text: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ParseError(f"{parameter_path}: {exc}") from exc
    with stage("schema lookup failed"):
        layout = layout_for()
    with stage("parameter does not match the schema"):
        return encode(value, layout)


def fetch_nonce(keys: AccountKeys, node_url: str) -> int:
    with stage("could not fetch the account nonce"):
        return get_account_nonce(keys.address, rpc_url=node_url)


def print_outcome(outcome: Outcome) -> None:
    if outcome.rejected:
        click.secho("REJECTED: the ledger did not apply the transaction", fg="yellow")
    for line in outcome.lines:
        click.echo(f"  {line}")


def submit_and_report(
    intent: TransactionIntent,
    keys: AccountKeys,
    node_url: str,
    return_layout: Optional[TypeLayout] = None,
) -> Outcome:
    """Sign, submit, wait for finalization and print what happened."""

    def _on_submitted(tx_hash: str) -> None:
        click.echo(
            f"Transaction {tx_hash} submitted (nonce = {intent.header.nonce})."
        )
        click.echo("Waiting for finalization...")

    with stage("transaction failed"):
        finalized = send_and_await(
            intent, keys, rpc_url=node_url, on_submitted=_on_submitted
        )
    click.echo(f"Transaction finalized in block {finalized.block_hash}.")

    with stage("unable to decode the outcome"):
        outcome = interpret(finalized.effect, return_layout=return_layout)
    print_outcome(outcome)
    return outcome


def header(title: str, keys: AccountKeys, node_url: str) -> None:
    click.echo(f"=== Stele {title} ===")
    click.echo("")
    click.echo(f"  Sender: {keys.address}")
    click.echo(f"  Node:   {node_url}")