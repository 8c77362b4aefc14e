"""
Theurgy Update - Update a contract instance or view it.

``--kind update`` sends an update transaction and waits for it to be
finalized.  ``--kind view`` invokes the method at the best block without
sending anything: no nonce is consumed and the return value is decoded
with the method's return layout.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from ..codex import ContractMethodRef
from ..codex.layout import TypeLayout
from ..config import VIEW_ENERGY
from ..errors import DecodeError, RpcError
from ..pneuma.effects import ContractAddress, ContractUpdateIssued
from ..pneuma.outcome import interpret
from ..pneuma.rpc import invoke_instance
from ..pneuma.tx import build_update, check_parameter_size
from ..sigil.keys import AccountKeys
from ..utils import expiry_after, parse_hex
from .common import (
    CONTRACT_ADDRESS,
    NAME,
    amount_option,
    fetch_nonce,
    header,
    load_keys,
    load_schema,
    node_options,
    print_outcome,
    read_parameter,
    stage,
    submit_and_report,
    transaction_options,
)

logger = logging.getLogger(__name__)

KINDS = ("update", "view")


@click.command()
@click.option("--address", required=True, type=CONTRACT_ADDRESS, help="Contract instance, e.g. <12, 0>")
@click.option("--contract", required=True, type=NAME, help="Contract name in the schema")
@click.option("--method", required=True, type=NAME, help="Receive method to call")
@click.option(
    "--schema",
    "schema_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Module schema (binary or base64)",
)
@click.option(
    "--parameter",
    "-p",
    "parameter_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with the parameter; omitted means an empty parameter",
)
@click.option(
    "--kind",
    type=click.Choice(KINDS),
    default="update",
    show_default=True,
    help="Send an update transaction, or view without a transaction",
)
@amount_option
@node_options
@transaction_options
def update(
    address: ContractAddress,
    contract: str,
    method: str,
    schema_path: Path,
    parameter_path: Optional[Path],
    kind: str,
    amount: int,
    node_url: str,
    keys_path: Path,
    password: Optional[str],
    energy: int,
    expiry: int,
) -> None:
    """
    Update a contract instance using a JSON parameter and a schema.

    The method is named by its contract and method name in the schema;
    the parameter is encoded with the layout the schema declares for it.
    """
    keys = load_keys(keys_path, password)
    schema = load_schema(schema_path)
    ref = ContractMethodRef(contract=contract, method=method)

    parameter = read_parameter(
        parameter_path, lambda: schema.lookup_parameter_layout(contract, method)
    )
    with stage("schema lookup failed"):
        return_layout = schema.lookup_return_layout(contract, method)

    header("View" if kind == "view" else "Update", keys, node_url)
    click.echo(f"  Contract: {address}")
    click.echo(f"  Method:   {ref.receive_name}")
    if amount:
        click.echo(f"  Amount:   {amount}")
    click.echo("")

    if kind == "view":
        _view(keys, node_url, address, ref, parameter, amount, return_layout)
        return

    nonce = fetch_nonce(keys, node_url)
    with stage("could not build the transaction"):
        intent = build_update(
            address,
            ref.receive_name,
            parameter,
            sender=keys.address_bytes,
            nonce=nonce,
            expiry=expiry_after(expiry),
            energy=energy,
            amount=amount,
        )
    submit_and_report(intent, keys, node_url, return_layout=return_layout)


def _view(
    keys: AccountKeys,
    node_url: str,
    address: ContractAddress,
    ref: ContractMethodRef,
    parameter: bytes,
    amount: int,
    return_layout: Optional[TypeLayout],
) -> None:
    with stage("parameter does not match the schema"):
        check_parameter_size(parameter)

    context = {
        "invoker": {"account": keys.address},
        "contract": address.to_json(),
        "amount": str(amount),
        "method": ref.receive_name,
        "parameter": parameter.hex(),
        "energy": VIEW_ENERGY,
    }
    with stage("could not invoke the instance"):
        result = invoke_instance(context, rpc_url=node_url)

    if result["tag"] == "failure":
        logger.debug("invocation failed: %r", result)
        click.secho("Could not successfully invoke the instance. Check the parameters.", fg="yellow")
        click.echo(f"  Reason: {result.get('reason')}")
        click.echo("No state changes, gracefully exiting.")
        return

    raw = result.get("returnValue")
    with stage("unable to decode the return value"):
        if raw is not None and not isinstance(raw, str):
            raise RpcError(f"Malformed return value from the node: {raw!r}")
        try:
            return_value = parse_hex(raw) if raw is not None else None
        except ValueError as exc:
            raise DecodeError((), str(exc)) from exc
        outcome = interpret(
            ContractUpdateIssued(return_value=return_value),
            return_layout=return_layout,
            read_only=True,
        )
    print_outcome(outcome)
    click.echo("No state changes, gracefully exiting.")
