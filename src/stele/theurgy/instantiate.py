"""
Theurgy Instantiate - Initialize a contract instance from a deployed module.

Registered as ``stele init``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..pneuma.tx import build_init
from ..utils import expiry_after
from .common import (
    MODULE_REF,
    NAME,
    amount_option,
    fetch_nonce,
    header,
    load_keys,
    load_schema,
    node_options,
    read_parameter,
    stage,
    submit_and_report,
    transaction_options,
)


@click.command("init")
@click.option("--module-ref", required=True, type=MODULE_REF, help="Reference of the deployed module")
@click.option("--contract", required=True, type=NAME, help="Contract name within the module")
@click.option(
    "--parameter",
    "parameter_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with the init parameter (requires --schema)",
)
@click.option(
    "--schema",
    "schema_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Module schema (binary or base64)",
)
@amount_option
@node_options
@transaction_options
def instantiate(
    module_ref: bytes,
    contract: str,
    parameter_path: Optional[Path],
    schema_path: Optional[Path],
    amount: int,
    node_url: str,
    keys_path: Path,
    password: Optional[str],
    energy: int,
    expiry: int,
) -> None:
    """Initialize a new contract instance."""
    if parameter_path is not None and schema_path is None:
        raise click.UsageError("--parameter requires --schema")

    keys = load_keys(keys_path, password)
    parameter = b""
    if parameter_path is not None:
        schema = load_schema(schema_path)
        parameter = read_parameter(
            parameter_path, lambda: schema.lookup_init_parameter_layout(contract)
        )

    header("Init", keys, node_url)
    click.echo(f"  Module:   {module_ref.hex()}")
    click.echo(f"  Contract: {contract}")
    if amount:
        click.echo(f"  Amount:   {amount}")
    click.echo("")

    nonce = fetch_nonce(keys, node_url)
    with stage("could not build the transaction"):
        intent = build_init(
            module_ref,
            contract,
            parameter,
            sender=keys.address_bytes,
            nonce=nonce,
            expiry=expiry_after(expiry),
            energy=energy,
            amount=amount,
        )
    submit_and_report(intent, keys, node_url)
