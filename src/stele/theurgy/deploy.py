"""
Theurgy Deploy - Deploy a versioned contract module.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..pneuma.module import WasmModule
from ..pneuma.tx import build_deploy
from ..utils import expiry_after
from .common import (
    fetch_nonce,
    header,
    load_keys,
    node_options,
    stage,
    submit_and_report,
    transaction_options,
)


@click.command()
@click.argument("module_path", type=click.Path(dir_okay=False, path_type=Path))
@node_options
@transaction_options
def deploy(
    module_path: Path,
    node_url: str,
    keys_path: Path,
    password: Optional[str],
    energy: int,
    expiry: int,
) -> None:
    """
    Deploy a contract module.

    MODULE_PATH is the versioned module produced by the contract build
    (version and length header followed by the Wasm source).
    """
    keys = load_keys(keys_path, password)
    with stage("could not read contract module"):
        module = WasmModule.from_path(module_path)

    header("Deploy", keys, node_url)
    click.echo(f"  Module: {module_path} (v{module.version}, {len(module.source)} bytes)")
    click.echo("")

    nonce = fetch_nonce(keys, node_url)
    intent = build_deploy(
        module,
        sender=keys.address_bytes,
        nonce=nonce,
        expiry=expiry_after(expiry),
        energy=energy,
    )
    submit_and_report(intent, keys, node_url)
