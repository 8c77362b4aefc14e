"""
Theurgy Inspect - Show what a module schema declares.

Offline: no key file and no node are needed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..codex.layout import describe
from .common import load_schema, stage


def _line(label: str, layout) -> None:
    if layout is not None:
        click.echo(f"    {label}: {describe(layout)}")


@click.command()
@click.argument("schema_path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--contract", default=None, help="Only show this contract")
def inspect(schema_path: Path, contract: Optional[str]) -> None:
    """List the contracts and methods declared by a module schema."""
    schema = load_schema(schema_path)

    click.echo(f"Schema version: {schema.version}")
    names = schema.contract_names()
    if contract is not None:
        with stage("schema lookup failed"):
            schema.method_names(contract)
        names = [contract]

    for name in names:
        entry = schema.contracts[name]
        click.echo("")
        click.secho(f"Contract {name}", fg="cyan")
        if entry.init is not None:
            _line("init parameter", entry.init.parameter)
        _line("state", entry.state)
        _line("event", entry.event)
        for method in schema.method_names(name):
            function = entry.receive[method]
            click.echo(f"  {name}.{method}")
            _line("parameter", function.parameter)
            _line("return", function.return_value)
            _line("error", function.error)
