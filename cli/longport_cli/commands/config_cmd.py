from __future__ import annotations

import typer
from rich.table import Table

from longport_config import ParameterSlot, from_env

from .. import console
from ..logging_ import setup_log_file

app = typer.Typer(help="Inspect the resolved SDK configuration.")


@app.command("show")
def show(
    env_file: str = typer.Option(".env", "--env-file", help="Env file consulted after the process environment."),
    prefix: str = typer.Option("", "--prefix", help="Prefix for variable names, e.g. LONGPORT_."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
):
    slot = ParameterSlot()
    status = from_env(slot, env_file=env_file, prefix=prefix)
    if not status:
        console.err(f"Config error: {status.message}")
        raise typer.Exit(code=2)

    params = slot.value
    setup_log_file(params.log_path)
    data = params.redacted()
    if as_json:
        console.print_json({"params": data, "sources": {k: params.source_of(k).value for k in data}})
        return

    table = Table(title="Resolved configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_column("Source")
    for name, value in data.items():
        table.add_row(name, "-" if value is None else str(value), params.source_of(name).value)
    console.print(table)
