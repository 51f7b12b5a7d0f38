from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import typer

from longport_config import ConfigError, ConfigHandle, HttpTransport, RefreshOutcome, resolve_from_env
from longport_config.params import redact

from .. import console
from ..logging_ import setup_log_file

app = typer.Typer(help="Access token commands.")


@app.command("refresh")
def refresh(
    expires_in: int = typer.Option(90, "--expires-in", min=1, help="Validity of the new token in days."),
    env_file: str = typer.Option(".env", "--env-file", help="Env file consulted after the process environment."),
    prefix: str = typer.Option("", "--prefix", help="Prefix for variable names, e.g. LONGPORT_."),
    timeout: float = typer.Option(30.0, "--timeout", help="Seconds to wait for the refresh to finish."),
    show_token: bool = typer.Option(False, "--show-token", help="Print the full new token."),
):
    try:
        params = resolve_from_env(env_file=env_file, prefix=prefix)
    except ConfigError as e:
        console.err(f"Config error: {e}")
        raise typer.Exit(code=2)
    setup_log_file(params.log_path)

    expired_at = datetime.now(timezone.utc) + timedelta(days=expires_in)
    done = threading.Event()
    result: list[RefreshOutcome] = []

    def _on_complete(outcome: RefreshOutcome) -> None:
        result.append(outcome)
        done.set()

    transport = HttpTransport()
    try:
        with ConfigHandle.create(params, transport) as handle:
            handle.refresh_access_token(expired_at, _on_complete)
            # the core enforces no timeout; bound the wait here
            if not done.wait(timeout):
                console.err(f"Token refresh did not finish within {timeout:g}s.")
                raise typer.Exit(code=2)
    except ConfigError as e:
        console.err(f"Token refresh failed: {e}")
        raise typer.Exit(code=2)
    finally:
        transport.close()

    outcome = result[0]
    if not outcome.ok:
        console.err(f"Token refresh failed: {outcome.error}")
        if outcome.error.trace_id:
            console.info(f"trace_id={outcome.error.trace_id}")
        raise typer.Exit(code=2)

    shown = outcome.token if show_token else redact(outcome.token)
    console.ok(f"New access token (expires {expired_at.date().isoformat()}): {shown}")
