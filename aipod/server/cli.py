# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""CLI commands for the notification daemon."""
from typing import Annotated

import typer

from aipod.cli.utils import console, load_config, run_async
from aipod.core.orchestrator import create_supervisor
from aipod.server.main import run_server
from aipod.server.supervisor import StopOutcome


NotifyPortOption = Annotated[
    int | None,
    typer.Option("--notify-port", help="Notification daemon port (default: from config/env)"),
]


def serve_notifications_command(notify_port: NotifyPortOption = None) -> None:
    """Run the notification daemon in the foreground."""
    config = load_config()
    port = notify_port if notify_port is not None else config.notify_port
    try:
        run_server(port)
    except KeyboardInterrupt:
        console.print("\nNotification server stopped.")


def stop_server_command() -> None:
    """Stop the background notification daemon."""
    config = load_config()
    result = create_supervisor(config).stop()

    if result.outcome is StopOutcome.STOPPED:
        console.print(f"[green]Notification server stopped.[/green] (PID {result.pid})")
    elif result.outcome is StopOutcome.STALE_REMOVED:
        console.print("[yellow]Server was not running (stale PID file removed).[/yellow]")
    else:
        console.print("[yellow]No PID file found; server is not running.[/yellow]")


def server_status_command(notify_port: NotifyPortOption = None) -> None:
    """Show PID, liveness and health of the notification daemon."""
    config = load_config()
    port = notify_port if notify_port is not None else config.notify_port
    status = run_async(create_supervisor(config).status(port))

    if status.pid is None:
        console.print("[yellow]No PID file found; server is not running.[/yellow]")
        return

    process = "[green]running[/green]" if status.alive else "[red]dead[/red]"
    health = "[green]ok[/green]" if status.healthy else "[red]unreachable[/red]"
    console.print(f"PID:     {status.pid}")
    console.print(f"Process: {process}")
    console.print(f"Health:  {health}")
    console.print(f"Port:    {status.port}")
