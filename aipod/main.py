# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""ai-pod command line."""
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from aipod.cli.utils import console, init_config, load_config, print_error, run_async
from aipod.config import PodConfig
from aipod.core.orchestrator import launch
from aipod.logging import configure_logging
from aipod.sandbox.credentials import check_credentials
from aipod.sandbox.identity import derive_identity, resolve_workspace
from aipod.sandbox.image import ImageCacheGate
from aipod.sandbox.lifecycle import ContainerLifecycleController
from aipod.sandbox.podman import PodmanRuntime
from aipod.server.cli import (
    NotifyPortOption,
    serve_notifications_command,
    server_status_command,
    stop_server_command,
)


app = typer.Typer(help="Launch a per-workspace sandbox container with host notifications.")
app.command(name="serve-notifications", help="Run the notification daemon (internal).")(
    serve_notifications_command
)
app.command(name="stop-server", help="Stop the background notification daemon.")(
    stop_server_command
)
app.command(name="server-status", help="Show notification daemon status.")(
    server_status_command
)


def _resolve_workspace_or_exit(workdir: Path | None) -> Path:
    try:
        return resolve_workspace(workdir)
    except FileNotFoundError as e:
        print_error(e, title="Workspace not found")
        raise typer.Exit(code=1) from None


def _runtime(config: PodConfig) -> PodmanRuntime:
    return PodmanRuntime(binary=config.runtime_binary)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    workdir: Annotated[
        Path | None,
        typer.Option("--workdir", "-w", help="Workspace directory (default: current directory)"),
    ] = None,
    rebuild: Annotated[
        bool,
        typer.Option("--rebuild", help="Force a rebuild of the container image"),
    ] = False,
    no_credential_check: Annotated[
        bool,
        typer.Option("--no-credential-check", help="Skip the credential file scan"),
    ] = False,
    notify_port: NotifyPortOption = None,
) -> None:
    """Launch or reattach to the sandbox for a workspace."""
    config = load_config()
    configure_logging(config.log_level)

    # Skip if subcommand is invoked
    if ctx.invoked_subcommand is not None:
        return

    init_config(config)
    port = notify_port if notify_port is not None else config.notify_port

    workspace = _resolve_workspace_or_exit(workdir)
    console.print(f"[blue]Workspace:[/blue] {workspace}")

    if not no_credential_check and not check_credentials(workspace, console=console):
        console.print("[dim]Aborted.[/dim]")
        raise typer.Exit(0)

    run_async(launch(config, _runtime(config), workspace, port, rebuild=rebuild))


@app.command(name="build")
def build_command(
    rebuild: Annotated[
        bool,
        typer.Option("--rebuild", help="Rebuild even if the image is up to date"),
    ] = False,
) -> None:
    """Build the container image if the recipe changed."""
    config = load_config(init=True)
    gate = ImageCacheGate(config, _runtime(config))
    built = run_async(gate.ensure(force=rebuild))
    if built:
        console.print("[bold green]Image built successfully.[/bold green]")
    else:
        console.print("[green]Container image is up to date.[/green]")


@app.command(name="list")
def list_command() -> None:
    """List all sandbox containers."""
    config = load_config()
    controller = ContainerLifecycleController(config, _runtime(config))
    containers = run_async(controller.list())

    if not containers:
        console.print("[yellow]No sandbox containers found.[/yellow]")
        return

    table = Table(title="Sandbox containers")
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Created")
    for info in containers:
        table.add_row(info.name, info.status, info.created)
    console.print(table)


@app.command(name="clean")
def clean_command(
    workdir: Annotated[
        Path | None,
        typer.Argument(help="Workspace directory (default: current directory)"),
    ] = None,
) -> None:
    """Remove the workspace's container and its data volume."""
    config = load_config()
    workspace = _resolve_workspace_or_exit(workdir)
    identity = derive_identity(workspace, prefix=config.container_prefix)
    controller = ContainerLifecycleController(config, _runtime(config))

    if run_async(controller.clean(identity)):
        console.print(f"[green]Container removed:[/green] {identity.container_name}")
    else:
        console.print(
            f"[yellow]Container does not exist:[/yellow] {identity.container_name}"
        )


if __name__ == "__main__":
    app()
