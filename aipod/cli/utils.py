# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Config loading and error reporting for CLI commands."""
import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from aipod.config import PodConfig
from aipod.core.exceptions import AiPodError


T = TypeVar("T")

console = Console()


def print_error(error: Exception, title: str = "ai-pod error") -> None:
    """Display a fatal error in a Rich panel."""
    console.print(Panel(str(error), title=title, border_style="red"))


def load_config(init: bool = False) -> PodConfig:
    """Load configuration, optionally creating the config directory.

    Raises:
        typer.Exit: If the configuration is invalid or cannot be initialized.
    """
    try:
        config = PodConfig()
    except ValidationError as e:
        print_error(e, title="Invalid configuration")
        raise typer.Exit(code=1) from None
    if init:
        init_config(config)
    return config


def init_config(config: PodConfig) -> None:
    """Create the config directory and default recipe, exiting on failure."""
    try:
        config.init()
    except AiPodError as e:
        print_error(e)
        raise typer.Exit(code=1) from None


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a command coroutine, turning ai-pod errors into exit code 1.

    Raises:
        typer.Exit: On any ai-pod error (code 1) or user interrupt (code 130).
    """
    try:
        return asyncio.run(coro)
    except AiPodError as e:
        print_error(e)
        raise typer.Exit(code=1) from None
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        raise typer.Exit(code=130) from None
