# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""ContainerRuntime protocol: the control surface of the external runtime."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from aipod.core.types import ContainerInfo


@dataclass(frozen=True)
class ContainerSpec:
    """Everything needed to create one sandbox container.

    Attributes:
        name: Container name.
        image: Image tag to run.
        volumes: ``source:target[:opts]`` mount specifications.
        add_hosts: ``host:address`` entries for the container's hosts file.
        env: Environment variables set inside the container.
    """

    name: str
    image: str
    volumes: list[str] = field(default_factory=list)
    add_hosts: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class ContainerRuntime(Protocol):
    """Query and mutate operations consumed from the container runtime.

    Query methods answer "not found" with ``False``; they raise
    ``RuntimeCommunicationError`` only when the runtime itself fails.
    """

    async def image_exists(self, image: str) -> bool:
        """Check whether ``image`` is present locally."""
        ...

    async def build_image(self, image: str, recipe: Path, context: Path) -> None:
        """Build ``image`` from ``recipe`` with ``context`` as build context.

        Raises:
            ImageBuildError: If the build fails.
        """
        ...

    async def container_exists(self, name: str) -> bool:
        """Check whether a container named exactly ``name`` exists in any state."""
        ...

    async def container_is_running(self, name: str) -> bool:
        """Check whether a container named exactly ``name`` is running."""
        ...

    async def create_container(self, spec: ContainerSpec) -> None:
        """Create and start a detached, interactive container from ``spec``."""
        ...

    async def start_container(self, name: str) -> None:
        """Start a stopped container."""
        ...

    async def attach(self, name: str) -> None:
        """Attach the current terminal to the container until the session ends."""
        ...

    async def copy_into(self, name: str, source: Path, destination: str) -> None:
        """Copy a host file into the container at ``destination``."""
        ...

    async def stop_container(self, name: str) -> None:
        """Stop a running container gracefully."""
        ...

    async def remove_container(self, name: str) -> None:
        """Remove a stopped container."""
        ...

    async def remove_volume(self, name: str) -> None:
        """Remove a named volume."""
        ...

    async def list_containers(self, prefix: str) -> list[ContainerInfo]:
        """List every container whose name starts with ``prefix``."""
        ...
