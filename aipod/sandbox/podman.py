# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""CLI-backed container runtime.

Drives podman (or any docker-compatible CLI) through
asyncio.create_subprocess_exec, with no SDK dependency.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections import deque
from pathlib import Path

from loguru import logger

from aipod.core.exceptions import (
    ContainerLaunchError,
    ImageBuildError,
    RuntimeCommunicationError,
)
from aipod.core.types import ContainerInfo
from aipod.logging import BUILD_SOURCE
from aipod.sandbox.runtime import ContainerSpec


# Lowercased stderr fragments podman and docker print for a missing image
_IMAGE_NOT_FOUND = ("image not known", "no such image", "no such object")
_BUILD_TAIL_LINES = 20
_LIST_FORMAT = "{{.Names}}\t{{.Status}}\t{{.CreatedAt}}"


class PodmanRuntime:
    """Runs container operations through the runtime's command line.

    Args:
        binary: Runtime executable, ``podman`` by default.
    """

    def __init__(self, binary: str = "podman") -> None:
        self.binary = binary

    async def _run(self, *args: str) -> tuple[int, str, str]:
        """Run a runtime command to completion, capturing its output.

        Returns:
            Tuple of (returncode, stdout, stderr).

        Raises:
            RuntimeCommunicationError: If the binary cannot be launched.
        """
        cmd = [self.binary, *args]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise RuntimeCommunicationError(cmd, str(e)) from e
        stdout, stderr = await proc.communicate()
        returncode = proc.returncode if proc.returncode is not None else -1
        return (
            returncode,
            stdout.decode(errors="replace"),
            stderr.decode(errors="replace").strip(),
        )

    async def _check(self, *args: str) -> str:
        """Run a command that must succeed and return its stdout."""
        returncode, stdout, stderr = await self._run(*args)
        if returncode != 0:
            raise RuntimeCommunicationError([self.binary, *args], stderr, returncode)
        return stdout

    async def _names_matching(self, name: str, *, all_states: bool) -> list[str]:
        args = ["ps"]
        if all_states:
            args.append("-a")
        args.extend(["--filter", f"name=^{name}$", "--format", "{{.Names}}"])
        stdout = await self._check(*args)
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    async def image_exists(self, image: str) -> bool:
        """Check for a local image via `image inspect`, understood by podman and docker.

        Raises:
            RuntimeCommunicationError: If inspect fails for any reason other
                than a missing image.
        """
        args = ["image", "inspect", "--format", "{{.Id}}", image]
        returncode, _, stderr = await self._run(*args)
        if returncode == 0:
            return True
        if any(fragment in stderr.lower() for fragment in _IMAGE_NOT_FOUND):
            return False
        raise RuntimeCommunicationError([self.binary, *args], stderr, returncode)

    async def build_image(self, image: str, recipe: Path, context: Path) -> None:
        """Build the image, streaming build output to the debug log.

        Raises:
            ImageBuildError: If the build exits non-zero; carries the output tail.
            RuntimeCommunicationError: If the binary cannot be launched.
        """
        cmd = [self.binary, "build", "-t", image, "-f", str(recipe), str(context)]
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise RuntimeCommunicationError(cmd, str(e)) from e

        assert proc.stdout is not None
        tail: deque[str] = deque(maxlen=_BUILD_TAIL_LINES)
        async for line in proc.stdout:
            text = line.decode(errors="replace").rstrip()
            if text:
                tail.append(text)
                logger.debug(text, source=BUILD_SOURCE)
        returncode = await proc.wait()
        if returncode != 0:
            output = "\n".join(tail)
            raise ImageBuildError(
                f"{self.binary} build failed with exit code {returncode}:\n{output}"
            )

    async def container_exists(self, name: str) -> bool:
        return name in await self._names_matching(name, all_states=True)

    async def container_is_running(self, name: str) -> bool:
        return name in await self._names_matching(name, all_states=False)

    async def create_container(self, spec: ContainerSpec) -> None:
        cmd = ["run", "-dit", "--init", "--name", spec.name]
        for volume in spec.volumes:
            cmd.extend(["-v", volume])
        for host in spec.add_hosts:
            cmd.append(f"--add-host={host}")
        for key, value in spec.env.items():
            cmd.extend(["-e", f"{key}={value}"])
        cmd.append(spec.image)

        returncode, _, stderr = await self._run(*cmd)
        if returncode != 0:
            raise ContainerLaunchError(
                f"Failed to create container {spec.name}: {stderr}"
            )
        logger.info("Container created", container=spec.name, image=spec.image)

    async def start_container(self, name: str) -> None:
        returncode, _, stderr = await self._run("start", name)
        if returncode != 0:
            raise ContainerLaunchError(f"Failed to start container {name}: {stderr}")
        logger.info("Container started", container=name)

    async def attach(self, name: str) -> None:
        """Hand the terminal to ``podman attach`` and wait for the session to end.

        Raises:
            ContainerLaunchError: If attach exits non-zero.
            RuntimeCommunicationError: If the binary cannot be launched.
        """
        cmd = [self.binary, "attach", name]
        try:
            # stdin/stdout/stderr inherited from this process
            proc = await asyncio.create_subprocess_exec(*cmd)
        except OSError as e:
            raise RuntimeCommunicationError(cmd, str(e)) from e

        try:
            returncode = await proc.wait()
        finally:
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.terminate()
                    await proc.wait()

        if returncode != 0:
            raise ContainerLaunchError(
                f"Failed to attach to container {name} (exit {returncode})"
            )

    async def copy_into(self, name: str, source: Path, destination: str) -> None:
        returncode, _, stderr = await self._run("cp", str(source), f"{name}:{destination}")
        if returncode != 0:
            raise ContainerLaunchError(
                f"Failed to copy {source.name} into {name}: {stderr}"
            )

    async def stop_container(self, name: str) -> None:
        await self._check("stop", name)

    async def remove_container(self, name: str) -> None:
        await self._check("rm", name)

    async def remove_volume(self, name: str) -> None:
        await self._check("volume", "rm", name)

    async def list_containers(self, prefix: str) -> list[ContainerInfo]:
        stdout = await self._check(
            "ps", "-a", "--filter", f"name=^{prefix}", "--format", _LIST_FORMAT,
        )
        containers: list[ContainerInfo] = []
        for line in stdout.splitlines():
            if not line.strip():
                continue
            parts = line.split("\t")
            parts += [""] * (3 - len(parts))
            containers.append(
                ContainerInfo(name=parts[0], status=parts[1], created=parts[2])
            )
        return containers
