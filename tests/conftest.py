# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Shared fixtures and helpers for all tests.

Provides an in-memory ``FakeRuntime`` standing in for the container runtime
CLI, and a ``PodConfig`` rooted in a temporary directory.
"""
from collections.abc import Callable
from pathlib import Path

import pytest

from aipod.config import PodConfig
from aipod.core.exceptions import (
    ContainerLaunchError,
    ImageBuildError,
    RuntimeCommunicationError,
)
from aipod.core.types import ContainerInfo, ContainerState
from aipod.sandbox.runtime import ContainerSpec


MUTATING_OPS = frozenset({
    "build_image",
    "create_container",
    "start_container",
    "copy_into",
    "stop_container",
    "remove_container",
    "remove_volume",
})


class FakeRuntime:
    """In-memory container runtime that records every call.

    Attributes:
        images: Locally present image tags.
        containers: Container name to lifecycle state.
        volumes: Named volumes that exist.
        specs: Creation spec per container name.
        copied: Files copied into containers, keyed by (name, destination).
        calls: Ordered (operation, target) tuples.
        fail_on: Operation names that should fail.
    """

    def __init__(self) -> None:
        self.images: set[str] = set()
        self.containers: dict[str, ContainerState] = {}
        self.volumes: set[str] = set()
        self.specs: dict[str, ContainerSpec] = {}
        self.copied: dict[tuple[str, str], str] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()

    def count(self, op: str) -> int:
        return sum(1 for name, _ in self.calls if name == op)

    @property
    def mutations(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] in MUTATING_OPS]

    def add_container(self, name: str, state: ContainerState) -> None:
        self.containers[name] = state
        self.volumes.add(f"{name}-data")

    def _record(self, op: str, target: str) -> None:
        self.calls.append((op, target))
        if op in self.fail_on:
            if op == "build_image":
                raise ImageBuildError("build failed")
            if op in {"stop_container", "remove_container", "remove_volume"}:
                raise RuntimeCommunicationError(["fake", op, target], "boom", 125)
            raise ContainerLaunchError(f"{op} failed for {target}")

    async def image_exists(self, image: str) -> bool:
        self._record("image_exists", image)
        return image in self.images

    async def build_image(self, image: str, recipe: Path, context: Path) -> None:
        self._record("build_image", image)
        self.images.add(image)

    async def container_exists(self, name: str) -> bool:
        self._record("container_exists", name)
        return name in self.containers

    async def container_is_running(self, name: str) -> bool:
        self._record("container_is_running", name)
        return self.containers.get(name) is ContainerState.RUNNING

    async def create_container(self, spec: ContainerSpec) -> None:
        self._record("create_container", spec.name)
        if spec.name in self.containers:
            raise ContainerLaunchError(f"name {spec.name} is already in use")
        self.specs[spec.name] = spec
        self.add_container(spec.name, ContainerState.RUNNING)

    async def start_container(self, name: str) -> None:
        self._record("start_container", name)
        self.containers[name] = ContainerState.RUNNING

    async def attach(self, name: str) -> None:
        self._record("attach", name)

    async def copy_into(self, name: str, source: Path, destination: str) -> None:
        self._record("copy_into", name)
        if name not in self.containers:
            raise ContainerLaunchError(f"no container {name}")
        self.copied[(name, destination)] = source.read_text(encoding="utf-8")

    async def stop_container(self, name: str) -> None:
        self._record("stop_container", name)
        self.containers[name] = ContainerState.STOPPED

    async def remove_container(self, name: str) -> None:
        self._record("remove_container", name)
        del self.containers[name]

    async def remove_volume(self, name: str) -> None:
        self._record("remove_volume", name)
        if name not in self.volumes:
            raise RuntimeCommunicationError(["fake", "volume", "rm", name], "no such volume", 1)
        self.volumes.discard(name)

    async def list_containers(self, prefix: str) -> list[ContainerInfo]:
        self._record("list_containers", prefix)
        return [
            ContainerInfo(name=name, status=str(state), created="2025-01-01 12:00:00")
            for name, state in sorted(self.containers.items())
            if name.startswith(prefix)
        ]


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    """Empty in-memory runtime."""
    return FakeRuntime()


@pytest.fixture
def pod_config(tmp_path: Path) -> PodConfig:
    """PodConfig rooted in tmp_path with the default recipe written."""
    config = PodConfig(
        home_dir=tmp_path / "home",
        config_dir=tmp_path / "ai-pod",
    )
    config.init()
    return config


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An existing, canonical workspace directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def write_recipe(pod_config: PodConfig) -> Callable[[str], None]:
    """Factory fixture that replaces the recipe contents."""
    def _write(content: str) -> None:
        pod_config.dockerfile_path.write_text(content, encoding="utf-8")
    return _write
