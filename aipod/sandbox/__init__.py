# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Sandbox container identity, image caching and lifecycle."""

from aipod.sandbox.identity import WorkspaceIdentity, derive_identity, resolve_workspace
from aipod.sandbox.image import ImageCacheGate
from aipod.sandbox.lifecycle import ContainerLifecycleController
from aipod.sandbox.podman import PodmanRuntime
from aipod.sandbox.probe import ContainerStateProbe
from aipod.sandbox.runtime import ContainerRuntime, ContainerSpec


__all__ = [
    "ContainerLifecycleController",
    "ContainerRuntime",
    "ContainerSpec",
    "ContainerStateProbe",
    "ImageCacheGate",
    "PodmanRuntime",
    "WorkspaceIdentity",
    "derive_identity",
    "resolve_workspace",
]
