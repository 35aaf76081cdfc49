# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Read-only container state queries keyed by container name."""

from aipod.core.types import ContainerState
from aipod.sandbox.runtime import ContainerRuntime


class ContainerStateProbe:
    """Answers existence and running-state questions about one container.

    "Not found" is a normal ``False``; runtime failures propagate as
    ``RuntimeCommunicationError``.
    """

    def __init__(self, runtime: ContainerRuntime) -> None:
        self.runtime = runtime

    async def exists(self, name: str) -> bool:
        return await self.runtime.container_exists(name)

    async def is_running(self, name: str) -> bool:
        return await self.runtime.container_is_running(name)

    async def state(self, name: str) -> ContainerState:
        """Collapse both queries into a single lifecycle state."""
        if not await self.exists(name):
            return ContainerState.ABSENT
        if await self.is_running(name):
            return ContainerState.RUNNING
        return ContainerState.STOPPED
