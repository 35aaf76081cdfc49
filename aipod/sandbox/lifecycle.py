# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Create-if-absent, start-if-stopped, attach-always container lifecycle.

One container per workspace identity. Nothing is rolled back on failure: a
half-created container is picked up by the next launch's state dispatch.
"""

from loguru import logger

from aipod.config import PodConfig
from aipod.core.exceptions import RuntimeCommunicationError
from aipod.core.types import ContainerInfo, ContainerState
from aipod.sandbox.identity import WorkspaceIdentity
from aipod.sandbox.materialize import SettingsMaterializer
from aipod.sandbox.probe import ContainerStateProbe
from aipod.sandbox.runtime import ContainerRuntime, ContainerSpec


CONTAINER_WORKDIR = "/app"
CONTAINER_CLAUDE_DIR = "/home/claude/.claude"


class ContainerLifecycleController:
    """Drives a workspace's sandbox container to the attached state.

    Args:
        config: Image tag, naming prefix and host alias.
        runtime: Container runtime control surface.
        materializer: Writes the runtime files seeded into new containers.
    """

    def __init__(
        self,
        config: PodConfig,
        runtime: ContainerRuntime,
        materializer: SettingsMaterializer | None = None,
    ) -> None:
        self.config = config
        self.runtime = runtime
        self.probe = ContainerStateProbe(runtime)
        self.materializer = materializer or SettingsMaterializer(config)

    def build_spec(self, identity: WorkspaceIdentity, port: int) -> ContainerSpec:
        """Describe the container to create for ``identity``."""
        alias = self.config.host_alias
        return ContainerSpec(
            name=identity.container_name,
            image=self.config.image_name,
            volumes=[
                f"{identity.workspace}:{CONTAINER_WORKDIR}:Z",
                f"{identity.volume_name}:{CONTAINER_CLAUDE_DIR}",
            ],
            add_hosts=[f"{alias}:host-gateway"],
            env={
                "HOST_GATEWAY": alias,
                "NOTIFY_URL": f"http://{alias}:{port}/notify",
            },
        )

    async def _create(self, identity: WorkspaceIdentity, port: int) -> None:
        claude_md, settings = self.materializer.materialize(port)
        logger.info("Creating container", container=identity.container_name)
        await self.runtime.create_container(self.build_spec(identity, port))
        # Container must exist before the copy and be seeded before first attach
        await self.runtime.copy_into(
            identity.container_name, claude_md, f"{CONTAINER_CLAUDE_DIR}/CLAUDE.md"
        )
        await self.runtime.copy_into(
            identity.container_name, settings, f"{CONTAINER_CLAUDE_DIR}/settings.json"
        )

    async def launch(self, identity: WorkspaceIdentity, port: int) -> ContainerState:
        """Create or reuse the workspace container, then attach to it.

        Args:
            identity: Workspace identity naming the container and volume.
            port: Notification daemon port exported to the container.

        Returns:
            The state the container was found in before launching.

        Raises:
            ContainerLaunchError: If create, start, copy or attach fails.
            RuntimeCommunicationError: If the runtime cannot be queried.
        """
        name = identity.container_name
        state = await self.probe.state(name)

        if state is ContainerState.ABSENT:
            await self._create(identity, port)
        else:
            logger.info("Found existing container", container=name, state=str(state))
            if state is ContainerState.STOPPED:
                await self.runtime.start_container(name)

        logger.info("Attaching to container", container=name)
        await self.runtime.attach(name)
        return state

    async def list(self) -> list[ContainerInfo]:
        """List every container following the sandbox naming convention."""
        return await self.runtime.list_containers(self.config.container_prefix)

    async def clean(self, identity: WorkspaceIdentity) -> bool:
        """Stop and remove the workspace container and its data volume.

        Returns:
            False if there was no container to remove.
        """
        name = identity.container_name
        state = await self.probe.state(name)
        if state is ContainerState.ABSENT:
            return False

        if state is ContainerState.RUNNING:
            await self.runtime.stop_container(name)
        await self.runtime.remove_container(name)

        try:
            await self.runtime.remove_volume(identity.volume_name)
        except RuntimeCommunicationError as e:
            logger.warning(
                "Volume not removed",
                volume=identity.volume_name,
                error=e.detail,
            )
        logger.info("Container removed", container=name)
        return True
