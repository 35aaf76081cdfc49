# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Launch flow: image gate, then daemon ensure, then container lifecycle."""
from pathlib import Path

from loguru import logger

from aipod.config import PodConfig
from aipod.core.types import ContainerState
from aipod.sandbox.identity import derive_identity
from aipod.sandbox.image import ImageCacheGate
from aipod.sandbox.lifecycle import ContainerLifecycleController
from aipod.sandbox.runtime import ContainerRuntime
from aipod.server.supervisor import DaemonSupervisor


def create_supervisor(config: PodConfig) -> DaemonSupervisor:
    """Build the daemon supervisor for the configured PID and log files."""
    return DaemonSupervisor(pid_file=config.pid_file, log_file=config.log_file)


async def launch(
    config: PodConfig,
    runtime: ContainerRuntime,
    workspace: Path,
    port: int,
    rebuild: bool = False,
    supervisor: DaemonSupervisor | None = None,
) -> ContainerState:
    """Bring up the workspace sandbox and attach to it.

    Steps run strictly in order; the first failure aborts the launch.

    Args:
        config: Loaded configuration.
        runtime: Container runtime.
        workspace: Canonical workspace path.
        port: Notification daemon port.
        rebuild: Force an image rebuild.
        supervisor: Daemon supervisor; built from ``config`` when omitted.

    Returns:
        The container state observed before launching.
    """
    identity = derive_identity(workspace, prefix=config.container_prefix)
    logger.debug("Workspace identity", container=identity.container_name)

    await ImageCacheGate(config, runtime).ensure(force=rebuild)

    supervisor = supervisor or create_supervisor(config)
    await supervisor.ensure(port)

    controller = ContainerLifecycleController(config, runtime)
    return await controller.launch(identity, port)
