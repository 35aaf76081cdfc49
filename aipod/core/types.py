# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Shared value types for the sandbox lifecycle and daemon supervision."""
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ContainerState(StrEnum):
    """Lifecycle state of a sandbox container as reported by the runtime."""

    ABSENT = "absent"
    STOPPED = "stopped"
    RUNNING = "running"


class DaemonState(StrEnum):
    """Classification of the supervised notification daemon."""

    NOT_RUNNING = "not_running"
    STALE_HANDLE = "stale_handle"
    RUNNING_UNHEALTHY = "running_unhealthy"
    RUNNING_HEALTHY = "running_healthy"


class ContainerInfo(BaseModel):
    """One sandbox container row as listed by the runtime."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: str
    created: str


class DaemonStatus(BaseModel):
    """Read-only snapshot of the daemon handle and its probes."""

    model_config = ConfigDict(frozen=True)

    pid: int | None = Field(default=None, description="PID from the PID file")
    alive: bool = Field(default=False, description="Process answered signal 0")
    healthy: bool = Field(default=False, description="GET /health answered 200")
    port: int

    @property
    def state(self) -> DaemonState:
        """Derive the supervisor state from the probe results."""
        if self.pid is None:
            return DaemonState.NOT_RUNNING
        if not self.alive:
            return DaemonState.STALE_HANDLE
        if not self.healthy:
            return DaemonState.RUNNING_UNHEALTHY
        return DaemonState.RUNNING_HEALTHY
