# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""PID-file supervision of the background notification daemon.

The PID file is the only cross-invocation record of the daemon. It is read,
checked and rewritten without a lock, so two concurrent ``ensure`` calls can
both start a daemon; the second one fails to bind the port and exits.
"""
import asyncio
import subprocess
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import httpx
import psutil
from loguru import logger

from aipod.core.exceptions import DaemonStartError
from aipod.core.types import DaemonState, DaemonStatus


CommandFactory = Callable[[int], list[str]]


def daemon_command(port: int) -> list[str]:
    """Re-invoke the current interpreter as the notification daemon."""
    return [
        sys.executable, "-m", "aipod",
        "serve-notifications", "--notify-port", str(port),
    ]


class StopOutcome(StrEnum):
    """What ``DaemonSupervisor.stop`` found and did."""

    STOPPED = "stopped"
    STALE_REMOVED = "stale_removed"
    NOT_RUNNING = "not_running"


@dataclass(frozen=True)
class StopResult:
    outcome: StopOutcome
    pid: int | None = None


class DaemonSupervisor:
    """Keeps at most one healthy notification daemon per port.

    Args:
        pid_file: Where the daemon's PID is persisted.
        log_file: Receives the daemon's stdout and stderr.
        command_factory: Builds the daemon command line for a port.
        probe_timeout: Seconds to wait for ``GET /health``.
        grace_period: Seconds to wait after spawning before probing.
    """

    def __init__(
        self,
        pid_file: Path,
        log_file: Path,
        command_factory: CommandFactory = daemon_command,
        probe_timeout: float = 2.0,
        grace_period: float = 0.5,
    ) -> None:
        self.pid_file = pid_file
        self.log_file = log_file
        self.command_factory = command_factory
        self.probe_timeout = probe_timeout
        self.grace_period = grace_period

    def read_pid(self) -> int | None:
        """Return the PID from the PID file, or None if missing or unparsable."""
        try:
            return int(self.pid_file.read_text(encoding="utf-8").strip())
        except (FileNotFoundError, ValueError):
            return None

    def _remove_pid_file(self) -> None:
        self.pid_file.unlink(missing_ok=True)

    @staticmethod
    def is_process_alive(pid: int) -> bool:
        """Signal-0 liveness probe; never affects the process."""
        if pid <= 0:
            return False
        return psutil.pid_exists(pid)

    async def health_check(self, port: int) -> bool:
        """Probe ``GET /health`` on localhost.

        Returns:
            True if the daemon answered 200 within the probe timeout.
        """
        url = f"http://127.0.0.1:{port}/health"
        try:
            async with httpx.AsyncClient(timeout=self.probe_timeout) as client:
                response = await client.get(url)
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    async def status(self, port: int) -> DaemonStatus:
        """Report PID, liveness and health without changing anything."""
        pid = self.read_pid()
        if pid is None:
            return DaemonStatus(port=port)
        alive = self.is_process_alive(pid)
        healthy = alive and await self.health_check(port)
        return DaemonStatus(pid=pid, alive=alive, healthy=healthy, port=port)

    async def classify(self, port: int) -> DaemonState:
        return (await self.status(port)).state

    async def ensure(self, port: int) -> bool:
        """Start the daemon unless a healthy one is already recorded.

        Returns:
            True if a new daemon was spawned.
        """
        state = await self.classify(port)
        if state is DaemonState.RUNNING_HEALTHY:
            logger.debug("Notification server already running", port=port)
            return False
        logger.debug("Notification server needs start", state=str(state))
        await self.start(port)
        return True

    async def start(self, port: int) -> int:
        """Spawn a detached daemon, record its PID and probe it once.

        A failed probe is only a warning; the daemon may still be starting.

        Returns:
            PID of the spawned daemon.

        Raises:
            DaemonStartError: If the log or PID file cannot be written or
                the daemon process cannot be launched.
        """
        cmd = self.command_factory(port)
        try:
            self.pid_file.parent.mkdir(parents=True, exist_ok=True)
            with self.log_file.open("wb") as log:
                child = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=log,
                    stderr=subprocess.STDOUT,
                    start_new_session=True,
                )
            self.pid_file.write_text(str(child.pid), encoding="utf-8")
        except OSError as e:
            raise DaemonStartError(
                f"Failed to spawn notification server `{' '.join(cmd)}` "
                f"(log: {self.log_file}): {e}"
            ) from e

        await asyncio.sleep(self.grace_period)

        if await self.health_check(port):
            logger.info("Notification server started", pid=child.pid, port=port)
        else:
            logger.warning(
                "Notification server started but health check failed; "
                "it may still be initializing",
                pid=child.pid,
                log=str(self.log_file),
            )
        return child.pid

    def stop(self) -> StopResult:
        """Send SIGTERM to a live daemon, or clear a stale PID file.

        Never force-kills.
        """
        pid = self.read_pid()
        if pid is None:
            return StopResult(StopOutcome.NOT_RUNNING)

        if not self.is_process_alive(pid):
            self._remove_pid_file()
            logger.debug("Removed stale PID file", pid=pid)
            return StopResult(StopOutcome.STALE_REMOVED, pid)

        try:
            psutil.Process(pid).terminate()
        except psutil.NoSuchProcess:
            self._remove_pid_file()
            return StopResult(StopOutcome.STALE_REMOVED, pid)
        except psutil.AccessDenied:
            # PID was recycled by a process we do not own
            self._remove_pid_file()
            logger.warning("PID belongs to another user's process; not signalled", pid=pid)
            return StopResult(StopOutcome.STALE_REMOVED, pid)
        self._remove_pid_file()
        logger.info("Notification server stopped", pid=pid)
        return StopResult(StopOutcome.STOPPED, pid)
