# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Custom exceptions for ai-pod."""


class AiPodError(Exception):
    """Base exception for all ai-pod errors."""

    pass


class ConfigurationError(AiPodError):
    """Raised when required configuration is missing or invalid."""

    pass


class RuntimeCommunicationError(AiPodError):
    """Raised when the container runtime cannot be invoked or fails unexpectedly.

    "Not found" answers are not errors; they come back as ``False`` from the
    query methods instead.
    """

    def __init__(self, command: list[str], detail: str, returncode: int | None = None):
        """Initialize RuntimeCommunicationError.

        Args:
            command: The runtime command line that failed.
            detail: Stderr output or the underlying OS error message.
            returncode: Exit code, or None if the process never started.
        """
        self.command = command
        self.detail = detail
        self.returncode = returncode
        suffix = f" (exit {returncode})" if returncode is not None else ""
        super().__init__(f"`{' '.join(command)}` failed{suffix}: {detail}")


class ImageBuildError(AiPodError):
    """Raised when the sandbox image build fails."""

    pass


class ContainerLaunchError(AiPodError):
    """Raised when creating, starting, seeding or attaching to a container fails."""

    pass


class DaemonStartError(AiPodError):
    """Raised when the notification daemon cannot be spawned or recorded."""

    pass
