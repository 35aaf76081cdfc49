# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Deterministic mapping from a workspace path to its sandbox identity."""

import hashlib
from dataclasses import dataclass
from pathlib import Path


DEFAULT_PREFIX = "claude-"
VOLUME_SUFFIX = "-data"
# 6 bytes of sha256 -> 12 hex chars
_DIGEST_BYTES = 6


@dataclass(frozen=True)
class WorkspaceIdentity:
    """Names derived from one canonical workspace path.

    Attributes:
        workspace: Canonical absolute workspace path.
        container_name: Runtime container name for this workspace.
        volume_name: Persistent data volume attached to the container.
    """

    workspace: Path
    container_name: str

    @property
    def volume_name(self) -> str:
        return f"{self.container_name}{VOLUME_SUFFIX}"


def derive_identity(workspace: Path, prefix: str = DEFAULT_PREFIX) -> WorkspaceIdentity:
    """Derive the sandbox identity for a canonical workspace path.

    Args:
        workspace: Absolute, symlink-resolved workspace path.
        prefix: Container name prefix.

    Returns:
        The identity; equal paths always give equal identities.
    """
    digest = hashlib.sha256(str(workspace).encode()).digest()
    return WorkspaceIdentity(
        workspace=workspace,
        container_name=f"{prefix}{digest[:_DIGEST_BYTES].hex()}",
    )


def resolve_workspace(path: Path | str | None = None) -> Path:
    """Canonicalize a user-supplied workspace path.

    Args:
        path: Workspace directory, or None for the current directory.

    Returns:
        Absolute path with symlinks resolved.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    if path is None:
        return Path.cwd().resolve()
    return Path(path).expanduser().resolve(strict=True)
