# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Pre-launch scan for credential files that would be visible in the sandbox."""
import os
from pathlib import Path

import typer
from rich.console import Console


CREDENTIAL_NAMES = frozenset({
    ".env",
    ".env.local",
    ".env.production",
    ".env.staging",
    "id_rsa",
    "id_ed25519",
    "id_ecdsa",
    "id_dsa",
    ".npmrc",
    ".pypirc",
    ".netrc",
    "credentials.json",
    "service-account.json",
    "terraform.tfstate",
})

CREDENTIAL_EXTENSIONS = frozenset({
    "pem", "key", "p12", "pfx", "jks", "keystore", "tfvars",
})

CREDENTIAL_PATH_FRAGMENTS = (
    ".aws/credentials",
    ".aws/config",
    ".ssh/",
    ".gnupg/",
)

SKIP_DIRS = frozenset({
    "node_modules", ".git", "target", "__pycache__", ".venv", "venv",
})

MAX_DEPTH = 5


def is_credential_file(path: Path) -> bool:
    """Check a file path against the credential name, extension and path lists."""
    if path.name in CREDENTIAL_NAMES:
        return True
    if path.suffix.lstrip(".") in CREDENTIAL_EXTENSIONS:
        return True
    path_str = path.as_posix()
    return any(fragment in path_str for fragment in CREDENTIAL_PATH_FRAGMENTS)


def scan_workspace(workspace: Path, max_depth: int = MAX_DEPTH) -> list[Path]:
    """Find credential-looking files under ``workspace``.

    Symlinks are not followed and common dependency/VCS directories are
    skipped. Files deeper than ``max_depth`` levels are ignored.

    Returns:
        Sorted list of matching file paths.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(workspace, followlinks=False):
        current = Path(dirpath)
        depth = len(current.relative_to(workspace).parts)
        dirnames[:] = [d for d in dirnames if d not in SKIP_DIRS]
        if depth + 1 >= max_depth:
            dirnames[:] = []
        for filename in filenames:
            path = current / filename
            if path.is_symlink() or not path.is_file():
                continue
            if is_credential_file(path.relative_to(workspace)):
                found.append(path)
    return sorted(found)


def check_credentials(workspace: Path, console: Console | None = None) -> bool:
    """Warn about credential files and ask whether to continue.

    Returns:
        True if nothing was found or the user chose to continue.
    """
    found = scan_workspace(workspace)
    if not found:
        return True

    console = console or Console()
    console.print("\n[bold yellow]Potential credential files found in workspace:[/bold yellow]")
    for path in found:
        console.print(f"  [yellow]•[/yellow] {path.relative_to(workspace)}")
    console.print("\n[yellow]These files will be accessible inside the container.[/yellow]")

    return typer.confirm("Continue anyway?", default=False)
