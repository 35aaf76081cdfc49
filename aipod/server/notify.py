# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Best-effort desktop notification delivery."""
import shutil
import subprocess
import sys
from collections.abc import Callable

from loguru import logger


Notifier = Callable[[str, str], None]

_NOTIFY_TIMEOUT = 5


def _applescript_quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _notification_command(title: str, message: str) -> list[str] | None:
    """Return the platform's notification command, or None if unsupported."""
    if sys.platform == "darwin":
        script = (
            f"display notification {_applescript_quote(message)} "
            f"with title {_applescript_quote(title)}"
        )
        return ["osascript", "-e", script]
    if shutil.which("notify-send") is not None:
        return ["notify-send", title, message]
    return None


def send_notification(title: str, message: str) -> None:
    """Show a desktop notification. Failures are logged, never raised."""
    cmd = _notification_command(title, message)
    if cmd is None:
        logger.warning("No desktop notification tool available", platform=sys.platform)
        return
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=_NOTIFY_TIMEOUT)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Failed to send notification", error=str(e), tool=cmd[0])
