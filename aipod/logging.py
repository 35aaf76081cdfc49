# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Logging configuration with the ai-pod terminal palette.

The CLI and the notification daemon share one loguru format so that the
daemon's ``server.log`` reads the same as interactive output.
"""

import sys
from typing import TYPE_CHECKING

from loguru import logger


if TYPE_CHECKING:
    from loguru import Record


COLORS = {
    "amber": "#FFC857",  # Warnings, accent
    "moss": "#5B8A72",  # Success
    "slate": "#88A896",  # Secondary text, debug
    "cream": "#EFF8E2",  # Primary text
    "brick": "#A33D2E",  # Errors
    "blue": "#5B9BD5",  # Info, identifiers
    "pending": "#4A5C54",  # Separators, trace
}

RESET = "\033[0m"


BUILD_SOURCE = "image-build"


def _escape(text: str) -> str:
    """Escape loguru format braces and color-markup brackets in literal text."""
    return text.replace("{", "{{").replace("}", "}}").replace("<", r"\<")


def _log_format(record: "Record") -> str:
    """Build the loguru format string for one record.

    Image build output (``source="image-build"``) is shown dimmed under a
    ``build`` tag so it reads apart from ai-pod's own messages. A
    ``container`` extra becomes a ``[name]`` tag in front of the message;
    any other extras trail as ``key=value`` pairs.

    Args:
        record: Loguru record containing log metadata, message, and level.

    Returns:
        Format string with loguru color tags.
    """
    level = record["level"].name
    extra = record["extra"]
    close = "</>"
    sep = f"<fg {COLORS['pending']}>│{close}"

    level_colors = {
        "TRACE": f"<fg {COLORS['pending']}>",
        "DEBUG": f"<fg {COLORS['slate']}>",
        "INFO": f"<fg {COLORS['blue']}>",
        "SUCCESS": f"<fg {COLORS['moss']}>",
        "WARNING": f"<fg {COLORS['amber']}>",
        "ERROR": f"<fg {COLORS['brick']}>",
        "CRITICAL": f"<fg {COLORS['brick']}><bold>",
    }
    color = level_colors.get(level, f"<fg {COLORS['cream']}>")

    fmt = (
        f"<fg {COLORS['slate']}>{{time:HH:mm:ss}}{close} {sep} "
        f"{color}{{level: <8}}{close}{sep} "
    )

    if extra.get("source") == BUILD_SOURCE:
        fmt += (
            f"<fg {COLORS['amber']}>build{close} {sep} "
            f"<fg {COLORS['slate']}>{{message}}{close}\n"
        )
        return fmt

    fmt += f"<fg {COLORS['slate']}>{{name}}{close}<fg {COLORS['pending']}>:{close}"
    if "container" in extra:
        fmt += f"<fg {COLORS['blue']}>[{_escape(str(extra['container']))}]{close} "
    fmt += f"<fg {COLORS['cream']}>{{message}}{close}"

    rest = {k: v for k, v in extra.items() if k != "container"}
    if rest:
        extra_str = _escape(" ".join(f"{k}={v!r}" for k, v in rest.items()))
        fmt += f" <fg {COLORS['slate']}>│ {extra_str}{close}"

    fmt += "\n"

    if record["exception"]:
        fmt += "{exception}\n"

    return fmt


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default handler with the ai-pod stderr handler.

    Args:
        level: Minimum log level to display (e.g., "DEBUG", "INFO", "WARNING").
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=_log_format,
        colorize=sys.stderr.isatty(),
    )


def log_server_startup(host: str, port: int, version: str) -> None:
    """Write the daemon's startup details to stderr.

    Args:
        host: Bind host address.
        port: Bind port number.
        version: Application version string.
    """
    amber = "\033[38;2;255;200;87m"
    blue = "\033[38;2;91;155;213m"
    slate = "\033[38;2;136;168;150m"

    config_lines = [
        f"  {slate}Version:{RESET}  {amber}v{version}{RESET}",
        f"  {slate}Listening:{RESET} {blue}http://{host}:{port}{RESET}",
        "",
    ]
    sys.stderr.write("\n".join(config_lines))
    sys.stderr.flush()
