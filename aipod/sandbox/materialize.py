# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Build the runtime-visible CLAUDE.md and settings.json for a new container."""
import json
from pathlib import Path
from typing import Any

from loguru import logger

from aipod.config import PodConfig
from aipod.core.exceptions import ConfigurationError


CONTAINER_CLAUDE_MD = """\
# Container Environment
You are running inside a sandbox container. To reach services on the host machine,
use `{alias}` instead of `localhost`.

For example: `curl http://{alias}:3000`

Working directory: /app
"""


class SettingsMaterializer:
    """Merges host preferences into the two files copied into new containers."""

    def __init__(self, config: PodConfig) -> None:
        self.config = config

    def write_runtime_claude_md(self) -> Path:
        """Write the container preamble followed by the host's CLAUDE.md, if any."""
        content = CONTAINER_CLAUDE_MD.format(alias=self.config.host_alias)

        host_claude_md = self.config.claude_md_path
        if host_claude_md.exists():
            try:
                existing = host_claude_md.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ConfigurationError(f"Failed to read {host_claude_md}: {e}") from e
            content += "\n" + existing

        self.config.runtime_claude_md.write_text(content, encoding="utf-8")
        return self.config.runtime_claude_md

    def _load_host_settings(self) -> Any:
        path = self.config.claude_settings_path
        if not path.exists():
            return {}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Ignoring unparsable settings.json", path=str(path))
            return {}
        except OSError as e:
            raise ConfigurationError(f"Failed to read {path}: {e}") from e

    def write_runtime_settings(self, port: int) -> Path:
        """Write host settings with a Stop hook that calls the notify endpoint.

        Raises:
            ConfigurationError: If settings.json or its ``hooks`` is not an object.
        """
        settings = self._load_host_settings()
        if not isinstance(settings, dict):
            raise ConfigurationError("settings.json is not an object")

        hooks = settings.setdefault("hooks", {})
        if not isinstance(hooks, dict):
            raise ConfigurationError("settings.json 'hooks' is not an object")

        hook_command = (
            f"curl -sf -X POST http://{self.config.host_alias}:{port}/notify || true"
        )
        hooks["Stop"] = [
            {
                "matcher": "*",
                "hooks": [{"type": "command", "command": hook_command}],
            }
        ]

        self.config.runtime_settings.write_text(
            json.dumps(settings, indent=2), encoding="utf-8"
        )
        return self.config.runtime_settings

    def materialize(self, port: int) -> tuple[Path, Path]:
        """Write both runtime files.

        Returns:
            Tuple of (runtime CLAUDE.md path, runtime settings.json path).
        """
        return self.write_runtime_claude_md(), self.write_runtime_settings(port)
