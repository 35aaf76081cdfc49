# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Configuration with environment variable support."""
from importlib import resources
from pathlib import Path

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from aipod.core.exceptions import ConfigurationError


DEFAULT_RECIPE_RESOURCE = "claude.Dockerfile"


class PodConfig(BaseSettings):
    """ai-pod configuration.

    All settings can be overridden via environment variables with AIPOD_ prefix.
    Example: AIPOD_NOTIFY_PORT=9000 overrides the callback port.
    """

    model_config = SettingsConfigDict(
        env_prefix="AIPOD_",
        extra="ignore",
    )

    home_dir: Path = Field(
        default_factory=Path.home,
        description="Home directory holding the host's ~/.claude files",
    )
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".ai-pod",
        description="Directory for the recipe, PID file, logs and image hash",
    )

    # Runtime
    runtime_binary: str = Field(
        default="podman",
        description="Container runtime CLI (podman or a docker-compatible binary)",
    )
    image_name: str = Field(
        default="ai-pod:latest",
        description="Tag of the sandbox image",
    )
    container_prefix: str = Field(
        default="claude-",
        description="Name prefix shared by every sandbox container",
    )
    host_alias: str = Field(
        default="host.containers.internal",
        description="Hostname the container uses to reach the host gateway",
    )

    # Notification daemon
    notify_port: int = Field(
        default=9876,
        ge=1,
        le=65535,
        description="Port the notification daemon listens on",
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level for the CLI and daemon",
    )

    @property
    def dockerfile_path(self) -> Path:
        return self.config_dir / "Dockerfile"

    @property
    def pid_file(self) -> Path:
        return self.config_dir / "server.pid"

    @property
    def log_file(self) -> Path:
        return self.config_dir / "server.log"

    @property
    def hash_file(self) -> Path:
        return self.config_dir / "image.sha256"

    @property
    def runtime_settings(self) -> Path:
        return self.config_dir / "runtime-settings.json"

    @property
    def runtime_claude_md(self) -> Path:
        return self.config_dir / "runtime-CLAUDE.md"

    @property
    def claude_settings_path(self) -> Path:
        return self.home_dir / ".claude" / "settings.json"

    @property
    def claude_md_path(self) -> Path:
        return self.home_dir / ".claude" / "CLAUDE.md"

    def init(self) -> None:
        """Create the config directory and seed the default recipe.

        Raises:
            ConfigurationError: If the directory or recipe cannot be written.
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            if not self.dockerfile_path.exists():
                default = (
                    resources.files("aipod.sandbox")
                    .joinpath(DEFAULT_RECIPE_RESOURCE)
                    .read_text(encoding="utf-8")
                )
                self.dockerfile_path.write_text(default, encoding="utf-8")
                logger.info("Created default Dockerfile", path=str(self.dockerfile_path))
        except OSError as e:
            raise ConfigurationError(
                f"Failed to initialize config directory {self.config_dir}: {e}"
            ) from e
