# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Content-addressed gate deciding when the sandbox image must be rebuilt.

The gate keeps the sha256 of the recipe that produced the tagged image in
``image.sha256``. Any drift between that record and the current recipe
triggers a rebuild; the record is only rewritten after a build succeeds.
"""

import hashlib

from loguru import logger

from aipod.config import PodConfig
from aipod.core.exceptions import ConfigurationError
from aipod.sandbox.runtime import ContainerRuntime


class ImageCacheGate:
    """Decides whether the sandbox image needs a (re)build and performs it.

    Args:
        config: Paths to the recipe, build context and hash record.
        runtime: Container runtime used for the existence check and build.
    """

    def __init__(self, config: PodConfig, runtime: ContainerRuntime) -> None:
        self.config = config
        self.runtime = runtime

    def hash_recipe(self) -> str:
        """Return the hex sha256 of the current recipe file.

        Raises:
            ConfigurationError: If the recipe cannot be read.
        """
        try:
            content = self.config.dockerfile_path.read_bytes()
        except OSError as e:
            raise ConfigurationError(
                f"Failed to read Dockerfile at {self.config.dockerfile_path}: {e}"
            ) from e
        return hashlib.sha256(content).hexdigest()

    def read_stored_hash(self) -> str | None:
        """Return the digest recorded by the last successful build, if any.

        An unreadable record counts as missing, which forces a rebuild.
        """
        try:
            return self.config.hash_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "Ignoring unreadable image hash", path=str(self.config.hash_file), error=str(e)
            )
            return None

    async def needs_build(self, force: bool = False) -> bool:
        """Check whether the image must be built.

        Args:
            force: Always rebuild when set.

        Returns:
            False only if the image exists and its recorded digest matches
            the current recipe.
        """
        if force:
            return True
        if not await self.runtime.image_exists(self.config.image_name):
            logger.debug("Image missing", image=self.config.image_name)
            return True
        stored = self.read_stored_hash()
        if stored is None or stored != self.hash_recipe():
            logger.debug("Recipe digest changed", image=self.config.image_name)
            return True
        return False

    async def build(self) -> None:
        """Build the image and record the recipe digest.

        The digest is computed before the build so that the record matches
        the recipe the runtime actually read.

        Raises:
            ImageBuildError: If the build fails; the old record is kept.
            ConfigurationError: If the digest record cannot be written.
        """
        digest = self.hash_recipe()
        logger.info("Building container image", image=self.config.image_name)
        await self.runtime.build_image(
            self.config.image_name,
            self.config.dockerfile_path,
            self.config.config_dir,
        )
        try:
            self.config.hash_file.write_text(digest, encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                f"Failed to record image digest at {self.config.hash_file}: {e}"
            ) from e
        logger.info("Image built", image=self.config.image_name, digest=digest[:12])

    async def ensure(self, force: bool = False) -> bool:
        """Build the image if needed.

        Returns:
            True if a build ran.
        """
        if await self.needs_build(force):
            await self.build()
            return True
        logger.info("Container image is up to date", image=self.config.image_name)
        return False
