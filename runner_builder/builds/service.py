"""Build service module.

This module provides the high-level build API:
- BuildOrchestrator.build_targets(): resolve names, authenticate, build in order
- BuildOrchestrator.build_one(): one image via docker build or buildx
- BuildOrchestrator.bake(): all-in-one docker buildx bake
- BuildOrchestrator.push_all(): replay the build record to the registry

Execution is strictly sequential; the first failure aborts the remaining
sequence so a partially tagged image set is never pushed on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from runner_builder.builds.commands import (
    compose_bake_command,
    compose_build_command,
    compose_builder_create_command,
    compose_builder_inspect_command,
    compose_builder_use_command,
    compose_buildx_build_command,
    compose_buildx_version_command,
    compose_tag_command,
)
from runner_builder.builds.record import BuildRecordFile
from runner_builder.builds.runner import DockerRunner
from runner_builder.errors import (
    BakeFileMissingError,
    BuildFailureError,
    BuildxUnavailableError,
    RecordMissingError,
    UnknownImageTypeError,
)
from runner_builder.images.recipes import (
    BUILD_ORDER,
    BuildRecipe,
    check_dockerfile,
    expand,
    parse_image_type,
)
from runner_builder.images.tags import image_tags
from runner_builder.registry.service import authenticate, push_tags
from runner_builder.types import BuildMode, ImageType

if TYPE_CHECKING:
    from runner_builder.config import Settings

logger = logging.getLogger(__name__)

BAKE_TARGETS: tuple[ImageType, ...] = (*BUILD_ORDER, ImageType.ALL)


def select_build_mode(settings: Settings) -> BuildMode:
    """Pick the docker front end for a build.

    More than one platform always needs buildx. Otherwise an explicit
    USE_BUILDX wins, and the simpler local ``docker build`` is the default.
    """
    if settings.is_multi_platform:
        if settings.use_buildx is False:
            logger.warning(
                "Multiple platforms requested (%s); using buildx despite --no-buildx",
                settings.platforms,
            )
        return BuildMode.BUILDX
    if settings.use_buildx:
        return BuildMode.BUILDX
    return BuildMode.STANDARD


def build_sequence(
    recipes: Iterable[BuildRecipe],
    build_fn: Callable[[BuildRecipe], str],
) -> list[str]:
    """Build recipes one after another.

    The first exception propagates immediately; later recipes are never
    attempted.

    Args:
        recipes: Concrete recipes in build order.
        build_fn: Builds one recipe and returns its primary tag.

    Returns:
        Primary tags of the built images, in order.
    """
    built: list[str] = []
    for recipe in recipes:
        logger.info("Processing: %s", recipe.image_type.value)
        try:
            built.append(build_fn(recipe))
        except Exception:
            logger.error("Failed to build %s", recipe.image_type.value)
            raise
    return built


class BuildOrchestrator:
    """Drives builds for one invocation.

    Attributes:
        settings: Effective settings for the whole run.
        runner: Command runner (dry-run aware).
        record: Build record receiving produced tags.
    """

    def __init__(
        self,
        settings: Settings,
        runner: DockerRunner | None = None,
        record: BuildRecordFile | None = None,
    ) -> None:
        self.settings = settings
        self.runner = runner or DockerRunner(dry_run=settings.dry_run)
        self.record = record or BuildRecordFile(settings.record_path)
        self._buildx_ready = False

    @property
    def dry_run(self) -> bool:
        return self.runner.dry_run

    def tags_for(self, image_type: ImageType) -> list[str]:
        """Tag set for an image type under the current settings."""
        s = self.settings
        return image_tags(s.registry, s.org, image_type, s.version, s.custom_tag)

    def authenticate(self) -> bool:
        """Log in to the registry when pushing; no-op otherwise."""
        if not self.settings.push_to_registry:
            return False
        return authenticate(self.settings, self.runner)

    def setup_buildx(self, image_type: str | None = None) -> None:
        """Ensure the named buildx builder exists and is selected.

        Runs once per orchestrator. In dry-run mode the inspect probe is not
        run, so both the ``use`` and the fallback ``create`` commands are
        echoed.

        Args:
            image_type: Image type (or bake targets) reported on failure.

        Raises:
            BuildxUnavailableError: If docker buildx is not installed or the
                builder cannot be selected or created.
        """
        if self._buildx_ready:
            return
        name = self.settings.buildx_builder

        if self.dry_run:
            logger.info("DRY RUN: Would setup buildx builder %s", name)
            self.runner.run(compose_builder_inspect_command(name), label="Builder check")
            self.runner.run(compose_builder_use_command(name), label="Builder")
            self.runner.run(
                compose_builder_create_command(name), label="Builder (if missing)"
            )
            self._buildx_ready = True
            return

        status = self.runner.probe_status(compose_buildx_version_command())
        if status != 0:
            raise BuildxUnavailableError(image_type, status)

        if self.runner.probe(compose_builder_inspect_command(name)):
            logger.info("Using existing buildx builder: %s", name)
            result = self.runner.run(compose_builder_use_command(name), label="Builder")
        else:
            logger.info("Creating buildx builder: %s", name)
            result = self.runner.run(compose_builder_create_command(name), label="Builder")
        if not result.success:
            raise BuildxUnavailableError(
                image_type,
                result.exit_code,
                message=f"Could not set up buildx builder {name}",
            )
        self._buildx_ready = True

    def build_one(self, recipe: BuildRecipe) -> str:
        """Build a single concrete recipe.

        Returns:
            The primary tag.

        Raises:
            DockerfileMissingError: If the Dockerfile does not exist.
            MultiPlatformLoadError: If a multi-platform result would be loaded.
            BuildFailureError: If the build or a companion docker tag exits non-zero.
            PushFailureError: If pushing exits non-zero.
        """
        if recipe.is_composite:
            raise ValueError(f"{recipe.image_type.value} must be expanded before building")

        check_dockerfile(recipe, self.settings.project_root)
        tags = self.tags_for(recipe.image_type)
        primary = tags[0]
        mode = select_build_mode(self.settings)

        logger.info("Building %s image (%s)...", recipe.image_type.value, mode.value)
        logger.info("Tags: %s", ", ".join(tags))
        logger.info("Dockerfile: %s", recipe.dockerfile)

        if mode is BuildMode.BUILDX:
            self._build_buildx(recipe, tags)
        else:
            self._build_standard(recipe, tags)

        if not self.dry_run:
            logger.info("Successfully built %s", recipe.image_type.value)
            self.record.append(primary)

        # buildx pushes as part of the build itself
        if mode is BuildMode.STANDARD and self.settings.push_to_registry:
            push_tags(tags, self.runner, image_type=recipe.image_type.value)
        return primary

    def _build_standard(self, recipe: BuildRecipe, tags: list[str]) -> None:
        primary, companions = tags[0], tags[1:]
        cmd = compose_build_command(recipe, self.settings, [primary])
        result = self.runner.run(cmd, label="Build")
        if not result.success:
            raise BuildFailureError(recipe.image_type.value, result.exit_code)

        for companion in companions:
            tagged = self.runner.run(compose_tag_command(primary, companion), label="Tag")
            if not tagged.success:
                raise BuildFailureError(recipe.image_type.value, tagged.exit_code)

    def _build_buildx(self, recipe: BuildRecipe, tags: list[str]) -> None:
        # Compose first so a multi-platform --load fails before builder setup
        cmd = compose_buildx_build_command(recipe, self.settings, tags)
        self.setup_buildx(recipe.image_type.value)
        logger.info("Platforms: %s", self.settings.platforms)
        result = self.runner.run(cmd, label="Build")
        if not result.success:
            raise BuildFailureError(recipe.image_type.value, result.exit_code)

    def build_targets(self, names: Sequence[str | ImageType]) -> list[str]:
        """Build image types in order, expanding ``all``.

        Every name is validated and registry authentication (when pushing)
        happens before any build starts. The build record starts empty, so
        it only ever lists tags produced by this run.

        Returns:
            Primary tags of the built images.
        """
        recipes = expand(names)
        if not self.dry_run:
            self.record.reset()
        self.authenticate()
        built = build_sequence(recipes, self.build_one)
        logger.info("All %d image(s) built successfully", len(built))
        return built

    def build_all(self) -> list[str]:
        """Build every image in dependency order."""
        return self.build_targets([ImageType.ALL])

    def bake(self, targets: Sequence[str] | None = None) -> list[str]:
        """Build targets from the bake definition in one invocation.

        Args:
            targets: Bake targets; defaults to ``all``.

        Returns:
            The targets passed to bake.

        Raises:
            UnknownImageTypeError: If a target is not defined for bake.
            BakeFileMissingError: If the bake file does not exist.
            BuildFailureError: If bake exits non-zero.
        """
        names = list(targets) if targets else [ImageType.ALL.value]
        for name in names:
            if parse_image_type(name) not in BAKE_TARGETS:
                raise UnknownImageTypeError(name, f"Not a bake target: {name}")

        bake_file = self.settings.bake_path
        if not bake_file.is_file():
            raise BakeFileMissingError(str(bake_file))

        cmd = compose_bake_command(bake_file, self.settings, names)
        self.authenticate()
        self.setup_buildx(" ".join(names))

        logger.info("Building with Bake...")
        logger.info("Registry: %s/%s", self.settings.registry, self.settings.org)
        logger.info("Version: %s", self.settings.custom_tag or self.settings.version)
        logger.info("Platforms: %s", self.settings.platforms)

        result = self.runner.run(cmd, label="Bake")
        if not result.success:
            raise BuildFailureError(" ".join(names), result.exit_code)
        if not self.dry_run:
            logger.info("Bake build completed successfully")
        return names

    def push_all(self) -> list[str]:
        """Push every tag in the build record.

        Raises:
            RecordMissingError: If there is no record or it is empty.
            AuthFailureError: If login fails.
            PushFailureError: On the first failed push.
        """
        tags = self.record.read()
        if not tags:
            raise RecordMissingError(str(self.record.path))

        authenticate(self.settings, self.runner)
        logger.info(
            "Pushing all built images to %s/%s...",
            self.settings.registry,
            self.settings.org,
        )
        return push_tags(tags, self.runner)


__all__ = [
    "BAKE_TARGETS",
    "BuildOrchestrator",
    "build_sequence",
    "select_build_mode",
]
