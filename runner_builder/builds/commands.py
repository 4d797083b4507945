"""Docker command composition.

Pure functions turning recipes and settings into argv lists for:
- ``docker build`` (standard, single platform, local daemon)
- ``docker buildx build`` (multi-platform capable)
- ``docker buildx bake``
- ``docker tag`` / ``docker push`` / ``docker login``
- buildx builder management

Nothing here executes anything; see runner.py.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from runner_builder.config import Settings
from runner_builder.errors import MultiPlatformLoadError
from runner_builder.images.recipes import BuildRecipe
from runner_builder.images.tags import cache_ref

DOCKER = "docker"


def compose_build_command(
    recipe: BuildRecipe,
    settings: Settings,
    tags: Sequence[str],
) -> list[str]:
    """Compose a standard ``docker build`` command.

    Args:
        recipe: Concrete recipe to build.
        settings: Effective settings.
        tags: Tags to apply; typically only the primary tag.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [DOCKER, "build"]

    if not settings.use_cache:
        cmd.append("--no-cache")

    # Only a single platform reaches this path
    platforms = settings.platform_list
    if platforms:
        cmd.extend(["--platform", platforms[0]])

    cmd.extend(["-f", str(recipe.dockerfile_path(settings.project_root))])
    for tag in tags:
        cmd.extend(["-t", tag])

    cmd.append(str(recipe.context_path(settings.project_root)))
    return cmd


def compose_buildx_build_command(
    recipe: BuildRecipe,
    settings: Settings,
    tags: Sequence[str],
) -> list[str]:
    """Compose a ``docker buildx build`` command.

    Pushing sends the result straight to the registry (``--push``);
    otherwise it is loaded into the local daemon (``--load``), which only
    works for a single platform.

    Raises:
        MultiPlatformLoadError: If loading a multi-platform result.
    """
    push = settings.push_to_registry
    if not push and settings.is_multi_platform:
        raise MultiPlatformLoadError(settings.platform_list, recipe.image_type.value)

    cmd = [DOCKER, "buildx", "build"]
    cmd.extend(["--platform", ",".join(settings.platform_list)])
    cmd.extend(["-f", str(recipe.dockerfile_path(settings.project_root))])
    for tag in tags:
        cmd.extend(["--tag", tag])

    if not settings.use_cache:
        cmd.append("--no-cache")

    if settings.cache_from_registry:
        ref = cache_ref(settings.registry, settings.org, recipe.image_type)
        cmd.append(f"--cache-from=type=registry,ref={ref}")
        cmd.append(f"--cache-to=type=registry,ref={ref},mode=max")

    cmd.append("--push" if push else "--load")
    cmd.append(str(recipe.context_path(settings.project_root)))
    return cmd


def compose_bake_command(
    bake_file: Path,
    settings: Settings,
    targets: Sequence[str],
) -> list[str]:
    """Compose a ``docker buildx bake`` command.

    Variables are applied to every target with ``--set *.<key>=<value>``.

    Raises:
        MultiPlatformLoadError: If a multi-platform bake would load locally.
    """
    targets = list(targets) or ["all"]
    push = settings.push_to_registry
    if not push and settings.is_multi_platform:
        raise MultiPlatformLoadError(settings.platform_list, " ".join(targets))

    version = settings.custom_tag or settings.version
    cmd = [DOCKER, "buildx", "bake", "-f", str(bake_file)]
    cmd.extend(["--set", f"*.registry={settings.registry}"])
    cmd.extend(["--set", f"*.org={settings.org}"])
    cmd.extend(["--set", f"*.version={version}"])
    cmd.extend(["--set", f"*.platforms={','.join(settings.platform_list)}"])

    if settings.cache_from_registry:
        ref = cache_ref(settings.registry, settings.org)
        cmd.extend(["--set", f"*.cache-from=type=registry,ref={ref}"])
        cmd.extend(["--set", f"*.cache-to=type=registry,ref={ref},mode=max"])

    if not settings.use_cache:
        cmd.extend(["--set", "*.no-cache=true"])

    output = "type=registry" if push else "type=docker"
    cmd.extend(["--set", f"*.output={output}"])

    cmd.extend(targets)
    return cmd


def compose_tag_command(source: str, target: str) -> list[str]:
    """Compose ``docker tag``."""
    return [DOCKER, "tag", source, target]


def compose_push_command(tag: str) -> list[str]:
    """Compose ``docker push``."""
    return [DOCKER, "push", tag]


def compose_login_command(registry: str, username: str) -> list[str]:
    """Compose ``docker login``; the password is supplied on stdin."""
    return [DOCKER, "login", registry, "-u", username, "--password-stdin"]


def compose_buildx_version_command() -> list[str]:
    """Compose the buildx availability probe."""
    return [DOCKER, "buildx", "version"]


def compose_builder_inspect_command(name: str) -> list[str]:
    """Compose the builder existence probe."""
    return [DOCKER, "buildx", "inspect", name]


def compose_builder_create_command(name: str) -> list[str]:
    """Compose creation of a docker-container buildx builder."""
    return [
        DOCKER,
        "buildx",
        "create",
        "--name",
        name,
        "--driver",
        "docker-container",
        "--use",
    ]


def compose_builder_use_command(name: str) -> list[str]:
    """Compose selection of an existing buildx builder."""
    return [DOCKER, "buildx", "use", name]


__all__ = [
    "compose_bake_command",
    "compose_build_command",
    "compose_builder_create_command",
    "compose_builder_inspect_command",
    "compose_builder_use_command",
    "compose_buildx_build_command",
    "compose_buildx_version_command",
    "compose_login_command",
    "compose_push_command",
    "compose_tag_command",
]
