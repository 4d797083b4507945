"""Registry service module.

This module provides registry interactions:
- authenticate(): docker login, only when pushing
- push_image() / push_tags(): docker push with failure reporting

Login state is process-wide docker configuration and is not torn down.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from runner_builder.builds.commands import compose_login_command, compose_push_command
from runner_builder.errors import AuthFailureError, PushFailureError

if TYPE_CHECKING:
    from runner_builder.builds.runner import DockerRunner
    from runner_builder.config import Settings

logger = logging.getLogger(__name__)


def authenticate(settings: Settings, runner: DockerRunner) -> bool:
    """Log in to the configured registry.

    Without credentials this only warns: the push itself may still succeed
    through credentials already present in the docker config, and fails on
    its own otherwise.

    Args:
        settings: Effective settings.
        runner: Command runner.

    Returns:
        True if a login was performed (or echoed in dry run), False if skipped.

    Raises:
        AuthFailureError: If docker login exits non-zero.
    """
    username = settings.registry_username
    password = settings.registry_password
    if not username or password is None or not password.get_secret_value():
        logger.warning("No credentials provided, skipping registry authentication")
        return False

    logger.info("Authenticating to registry: %s", settings.registry)
    result = runner.run(
        compose_login_command(settings.registry, username),
        label="Login",
        stdin_text=password.get_secret_value(),
    )
    if not result.success:
        raise AuthFailureError(settings.registry, result.exit_code)

    if not result.dry_run:
        logger.info("Successfully authenticated to %s", settings.registry)
    return True


def push_image(
    tag: str,
    runner: DockerRunner,
    image_type: str | None = None,
) -> None:
    """Push one tag.

    Raises:
        PushFailureError: If docker push exits non-zero.
    """
    logger.info("Pushing %s to registry...", tag)
    result = runner.run(compose_push_command(tag), label="Push")
    if not result.success:
        raise PushFailureError(tag, result.exit_code, image_type=image_type)
    if not result.dry_run:
        logger.info("Successfully pushed %s", tag)


def push_tags(
    tags: Iterable[str],
    runner: DockerRunner,
    image_type: str | None = None,
) -> list[str]:
    """Push tags in order, stopping at the first failure.

    Returns:
        The tags pushed.
    """
    pushed: list[str] = []
    for tag in tags:
        push_image(tag, runner, image_type=image_type)
        pushed.append(tag)
    return pushed


__all__ = ["authenticate", "push_image", "push_tags"]
