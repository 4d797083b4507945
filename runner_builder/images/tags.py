"""Image tag construction.

Tags are always derived from (registry, org, image type, version) and
never stored on their own. All functions here are pure.
"""

from __future__ import annotations

from runner_builder.types import ImageType

RUNNER_REPOSITORY = "gh-runner"
BUILDER_REPOSITORY = "gh-builder"
LATEST = "latest"


def _repository(registry: str, org: str, image_type: ImageType) -> str:
    name = BUILDER_REPOSITORY if image_type is ImageType.BUILDER else RUNNER_REPOSITORY
    return f"{registry}/{org}/{name}"


def _reference(image_type: ImageType, version: str) -> str:
    if image_type is ImageType.BUILDER:
        return version
    return f"{image_type.value}-{version}"


def image_tag(registry: str, org: str, image_type: ImageType, version: str) -> str:
    """Compose one fully-qualified tag.

    Example:
        >>> image_tag("ghcr.io", "cicd", ImageType.CPP, "1.0.0")
        'ghcr.io/cicd/gh-runner:cpp-1.0.0'
    """
    if image_type is ImageType.ALL:
        raise ValueError("The 'all' meta-target has no tag")
    return f"{_repository(registry, org, image_type)}:{_reference(image_type, version)}"


def image_tags(
    registry: str,
    org: str,
    image_type: ImageType,
    version: str,
    custom_tag: str | None = None,
) -> list[str]:
    """Compose the tag set for one image.

    The first entry is the primary tag. Without a custom tag a ``-latest``
    companion follows it; a custom tag yields exactly one tag.

    Args:
        registry: Registry host.
        org: Organization / namespace.
        image_type: Concrete image type.
        version: Version tag.
        custom_tag: Optional override replacing the version.

    Returns:
        Ordered list of fully-qualified tags without duplicates.
    """
    if custom_tag:
        return [image_tag(registry, org, image_type, custom_tag)]

    tags = [image_tag(registry, org, image_type, version)]
    latest = image_tag(registry, org, image_type, LATEST)
    if latest not in tags:
        tags.append(latest)
    return tags


def cache_ref(registry: str, org: str, image_type: ImageType | None = None) -> str:
    """Registry cache reference, per image type or shared (bake)."""
    suffix = f"cache-{image_type.value}" if image_type is not None else "cache"
    return f"{registry}/{org}/{RUNNER_REPOSITORY}:{suffix}"


__all__ = ["cache_ref", "image_tag", "image_tags"]
