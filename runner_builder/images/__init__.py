"""Image catalogue module.

This module handles:
- The fixed image type -> Dockerfile recipe table
- Expansion of the ``all`` meta-target in dependency order
- Tag and cache reference construction
"""

from runner_builder.images.recipes import (
    BUILD_ORDER,
    RECIPES,
    BuildRecipe,
    check_dockerfile,
    expand,
    parse_image_type,
    resolve,
)
from runner_builder.images.tags import cache_ref, image_tag, image_tags

__all__ = [
    "BUILD_ORDER",
    "RECIPES",
    "BuildRecipe",
    "cache_ref",
    "check_dockerfile",
    "expand",
    "image_tag",
    "image_tags",
    "parse_image_type",
    "resolve",
]
