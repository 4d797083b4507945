"""Image recipe table.

This module maps every ImageType to its build recipe:
- Dockerfile path relative to the project root
- Build context directory
- Image types it is built on top of

The table is immutable. The ``all`` meta-target is never built as a single
recipe; :func:`expand` replaces it with :data:`BUILD_ORDER`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from runner_builder.errors import DockerfileMissingError, UnknownImageTypeError
from runner_builder.types import ImageKind, ImageType

logger = logging.getLogger(__name__)

LANGUAGE_PACK_DIR = "docker/linux/language-packs"
COMPOSITE_DIR = "docker/linux/composite"


@dataclass(frozen=True)
class BuildRecipe:
    """Resolved build inputs for one image type.

    Attributes:
        image_type: Image type this recipe builds.
        kind: Role of the image in the family.
        dockerfile: Dockerfile path relative to the project root (None for meta).
        context: Build context relative to the project root ("" is the root).
        depends_on: Image types that must be built before this one.
        members: Expansion order for the meta-target, empty otherwise.
    """

    image_type: ImageType
    kind: ImageKind
    dockerfile: str | None
    context: str = ""
    depends_on: tuple[ImageType, ...] = ()
    members: tuple[ImageType, ...] = ()

    @property
    def is_composite(self) -> bool:
        """Whether this recipe is a meta-target expanding to other recipes."""
        return self.kind is ImageKind.META

    def dockerfile_path(self, project_root: Path) -> Path:
        """Absolute Dockerfile path under a project root."""
        if self.dockerfile is None:
            raise ValueError(f"{self.image_type.value} has no Dockerfile")
        return project_root / self.dockerfile

    def context_path(self, project_root: Path) -> Path:
        """Absolute build context under a project root."""
        return project_root / self.context if self.context else project_root


def _language_pack(image_type: ImageType) -> BuildRecipe:
    name = image_type.value
    return BuildRecipe(
        image_type=image_type,
        kind=ImageKind.LANGUAGE_PACK,
        dockerfile=f"{LANGUAGE_PACK_DIR}/{name}/Dockerfile.{name}",
        depends_on=(ImageType.BASE,),
    )


def _composite(image_type: ImageType, *depends_on: ImageType) -> BuildRecipe:
    return BuildRecipe(
        image_type=image_type,
        kind=ImageKind.COMPOSITE,
        dockerfile=f"{COMPOSITE_DIR}/Dockerfile.{image_type.value}",
        depends_on=depends_on,
    )


# Dependency-respecting order: base, then language packs, then composites.
BUILD_ORDER: tuple[ImageType, ...] = (
    ImageType.BASE,
    ImageType.CPP,
    ImageType.PYTHON,
    ImageType.NODEJS,
    ImageType.GO,
    ImageType.FLUTTER,
    ImageType.FLET,
    ImageType.CPP_ONLY,
    ImageType.PYTHON_ONLY,
    ImageType.WEB,
    ImageType.FLUTTER_ONLY,
    ImageType.FLET_ONLY,
    ImageType.FULL_STACK,
)

RECIPES: MappingProxyType[ImageType, BuildRecipe] = MappingProxyType(
    {
        ImageType.BASE: BuildRecipe(
            image_type=ImageType.BASE,
            kind=ImageKind.BASE,
            dockerfile="docker/linux/base/Dockerfile.base",
        ),
        ImageType.CPP: _language_pack(ImageType.CPP),
        ImageType.PYTHON: _language_pack(ImageType.PYTHON),
        ImageType.NODEJS: _language_pack(ImageType.NODEJS),
        ImageType.GO: _language_pack(ImageType.GO),
        ImageType.FLUTTER: _language_pack(ImageType.FLUTTER),
        ImageType.FLET: _language_pack(ImageType.FLET),
        ImageType.CPP_ONLY: _composite(ImageType.CPP_ONLY, ImageType.CPP),
        ImageType.PYTHON_ONLY: _composite(ImageType.PYTHON_ONLY, ImageType.PYTHON),
        ImageType.WEB: _composite(ImageType.WEB, ImageType.NODEJS, ImageType.PYTHON),
        ImageType.FLUTTER_ONLY: _composite(ImageType.FLUTTER_ONLY, ImageType.FLUTTER),
        ImageType.FLET_ONLY: _composite(ImageType.FLET_ONLY, ImageType.FLET),
        ImageType.FULL_STACK: _composite(
            ImageType.FULL_STACK,
            ImageType.CPP,
            ImageType.PYTHON,
            ImageType.NODEJS,
            ImageType.GO,
        ),
        ImageType.BUILDER: BuildRecipe(
            image_type=ImageType.BUILDER,
            kind=ImageKind.BUILDER,
            dockerfile="docker/builder/Dockerfile.builder",
            context="docker/builder",
        ),
        ImageType.ALL: BuildRecipe(
            image_type=ImageType.ALL,
            kind=ImageKind.META,
            dockerfile=None,
            members=BUILD_ORDER,
        ),
    }
)


def parse_image_type(name: str | ImageType) -> ImageType:
    """Convert a user-supplied name to an ImageType.

    Raises:
        UnknownImageTypeError: If the name is not in the fixed set.
    """
    if isinstance(name, ImageType):
        return name
    try:
        return ImageType(name)
    except ValueError:
        raise UnknownImageTypeError(name) from None


def resolve(name: str | ImageType) -> BuildRecipe:
    """Look up the recipe for an image type.

    Args:
        name: Image type name or enum member.

    Returns:
        The BuildRecipe for that image type.

    Raises:
        UnknownImageTypeError: If the name is not recognized.
    """
    return RECIPES[parse_image_type(name)]


def expand(names: Iterable[str | ImageType]) -> list[BuildRecipe]:
    """Resolve names into the concrete recipes to build, in order.

    Every name is validated before anything is returned, so an unknown
    name anywhere in the list fails without partial results. ``all`` is
    replaced in place by the build order; repeated image types keep their
    first position.

    Raises:
        UnknownImageTypeError: If any name is not recognized.
    """
    recipes = [resolve(name) for name in names]

    expanded: list[BuildRecipe] = []
    seen: set[ImageType] = set()
    for recipe in recipes:
        members = (
            [RECIPES[m] for m in recipe.members] if recipe.is_composite else [recipe]
        )
        for member in members:
            if member.image_type in seen:
                logger.debug("Skipping duplicate image type: %s", member.image_type.value)
                continue
            seen.add(member.image_type)
            expanded.append(member)
    return expanded


def check_dockerfile(recipe: BuildRecipe, project_root: Path) -> Path:
    """Ensure a recipe's Dockerfile exists.

    Returns:
        Absolute path of the Dockerfile.

    Raises:
        DockerfileMissingError: If the Dockerfile does not exist.
    """
    path = recipe.dockerfile_path(project_root)
    if not path.is_file():
        raise DockerfileMissingError(recipe.image_type.value, str(recipe.dockerfile))
    return path


__all__ = [
    "BUILD_ORDER",
    "RECIPES",
    "BuildRecipe",
    "check_dockerfile",
    "expand",
    "parse_image_type",
    "resolve",
]
