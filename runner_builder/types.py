"""Shared type definitions for runner_builder.

This module contains enums shared across subpackages to avoid circular
imports.
"""

from enum import Enum


class ImageType(str, Enum):
    """Symbolic name of a buildable image."""

    BASE = "base"
    CPP = "cpp"
    PYTHON = "python"
    NODEJS = "nodejs"
    GO = "go"
    FLUTTER = "flutter"
    FLET = "flet"
    CPP_ONLY = "cpp-only"
    PYTHON_ONLY = "python-only"
    WEB = "web"
    FLUTTER_ONLY = "flutter-only"
    FLET_ONLY = "flet-only"
    FULL_STACK = "full-stack"
    BUILDER = "builder"
    ALL = "all"


class ImageKind(str, Enum):
    """Role of an image within the runner image family."""

    BASE = "base"
    LANGUAGE_PACK = "language-pack"
    COMPOSITE = "composite"
    BUILDER = "builder"
    META = "meta"


class BuildMode(str, Enum):
    """Which docker front end performs a build."""

    STANDARD = "standard"
    BUILDX = "buildx"


__all__ = ["BuildMode", "ImageKind", "ImageType"]
