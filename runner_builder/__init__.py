"""Runner Image Builder - build orchestration for GitHub Actions runner images.

This package resolves image types to Dockerfile recipes and drives the
external container tooling (docker build, buildx, bake) to build, tag,
and push the runner image family.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
