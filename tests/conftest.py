"""Shared fixtures for runner_builder tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from runner_builder.config import Settings
from runner_builder.images.recipes import RECIPES

ENV_VARS = [
    "REGISTRY",
    "ORG",
    "VERSION",
    "CUSTOM_TAG",
    "REGISTRY_USERNAME",
    "REGISTRY_PASSWORD",
    "PLATFORMS",
    "DRY_RUN",
    "USE_CACHE",
    "CACHE_FROM_REGISTRY",
    "PUSH_TO_REGISTRY",
    "USE_BUILDX",
    "BUILDX_BUILDER",
    "PROJECT_ROOT",
    "BUILD_RECORD",
    "BAKE_FILE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from the caller's environment and any .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Create a project tree holding every Dockerfile and the bake file."""
    root = tmp_path / "project"
    for recipe in RECIPES.values():
        if recipe.dockerfile is None:
            continue
        path = root / recipe.dockerfile
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("FROM scratch\n")
    bake_file = root / "docker" / "builder" / "docker-bake.hcl"
    bake_file.write_text('group "all" {}\n')
    return root


@pytest.fixture
def make_settings(project_root: Path) -> Callable[..., Settings]:
    """Build Settings rooted at the synthetic project tree."""

    def _make(**kwargs: Any) -> Settings:
        kwargs.setdefault("project_root", project_root)
        return Settings(_env_file=None, **kwargs)

    return _make


class FakeDocker:
    """Stand-in for subprocess.run recording every docker invocation.

    Commands whose argv starts with a prefix in ``failures`` exit with the
    mapped status; everything else exits 0.
    """

    def __init__(self, failures: dict[tuple[str, ...], int] | None = None) -> None:
        self.failures = failures or {}
        self.calls: list[list[str]] = []
        self.inputs: list[str | None] = []

    def __call__(self, cmd: list[str], *args: Any, **kwargs: Any) -> MagicMock:
        self.calls.append(list(cmd))
        self.inputs.append(kwargs.get("input"))
        returncode = 0
        for prefix, code in self.failures.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                returncode = code
        return MagicMock(returncode=returncode)

    def commands(self, *prefix: str) -> list[list[str]]:
        """Recorded calls whose argv starts with prefix."""
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]


@pytest.fixture
def fake_docker() -> FakeDocker:
    """A FakeDocker with no failures."""
    return FakeDocker()


@pytest.fixture
def make_fake_docker() -> type[FakeDocker]:
    """Factory for FakeDocker instances with programmed failures."""
    return FakeDocker
