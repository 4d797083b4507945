"""Configuration settings for runner_builder.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
Environment variable names carry no prefix (REGISTRY, ORG, VERSION, ...)
so existing CI pipelines that exported them keep working.
"""

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RECORD_NAME = "built-images.txt"
DEFAULT_BAKE_NAME = "docker-bake.hcl"
BUILDER_DIR = Path("docker") / "builder"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables and ``.env`` files (see
    :func:`get_settings`). CLI flags override these at runtime through
    :func:`apply_overrides`.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Registry and naming
    registry: str = Field(default="ghcr.io", description="Registry host")
    org: str = Field(default="cicd", description="Organization / namespace")
    version: str = Field(default="latest", description="Image version tag")
    custom_tag: str | None = Field(
        default=None,
        description="Custom tag override (suppresses the -latest companion tag)",
    )
    registry_username: str | None = Field(
        default=None,
        description="Registry username for docker login",
    )
    registry_password: SecretStr | None = Field(
        default=None,
        description="Registry password or token for docker login",
    )

    # Build behaviour
    platforms: str = Field(
        default="linux/amd64",
        description="Comma separated target platforms",
    )
    dry_run: bool = Field(default=False, description="Print commands only")
    use_cache: bool = Field(default=True, description="Allow the build cache")
    cache_from_registry: bool = Field(
        default=False,
        description="Import and export build cache from the registry",
    )
    push_to_registry: bool = Field(default=False, description="Push built images")
    use_buildx: bool | None = Field(
        default=None,
        description="Force (true) or refuse (false) buildx; unset selects automatically",
    )
    buildx_builder: str = Field(
        default="gh-runner-builder",
        description="Name of the buildx builder instance",
    )

    # Paths
    project_root: Path = Field(
        default_factory=Path.cwd,
        description="Root of the repository holding the Dockerfiles",
    )
    build_record: Path | None = Field(
        default=None,
        description="Build record file (defaults under docker/builder)",
    )
    bake_file: Path | None = Field(
        default=None,
        description="Bake definition file (defaults under docker/builder)",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("platforms")
    @classmethod
    def validate_platforms(cls, v: str) -> str:
        """Require at least one non-blank platform."""
        if not any(p.strip() for p in v.split(",")):
            raise ValueError("at least one platform is required")
        return v

    @property
    def platform_list(self) -> list[str]:
        """Platforms as a list, blanks removed, order preserved."""
        return [p.strip() for p in self.platforms.split(",") if p.strip()]

    @property
    def is_multi_platform(self) -> bool:
        """Whether more than one target platform was requested."""
        return len(self.platform_list) > 1

    @property
    def has_credentials(self) -> bool:
        """Whether both a username and a password are configured."""
        return bool(
            self.registry_username
            and self.registry_password
            and self.registry_password.get_secret_value()
        )

    @property
    def record_path(self) -> Path:
        """Effective build record file."""
        if self.build_record is not None:
            return self.build_record
        return self.project_root / BUILDER_DIR / DEFAULT_RECORD_NAME

    @property
    def bake_path(self) -> Path:
        """Effective bake definition file."""
        if self.bake_file is not None:
            return self.bake_file
        return self.project_root / BUILDER_DIR / DEFAULT_BAKE_NAME


def get_settings() -> Settings:
    """Get the application settings.

    When ``PROJECT_ROOT`` is set, ``<project_root>/.env`` is read after the
    working directory's ``.env`` and takes precedence over it.

    Returns:
        Settings instance loaded from environment.
    """
    project_root = os.environ.get("PROJECT_ROOT")
    if project_root:
        return Settings(_env_file=(".env", Path(project_root) / ".env"))
    return Settings()


def apply_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Layer explicit CLI values on top of loaded settings.

    Args:
        settings: Settings loaded from environment and defaults.
        **overrides: Field values; ``None`` means "not given on the CLI".

    Returns:
        New Settings instance with the given values applied and validated.

    Raises:
        ValueError: If an override names an unknown setting.
        ValidationError: If a merged value is invalid.
    """
    update = {k: v for k, v in overrides.items() if v is not None}
    unknown = set(update) - set(Settings.model_fields)
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
    if not update:
        return settings
    return Settings.model_validate({**settings.model_dump(), **update})


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    The registry password is masked by its SecretStr type.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "apply_overrides", "get_settings", "print_settings_json"]
