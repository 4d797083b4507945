"""Tests for configuration module."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from runner_builder.config import (
    Settings,
    apply_overrides,
    get_settings,
    print_settings_json,
)


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Settings should have the documented defaults."""
        settings = Settings(_env_file=None)

        assert settings.registry == "ghcr.io"
        assert settings.org == "cicd"
        assert settings.version == "latest"
        assert settings.custom_tag is None
        assert settings.platforms == "linux/amd64"
        assert settings.dry_run is False
        assert settings.use_cache is True
        assert settings.cache_from_registry is False
        assert settings.push_to_registry is False
        assert settings.use_buildx is None
        assert settings.buildx_builder == "gh-runner-builder"
        assert settings.project_root == Path.cwd()
        assert settings.log_level == "INFO"

    def test_settings_from_env(self) -> None:
        """Settings should be loadable from unprefixed environment variables."""
        with patch.dict(
            os.environ,
            {
                "REGISTRY": "docker.io",
                "ORG": "myorg",
                "VERSION": "1.2.3",
                "DRY_RUN": "true",
                "USE_CACHE": "false",
                "CACHE_FROM_REGISTRY": "true",
                "PUSH_TO_REGISTRY": "true",
                "USE_BUILDX": "false",
                "PLATFORMS": "linux/amd64,linux/arm64",
            },
        ):
            settings = Settings(_env_file=None)
            assert settings.registry == "docker.io"
            assert settings.org == "myorg"
            assert settings.version == "1.2.3"
            assert settings.dry_run is True
            assert settings.use_cache is False
            assert settings.cache_from_registry is True
            assert settings.push_to_registry is True
            assert settings.use_buildx is False
            assert settings.platform_list == ["linux/amd64", "linux/arm64"]

    def test_empty_env_value_ignored(self) -> None:
        """An empty variable falls back to the default."""
        with patch.dict(os.environ, {"USE_BUILDX": "", "REGISTRY": ""}):
            settings = Settings(_env_file=None)
            assert settings.use_buildx is None
            assert settings.registry == "ghcr.io"

    def test_env_file(self, tmp_path: Path) -> None:
        """A .env file is read like the environment."""
        env_file = tmp_path / ".env"
        env_file.write_text("ORG=fromfile\nREGISTRY_USERNAME=bot\n")
        settings = Settings(_env_file=env_file)
        assert settings.org == "fromfile"
        assert settings.registry_username == "bot"

    def test_password_is_secret(self) -> None:
        """The password never appears in repr."""
        with patch.dict(os.environ, {"REGISTRY_PASSWORD": "hunter2"}):
            settings = Settings(_env_file=None)
            assert "hunter2" not in repr(settings)
            assert settings.registry_password is not None
            assert settings.registry_password.get_secret_value() == "hunter2"


class TestDerivedProperties:
    """Test computed settings properties."""

    def test_platform_list_strips_blanks(self) -> None:
        """Blank entries and whitespace are dropped."""
        settings = Settings(_env_file=None, platforms=" linux/amd64 , ,linux/arm64")
        assert settings.platform_list == ["linux/amd64", "linux/arm64"]
        assert settings.is_multi_platform is True

    def test_single_platform(self) -> None:
        """One platform is not multi-platform."""
        assert Settings(_env_file=None).is_multi_platform is False

    def test_has_credentials(self) -> None:
        """Both username and password are needed."""
        assert Settings(_env_file=None).has_credentials is False
        assert (
            Settings(_env_file=None, registry_username="bot").has_credentials is False
        )
        assert (
            Settings(
                _env_file=None, registry_username="bot", registry_password="x"
            ).has_credentials
            is True
        )

    def test_default_paths(self, tmp_path: Path) -> None:
        """Record and bake file default under docker/builder."""
        settings = Settings(_env_file=None, project_root=tmp_path)
        assert settings.record_path == tmp_path / "docker/builder/built-images.txt"
        assert settings.bake_path == tmp_path / "docker/builder/docker-bake.hcl"

    def test_explicit_paths(self, tmp_path: Path) -> None:
        """Explicit record and bake paths win."""
        settings = Settings(
            _env_file=None,
            build_record=tmp_path / "tags.txt",
            bake_file=tmp_path / "bake.hcl",
        )
        assert settings.record_path == tmp_path / "tags.txt"
        assert settings.bake_path == tmp_path / "bake.hcl"


class TestApplyOverrides:
    """Test flag > env > default precedence."""

    def test_flag_beats_env(self) -> None:
        """Explicit values replace environment values."""
        with patch.dict(os.environ, {"REGISTRY": "env.example.com", "ORG": "envorg"}):
            settings = apply_overrides(Settings(_env_file=None), registry="flag.example.com")
            assert settings.registry == "flag.example.com"
            assert settings.org == "envorg"

    def test_none_means_not_given(self) -> None:
        """None leaves the loaded value untouched."""
        with patch.dict(os.environ, {"PUSH_TO_REGISTRY": "true"}):
            base = Settings(_env_file=None)
            settings = apply_overrides(base, push_to_registry=None, version=None)
            assert settings.push_to_registry is True
            assert settings is base

    def test_input_settings_unchanged(self) -> None:
        """Overrides produce a new instance."""
        base = Settings(_env_file=None)
        updated = apply_overrides(base, dry_run=True)
        assert updated.dry_run is True
        assert base.dry_run is False

    def test_unknown_setting(self) -> None:
        """Unknown names are rejected."""
        with pytest.raises(ValueError):
            apply_overrides(Settings(_env_file=None), colour="blue")

    def test_empty_platforms_rejected(self) -> None:
        """Overridden values are validated like loaded ones."""
        with pytest.raises(ValidationError):
            apply_overrides(Settings(_env_file=None), platforms=" , ")

    def test_invalid_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            apply_overrides(Settings(_env_file=None), dry_run="sometimes")

    def test_secret_survives_override(self) -> None:
        base = Settings(_env_file=None, registry_password="hunter2")
        updated = apply_overrides(base, org="other")
        assert updated.org == "other"
        assert updated.registry_password is not None
        assert updated.registry_password.get_secret_value() == "hunter2"


class TestGetSettings:
    """Test get_settings function."""

    def test_get_settings_returns_settings(self) -> None:
        """get_settings should return a Settings instance."""
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_project_env_file(self, tmp_path: Path, monkeypatch) -> None:
        """PROJECT_ROOT/.env is read even from another working directory."""
        project = tmp_path / "project"
        project.mkdir()
        (project / ".env").write_text("ORG=from-project\nVERSION=2.0\n")
        (tmp_path / ".env").write_text("ORG=from-cwd\nREGISTRY=cwd.example.com\n")
        monkeypatch.setenv("PROJECT_ROOT", str(project))

        settings = get_settings()
        assert settings.project_root == project
        assert settings.org == "from-project"
        assert settings.version == "2.0"
        assert settings.registry == "cwd.example.com"

    def test_env_var_beats_project_env_file(self, tmp_path: Path, monkeypatch) -> None:
        project = tmp_path / "project"
        project.mkdir()
        (project / ".env").write_text("ORG=from-project\n")
        monkeypatch.setenv("PROJECT_ROOT", str(project))
        monkeypatch.setenv("ORG", "from-env")
        assert get_settings().org == "from-env"


class TestPrintSettingsJson:
    """Test print_settings_json function."""

    def test_print_settings_json(self) -> None:
        """print_settings_json should return valid JSON."""
        json_str = print_settings_json(Settings(_env_file=None))
        parsed = json.loads(json_str)
        for key in ("registry", "org", "version", "platforms", "project_root"):
            assert key in parsed

    def test_password_masked(self) -> None:
        """The password is never rendered in clear text."""
        settings = Settings(_env_file=None, registry_password="hunter2")
        json_str = print_settings_json(settings)
        assert "hunter2" not in json_str
        assert json.loads(json_str)["registry_password"] == "**********"

    def test_print_settings_json_default(self) -> None:
        """print_settings_json without args should use default settings."""
        parsed = json.loads(print_settings_json())
        assert parsed["registry"] == "ghcr.io"
