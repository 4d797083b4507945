"""Tests for registry/service.py module."""

import logging
from unittest.mock import patch

import pytest

from runner_builder.builds.runner import DockerRunner
from runner_builder.errors import AuthFailureError, PushFailureError
from runner_builder.registry.service import authenticate, push_image, push_tags


class TestAuthenticate:
    """Tests for authenticate function."""

    def test_no_credentials_warns_and_skips(self, make_settings, fake_docker, caplog):
        """Without credentials no login happens."""
        settings = make_settings(push_to_registry=True)
        with patch("subprocess.run", fake_docker):
            assert authenticate(settings, DockerRunner()) is False

        assert fake_docker.calls == []
        assert "No credentials provided" in caplog.text

    def test_username_without_password(self, make_settings, fake_docker):
        """Half a credential pair counts as none."""
        settings = make_settings(registry_username="bot")
        with patch("subprocess.run", fake_docker):
            assert authenticate(settings, DockerRunner()) is False
        assert fake_docker.calls == []

    def test_login_uses_stdin(self, make_settings, fake_docker):
        """The password is fed on stdin, never in argv."""
        settings = make_settings(
            registry="reg.example.com",
            registry_username="bot",
            registry_password="hunter2",
        )
        with patch("subprocess.run", fake_docker):
            assert authenticate(settings, DockerRunner()) is True

        assert fake_docker.calls == [
            ["docker", "login", "reg.example.com", "-u", "bot", "--password-stdin"]
        ]
        assert fake_docker.inputs == ["hunter2"]
        assert all("hunter2" not in arg for arg in fake_docker.calls[0])

    def test_login_failure(self, make_settings, make_fake_docker):
        """A failed login raises AuthFailureError."""
        docker = make_fake_docker({("docker", "login"): 1})
        settings = make_settings(registry_username="bot", registry_password="x")
        with patch("subprocess.run", docker):
            with pytest.raises(AuthFailureError) as exc_info:
                authenticate(settings, DockerRunner())
        assert exc_info.value.exit_code == 1
        assert exc_info.value.registry == "ghcr.io"

    def test_dry_run_masks_password(self, make_settings):
        """Dry run echoes the login without the password and runs nothing."""
        echoed: list[str] = []
        settings = make_settings(registry_username="bot", registry_password="hunter2")
        with patch("subprocess.run") as mock_run:
            assert authenticate(settings, DockerRunner(dry_run=True, echo=echoed.append))
            mock_run.assert_not_called()
        assert echoed == ["Login command: docker login ghcr.io -u bot --password-stdin"]


class TestPush:
    """Tests for push_image and push_tags functions."""

    def test_push_image(self, fake_docker):
        """A successful push runs docker push."""
        with patch("subprocess.run", fake_docker):
            push_image("reg/org/gh-runner:cpp-1", DockerRunner())
        assert fake_docker.calls == [["docker", "push", "reg/org/gh-runner:cpp-1"]]

    def test_push_failure(self, make_fake_docker):
        """A failed push raises PushFailureError carrying the tag."""
        docker = make_fake_docker({("docker", "push"): 1})
        with patch("subprocess.run", docker):
            with pytest.raises(PushFailureError) as exc_info:
                push_image("reg/org/gh-runner:cpp-1", DockerRunner(), image_type="cpp")
        assert exc_info.value.tag == "reg/org/gh-runner:cpp-1"
        assert exc_info.value.image_type == "cpp"
        assert exc_info.value.code == "push_failed"

    def test_push_tags_stops_at_first_failure(self, make_fake_docker):
        """Later tags are not pushed after a failure."""
        docker = make_fake_docker({("docker", "push", "b"): 1})
        with patch("subprocess.run", docker):
            with pytest.raises(PushFailureError):
                push_tags(["a", "b", "c"], DockerRunner())
        assert [c[-1] for c in docker.calls] == ["a", "b"]

    def test_push_tags_logs(self, fake_docker, caplog):
        """Each push is logged."""
        caplog.set_level(logging.INFO)
        with patch("subprocess.run", fake_docker):
            assert push_tags(["a", "b"], DockerRunner()) == ["a", "b"]
        assert "Successfully pushed a" in caplog.text
