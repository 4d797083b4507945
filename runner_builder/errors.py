"""Error definitions for runner_builder.

Every error carries a stable ``code`` so callers (the CLI, tests) can
handle failures without matching on message text. None of these are
retried; each aborts the current image type and any remaining sequence.
"""

from __future__ import annotations

UNKNOWN_IMAGE_TYPE = "unknown_image_type"
DOCKERFILE_MISSING = "dockerfile_missing"
BUILD_FAILED = "build_failed"
AUTH_FAILED = "auth_failed"
PUSH_FAILED = "push_failed"
MULTI_PLATFORM_LOAD = "multi_platform_load"
BUILDX_UNAVAILABLE = "buildx_unavailable"
BAKE_FILE_MISSING = "bake_file_missing"
RECORD_MISSING = "record_missing"


class RunnerBuildError(Exception):
    """Base error for build orchestration."""

    def __init__(self, message: str, code: str = "runner_build_error") -> None:
        super().__init__(message)
        self.code = code


class UnknownImageTypeError(RunnerBuildError):
    """Raised when a name is not a recognized image type."""

    def __init__(self, image_type: str, message: str | None = None) -> None:
        super().__init__(
            message or f"Unknown image type: {image_type}",
            code=UNKNOWN_IMAGE_TYPE,
        )
        self.image_type = image_type


class DockerfileMissingError(RunnerBuildError):
    """Raised when a recipe points at a Dockerfile that does not exist."""

    def __init__(self, image_type: str, dockerfile: str) -> None:
        super().__init__(
            f"Dockerfile not found for {image_type}: {dockerfile}",
            code=DOCKERFILE_MISSING,
        )
        self.image_type = image_type
        self.dockerfile = dockerfile


class BuildFailureError(RunnerBuildError):
    """Raised when the external build tool exits non-zero."""

    def __init__(self, image_type: str, exit_code: int | None) -> None:
        super().__init__(
            f"Build failed for {image_type} (exit status {exit_code})",
            code=BUILD_FAILED,
        )
        self.image_type = image_type
        self.exit_code = exit_code


class AuthFailureError(RunnerBuildError):
    """Raised when ``docker login`` exits non-zero."""

    def __init__(self, registry: str, exit_code: int | None) -> None:
        super().__init__(
            f"Failed to authenticate to {registry} (exit status {exit_code})",
            code=AUTH_FAILED,
        )
        self.registry = registry
        self.exit_code = exit_code


class PushFailureError(RunnerBuildError):
    """Raised when ``docker push`` exits non-zero."""

    def __init__(
        self,
        tag: str,
        exit_code: int | None,
        image_type: str | None = None,
    ) -> None:
        super().__init__(
            f"Failed to push {tag} (exit status {exit_code})",
            code=PUSH_FAILED,
        )
        self.tag = tag
        self.exit_code = exit_code
        self.image_type = image_type


class MultiPlatformLoadError(RunnerBuildError):
    """Raised when a multi-platform result would be loaded into the local daemon."""

    def __init__(self, platforms: list[str], image_type: str | None = None) -> None:
        subject = f" of {image_type}" if image_type else ""
        super().__init__(
            f"Cannot load a multi-platform build{subject} into the local docker "
            f"daemon ({', '.join(platforms)}); use --push or a single platform",
            code=MULTI_PLATFORM_LOAD,
        )
        self.platforms = platforms
        self.image_type = image_type


class BuildxUnavailableError(RunnerBuildError):
    """Raised when docker buildx or its builder cannot be used."""

    def __init__(
        self,
        image_type: str | None = None,
        exit_code: int | None = None,
        message: str = "Docker buildx not available",
    ) -> None:
        if image_type:
            message = f"{message} for {image_type}"
        if exit_code is not None:
            message = f"{message} (exit status {exit_code})"
        super().__init__(message, code=BUILDX_UNAVAILABLE)
        self.image_type = image_type
        self.exit_code = exit_code


class BakeFileMissingError(RunnerBuildError):
    """Raised when the bake definition file does not exist."""

    def __init__(self, bake_file: str) -> None:
        super().__init__(f"Bake file not found: {bake_file}", code=BAKE_FILE_MISSING)
        self.bake_file = bake_file


class RecordMissingError(RunnerBuildError):
    """Raised when push-all finds no build record to replay."""

    def __init__(self, record_path: str) -> None:
        super().__init__(
            f"No built images found in {record_path}. Run build first.",
            code=RECORD_MISSING,
        )
        self.record_path = record_path


__all__ = [
    "AuthFailureError",
    "BakeFileMissingError",
    "BuildFailureError",
    "BuildxUnavailableError",
    "DockerfileMissingError",
    "MultiPlatformLoadError",
    "PushFailureError",
    "RecordMissingError",
    "RunnerBuildError",
    "UnknownImageTypeError",
]
