"""Build orchestration module.

This module handles:
- Composing docker build / buildx / bake commands
- Running them (or echoing them in dry-run mode)
- Recording produced tags for the push-all step
"""

from runner_builder.builds.record import BuildRecordFile
from runner_builder.builds.runner import CommandResult, DockerRunner

__all__ = ["BuildRecordFile", "CommandResult", "DockerRunner"]

# Access the orchestrator via runner_builder.builds.service
