"""Registry module.

This module handles registry login and image pushes.
"""

from runner_builder.registry.service import authenticate, push_image, push_tags

__all__ = ["authenticate", "push_image", "push_tags"]
