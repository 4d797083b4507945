"""Build record persistence.

The build record is a plain text file listing one fully-qualified tag per
line, no header. Each build run starts it empty and appends to it after
each successful image; the push-all step replays it. There is a single
writer per run, so no locking is done.
"""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class BuildRecordFile:
    """Append-only list of tags produced during a build run."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Whether the record file is present."""
        return self.path.is_file()

    def append(self, tag: str) -> None:
        """Append one tag.

        A write failure is logged as a warning and not raised.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(f"{tag}\n")
        except OSError as e:
            logger.warning("Could not record %s in %s: %s", tag, self.path, e)
            return
        logger.debug("Recorded %s", tag)

    def reset(self) -> None:
        """Start an empty record, discarding tags from earlier runs.

        A write failure is logged as a warning and not raised.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("", encoding="utf-8")
        except OSError as e:
            logger.warning("Could not reset build record %s: %s", self.path, e)
            return
        logger.debug("Reset build record %s", self.path)

    def read(self) -> list[str]:
        """Return recorded tags in order, blank lines skipped."""
        if not self.exists():
            return []
        lines = self.path.read_text(encoding="utf-8").splitlines()
        return [line.strip() for line in lines if line.strip()]

    def clear(self) -> bool:
        """Delete the record file.

        Returns:
            True if a file was removed.
        """
        if not self.exists():
            return False
        self.path.unlink()
        logger.info("Cleaned up build record %s", self.path)
        return True


__all__ = ["BuildRecordFile"]
