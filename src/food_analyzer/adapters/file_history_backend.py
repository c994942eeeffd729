"""Filesystem-backed storage for history blobs."""

import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from food_analyzer.services.history import HistoryBackend

logger = logging.getLogger(__name__)

_SUFFIX = ".entry"
_NAME_PATTERN = re.compile(r"^(?P<sequence>\d{12})-(?P<key>[^/\\]+)\.entry$")


@dataclass
class FileHistoryBackend(HistoryBackend):
    """One file per entry, ordered by a monotonically increasing sequence."""

    directory: Path

    def write(self, key: str, blob: bytes) -> None:
        """Write a blob atomically under the next sequence number."""
        self.directory.mkdir(parents=True, exist_ok=True)
        sequence = self._last_sequence() + 1
        target = self.directory / f"{sequence:012d}-{key}{_SUFFIX}"
        fd, temp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(blob)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, target)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def read_all(self) -> list[tuple[str, bytes]]:
        """Return stored blobs, newest first."""
        blobs: list[tuple[str, bytes]] = []
        for _, key, path in sorted(self._entries(), reverse=True):
            try:
                blobs.append((key, path.read_bytes()))
            except OSError:
                logger.warning("Unable to read history file %s", path.name)
        return blobs

    def clear(self) -> None:
        """Swap the directory out atomically, then delete the old contents."""
        if not self.directory.exists():
            return
        discarded = self.directory.with_name(
            f".{self.directory.name}.cleared-{os.getpid()}"
        )
        if discarded.exists():
            shutil.rmtree(discarded)
        os.replace(self.directory, discarded)
        self.directory.mkdir(parents=True, exist_ok=True)
        shutil.rmtree(discarded, ignore_errors=True)

    def _entries(self) -> list[tuple[int, str, Path]]:
        if not self.directory.exists():
            return []
        found: list[tuple[int, str, Path]] = []
        for path in self.directory.iterdir():
            match = _NAME_PATTERN.match(path.name)
            if match is None:
                continue
            found.append((int(match.group("sequence")), match.group("key"), path))
        return found

    def _last_sequence(self) -> int:
        return max((sequence for sequence, _, _ in self._entries()), default=0)
