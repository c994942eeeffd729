"""Ordered, durable history of analysis results."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from food_analyzer.domain.errors import DecodeError, PersistError
from food_analyzer.domain.history import (
    DroppedBlob,
    HistoryEntry,
    InsertResult,
    LoadReport,
    PersistState,
)
from food_analyzer.services.codec import RecordCodec

logger = logging.getLogger(__name__)


class HistoryBackend(Protocol):
    """Storage interface for encoded history blobs."""

    def write(self, key: str, blob: bytes) -> None:
        """Durably store a blob under a new key.

        Storage failures are raised as OSError and nothing else.
        """

    def read_all(self) -> list[tuple[str, bytes]]:
        """Return every stored blob, newest first."""

    def clear(self) -> None:
        """Remove every stored blob."""


@dataclass
class HistoryStore:
    """Newest-first history backed by independently decodable blobs.

    Operations are serialized with a lock so a clear never interleaves with
    a load. Corrupt blobs are excluded from the view but left in storage.
    """

    backend: HistoryBackend
    codec: RecordCodec = field(default_factory=RecordCodec)
    _entries: list[HistoryEntry] = field(default_factory=list, init=False)
    _states: dict[UUID, PersistState] = field(default_factory=dict, init=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False)

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        """Current entries, newest first."""
        with self._lock:
            return tuple(self._entries)

    def get(self, entry_id: UUID) -> HistoryEntry | None:
        """Return an entry by id, if present."""
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
        return None

    def state_of(self, entry_id: UUID) -> PersistState | None:
        """Return the durability state of an entry, if known."""
        with self._lock:
            return self._states.get(entry_id)

    def insert(self, entry: HistoryEntry) -> InsertResult:
        """Prepend an entry and persist it.

        A persistence failure keeps the entry for this session only and is
        reported through the returned result.
        """
        with self._lock:
            if entry.id in self._states:
                raise ValueError(f"History already contains entry {entry.id}")
            self._entries.insert(0, entry)
            try:
                self.backend.write(str(entry.id), self.codec.encode(entry))
            except OSError as exc:
                logger.exception("Failed to persist history entry %s", entry.id)
                self._states[entry.id] = PersistState.PERSIST_FAILED
                return InsertResult(
                    entry=entry,
                    state=PersistState.PERSIST_FAILED,
                    error=PersistError(entry.id, str(exc)),
                )
            self._states[entry.id] = PersistState.PERSISTED
            return InsertResult(entry=entry, state=PersistState.PERSISTED)

    def load_all(self) -> LoadReport:
        """Reload the history from storage, skipping undecodable blobs."""
        with self._lock:
            loaded: list[HistoryEntry] = []
            dropped: list[DroppedBlob] = []
            seen: set[UUID] = set()
            for key, blob in self.backend.read_all():
                try:
                    entry = self.codec.decode(blob)
                except DecodeError as exc:
                    logger.warning("Skipping history blob %s: %s", key, exc)
                    dropped.append(DroppedBlob(key=key, error=exc))
                    continue
                if entry.id in seen:
                    error = DecodeError("id", f"duplicate entry id {entry.id}")
                    logger.warning("Skipping history blob %s: %s", key, error)
                    dropped.append(DroppedBlob(key=key, error=error))
                    continue
                seen.add(entry.id)
                loaded.append(entry)

            unsaved = [
                entry
                for entry in self._entries
                if self._states.get(entry.id) is PersistState.PERSIST_FAILED
                and entry.id not in seen
            ]
            merged = unsaved + loaded
            if unsaved:
                merged.sort(key=lambda entry: entry.created_at, reverse=True)

            self._entries = merged
            self._states = {entry.id: PersistState.PERSISTED for entry in loaded}
            self._states.update(
                {entry.id: PersistState.PERSIST_FAILED for entry in unsaved}
            )
            if dropped:
                logger.info(
                    "Loaded %d history entries, dropped %d",
                    len(loaded),
                    len(dropped),
                )
            return LoadReport(entries=tuple(merged), dropped=tuple(dropped))

    def clear_all(self) -> None:
        """Remove every entry from memory and storage."""
        with self._lock:
            self.backend.clear()
            self._entries = []
            self._states = {}
