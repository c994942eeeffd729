"""Domain models for analysis history."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from food_analyzer.domain.analysis import AnalysisRecord
from food_analyzer.domain.errors import DecodeError, PersistError


@dataclass(frozen=True)
class HistoryEntry:
    """An analysis record bundled with the image it was produced from."""

    id: UUID
    created_at: datetime
    record: AnalysisRecord
    source_image: bytes | None = None

    def __post_init__(self) -> None:
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware")
        if self.source_image is not None and not self.source_image:
            raise ValueError("source_image must be non-empty when present")

    @classmethod
    def create(
        cls, record: AnalysisRecord, source_image: bytes | None
    ) -> "HistoryEntry":
        """Wrap a record with a fresh id and the current UTC time."""
        return cls(
            id=uuid4(),
            created_at=datetime.now(tz=UTC),
            record=record,
            source_image=source_image or None,
        )


class PersistState(str, Enum):
    """Durability of an entry from the store's point of view."""

    PERSISTED = "persisted"
    PERSIST_FAILED = "persist_failed"


@dataclass(frozen=True)
class InsertResult:
    """Outcome of inserting an entry into the history."""

    entry: HistoryEntry
    state: PersistState
    error: PersistError | None = None

    @property
    def persisted(self) -> bool:
        return self.state is PersistState.PERSISTED


@dataclass(frozen=True)
class DroppedBlob:
    """A persisted blob excluded from the history during a load."""

    key: str
    error: DecodeError


@dataclass(frozen=True)
class LoadReport:
    """Result of reloading the history from its backend."""

    entries: tuple[HistoryEntry, ...]
    dropped: tuple[DroppedBlob, ...] = ()

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)
