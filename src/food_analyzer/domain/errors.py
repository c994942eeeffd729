"""Error types shared across the food analyzer."""

from uuid import UUID


class UpstreamFailure(RuntimeError):
    """The model call failed before any text could be normalized."""


class AnalysisInProgressError(RuntimeError):
    """Another analysis is still waiting on the model."""


class InvalidUploadError(ValueError):
    """The uploaded file cannot be analyzed."""

    def __init__(self, reason: str, *, too_large: bool = False) -> None:
        super().__init__(reason)
        self.reason = reason
        self.too_large = too_large


class DecodeError(ValueError):
    """A persisted history blob could not be decoded."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class PersistError(RuntimeError):
    """A history entry could not be written to durable storage."""

    def __init__(self, entry_id: UUID, reason: str) -> None:
        super().__init__(f"entry {entry_id} was not saved: {reason}")
        self.entry_id = entry_id
        self.reason = reason
