"""Binary envelope codec for persisted history entries."""

import json
import struct
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from food_analyzer.domain.analysis import AnalysisRecord
from food_analyzer.domain.errors import DecodeError
from food_analyzer.domain.history import HistoryEntry

MAGIC = b"FAHE"
CURRENT_VERSION = 1

_PREFIX = struct.Struct(">4sH")
_HEADER_LENGTH = struct.Struct(">I")
_IMAGE_LENGTH = struct.Struct(">Q")
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_MICROSECOND = timedelta(microseconds=1)


class _HeaderV1(BaseModel):
    """JSON header of a version 1 envelope."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: UUID
    created_at: int = Field(alias="createdAt")
    record: AnalysisRecord


@dataclass
class RecordCodec:
    """Encode history entries to versioned blobs and back."""

    version: int = CURRENT_VERSION

    def encode(self, entry: HistoryEntry) -> bytes:
        """Pack an entry into a single self-describing blob."""
        header = _HeaderV1(
            id=entry.id,
            created_at=_to_epoch_micros(entry.created_at),
            record=entry.record,
        )
        header_bytes = json.dumps(
            header.model_dump(mode="json", by_alias=True),
            ensure_ascii=False,
            separators=(",", ":"),
        ).encode("utf-8")
        image = entry.source_image or b""
        return b"".join(
            (
                _PREFIX.pack(MAGIC, self.version),
                _HEADER_LENGTH.pack(len(header_bytes)),
                header_bytes,
                _IMAGE_LENGTH.pack(len(image)),
                image,
            )
        )

    def decode(self, blob: bytes) -> HistoryEntry:
        """Unpack a blob, raising DecodeError on any inconsistency."""
        if len(blob) < _PREFIX.size:
            raise DecodeError("magic", "blob is shorter than the envelope prefix")
        magic, version = _PREFIX.unpack_from(blob, 0)
        if magic != MAGIC:
            raise DecodeError("magic", f"unexpected marker {magic!r}")
        decoder = _DECODERS.get(version)
        if decoder is None:
            raise DecodeError("version", f"unsupported envelope version {version}")
        return decoder(memoryview(blob)[_PREFIX.size :])


def _decode_v1(body: memoryview) -> HistoryEntry:
    if len(body) < _HEADER_LENGTH.size:
        raise DecodeError("header", "missing header length")
    (header_length,) = _HEADER_LENGTH.unpack_from(body, 0)
    offset = _HEADER_LENGTH.size
    if len(body) < offset + header_length:
        raise DecodeError("header", "header is truncated")
    header_bytes = bytes(body[offset : offset + header_length])
    offset += header_length
    try:
        payload = json.loads(header_bytes.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise DecodeError("header", f"header is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise DecodeError("header", "header is not a JSON object")
    try:
        header = _HeaderV1.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "header"
        raise DecodeError(location, first["msg"]) from exc

    if len(body) < offset + _IMAGE_LENGTH.size:
        raise DecodeError("image", "missing image length")
    (image_length,) = _IMAGE_LENGTH.unpack_from(body, offset)
    offset += _IMAGE_LENGTH.size
    remaining = len(body) - offset
    if remaining != image_length:
        raise DecodeError(
            "image",
            f"expected {image_length} image bytes, found {remaining}",
        )
    image = bytes(body[offset:]) if image_length else None

    try:
        created_at = _from_epoch_micros(header.created_at)
    except OverflowError as exc:
        raise DecodeError("createdAt", "timestamp is out of range") from exc
    return HistoryEntry(
        id=header.id,
        created_at=created_at,
        record=header.record,
        source_image=image,
    )


_DECODERS: dict[int, Callable[[memoryview], HistoryEntry]] = {1: _decode_v1}


def _to_epoch_micros(value: datetime) -> int:
    return (value - _EPOCH) // _MICROSECOND


def _from_epoch_micros(value: int) -> datetime:
    return _EPOCH + timedelta(microseconds=value)
