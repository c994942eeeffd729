"""Normalization of raw model text into complete analysis records."""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum

from food_analyzer.domain.analysis import (
    FIELD_KEYS,
    PLACEHOLDERS,
    AnalysisRecord,
    refusal_record,
)
from food_analyzer.services.extraction import FieldExtractor, as_text

logger = logging.getLogger(__name__)

REFUSAL_MARKERS: tuple[str, ...] = (
    "cannot help",
    "can't help",
    "unable to",
    "i'm sorry",
    "i am sorry",
    "i cannot",
    "i can't",
    "抱歉",
    "无法识别",
    "无法分析",
    "不能提供",
)


class NormalizationTier(str, Enum):
    """Stage of the fallback ladder that produced a record."""

    REFUSAL = "refusal"
    STRICT_JSON = "strict_json"
    EMBEDDED_JSON = "embedded_json"
    FIELD_EXTRACTION = "field_extraction"


@dataclass
class ResponseNormalizer:
    """Turn untrusted model output into a fully populated record.

    Tiers are tried strictly in order and the first one that yields a
    structured object wins, even if some of its keys need placeholders.
    Normalization never raises.
    """

    extractor: FieldExtractor = field(default_factory=FieldExtractor)
    refusal_markers: tuple[str, ...] = REFUSAL_MARKERS

    def normalize(self, raw_text: object) -> AnalysisRecord:
        """Return a complete record for any model output."""
        record, _ = self.normalize_with_tier(raw_text)
        return record

    def normalize_with_tier(
        self, raw_text: object
    ) -> tuple[AnalysisRecord, NormalizationTier]:
        """Return a complete record and the tier that resolved it."""
        text = as_text(raw_text)

        if self._is_refusal(text):
            logger.debug("Model output matched a refusal marker")
            return refusal_record(), NormalizationTier.REFUSAL

        parsed = _parse_object(text.strip())
        if parsed is not None:
            logger.debug("Model output parsed as strict JSON")
            return _record_from_mapping(parsed), NormalizationTier.STRICT_JSON

        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            parsed = _parse_object(text[start : end + 1])
            if parsed is not None:
                logger.debug("Model output contained an embedded JSON object")
                return (
                    _record_from_mapping(parsed),
                    NormalizationTier.EMBEDDED_JSON,
                )

        logger.debug("Falling back to label extraction for model output")
        values = {key: self.extractor.extract(key, text) for key in FIELD_KEYS}
        return _record_from_values(values), NormalizationTier.FIELD_EXTRACTION

    def _is_refusal(self, text: str) -> bool:
        lowered = text.lower()
        return any(marker in lowered for marker in self.refusal_markers)


def _parse_object(text: str) -> dict[str, object] | None:
    """Parse text as a JSON object, returning None for anything else."""
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _record_from_mapping(data: dict[str, object]) -> AnalysisRecord:
    values = {key: _safe_coerce(data.get(key)) for key in FIELD_KEYS}
    return _record_from_values(values)


def _record_from_values(values: dict[str, str | None]) -> AnalysisRecord:
    resolved: dict[str, str] = {}
    for key, value in values.items():
        cleaned = _clean(value)
        resolved[key] = cleaned if cleaned else PLACEHOLDERS[key]
    return AnalysisRecord.model_validate(resolved)


def _clean(value: str | None) -> str | None:
    """Drop characters that cannot be encoded, such as lone surrogates."""
    if value is None:
        return None
    return value.encode("utf-8", "ignore").decode("utf-8").strip() or None


def _safe_coerce(value: object) -> str | None:
    try:
        return _coerce(value)
    except (RecursionError, ValueError):
        logger.debug("Could not flatten a deeply nested JSON value")
        return None


def _coerce(value: object) -> str | None:
    """Flatten a JSON value into a display string."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        parts = [_coerce(item) for item in value]
        joined = ", ".join(part for part in parts if part)
        return joined or None
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
