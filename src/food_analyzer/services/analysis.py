"""Analysis of food photos via a language model."""

import asyncio
import base64
import logging
from dataclasses import dataclass, field
from typing import Protocol

from food_analyzer.domain.errors import AnalysisInProgressError, InvalidUploadError
from food_analyzer.domain.history import HistoryEntry, InsertResult
from food_analyzer.services.history import HistoryStore
from food_analyzer.services.normalizer import NormalizationTier, ResponseNormalizer

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = (
    "You are a food nutrition assistant. Analyze the food in the image and "
    "give general reference information (not medical advice):\n"
    "1. foodName: the main food in the image\n"
    "2. carbContent: estimated carbohydrate content, high/medium/low\n"
    "3. suitabilityIndex: suitability for people managing blood sugar, one of "
    '"eat in moderation", "eat small amounts with caution", "avoid"\n'
    "4. recommendedAmount: a reference portion for a typical adult\n"
    "5. nutrients: a short summary of the main nutrients\n"
    "6. healthTips: general healthy eating tips for this kind of food\n"
    "Respond with a single JSON object with exactly the string fields "
    "foodName, carbContent, suitabilityIndex, recommendedAmount, nutrients, "
    "healthTips. Output valid JSON only."
)


class ModelClient(Protocol):
    """Interface for the upstream vision language model."""

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_tokens: int,
    ) -> str:
        """Return the raw text the model produced for an image."""


@dataclass(frozen=True)
class AnalysisOutcome:
    """A normalized analysis and how it was stored."""

    entry: HistoryEntry
    insert_result: InsertResult
    tier: NormalizationTier


@dataclass
class AnalysisService:
    """Run one analysis at a time and record the results in history."""

    client: ModelClient
    history: HistoryStore
    model: str
    max_tokens: int = 1000
    normalizer: ResponseNormalizer = field(default_factory=ResponseNormalizer)
    _in_flight: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    async def analyze(self, image_bytes: bytes) -> AnalysisOutcome:
        """Analyze an image and prepend the result to history.

        Upstream failures propagate and leave the history untouched.
        """
        if not image_bytes:
            raise InvalidUploadError("Image is empty")
        if self._in_flight.locked():
            raise AnalysisInProgressError("An analysis is already running")
        async with self._in_flight:
            raw_text = await self.client.complete(
                model=self.model,
                prompt=ANALYSIS_PROMPT,
                image_data_url=to_data_url(image_bytes),
                max_tokens=self.max_tokens,
            )
            record, tier = self.normalizer.normalize_with_tier(raw_text)
            logger.info("Analyzed image as %r via %s", record.food_name, tier.value)
            entry = HistoryEntry.create(record, image_bytes)
            result = self.history.insert(entry)
            return AnalysisOutcome(entry=entry, insert_result=result, tier=tier)


def to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
