"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import pytest

from food_analyzer.config import Settings
from food_analyzer.containers import AppContainer
from food_analyzer.domain.analysis import AnalysisRecord
from food_analyzer.domain.errors import UpstreamFailure
from food_analyzer.domain.history import HistoryEntry
from food_analyzer.services.analysis import AnalysisService, ModelClient
from food_analyzer.services.history import HistoryBackend, HistoryStore

STRICT_JSON = (
    '{"foodName":"apple","carbContent":"low","suitabilityIndex":"ok",'
    '"recommendedAmount":"1 unit","nutrients":"fiber","healthTips":"eat fresh"}'
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x01\x02fake-png-body"


@dataclass
class InMemoryHistoryBackend(HistoryBackend):
    """In-memory blob storage for tests."""

    blobs: list[tuple[str, bytes]] = field(default_factory=list)
    clears: int = 0

    def write(self, key: str, blob: bytes) -> None:
        self.blobs.insert(0, (key, blob))

    def read_all(self) -> list[tuple[str, bytes]]:
        return list(self.blobs)

    def clear(self) -> None:
        self.blobs.clear()
        self.clears += 1


@dataclass
class FailingHistoryBackend(InMemoryHistoryBackend):
    """Backend whose writes always fail."""

    def write(self, key: str, blob: bytes) -> None:
        raise OSError("disk full")


@dataclass
class FakeModelClient(ModelClient):
    """Fake model client returning fixed text."""

    text: str = STRICT_JSON
    calls: list[dict[str, object]] = field(default_factory=list)

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_tokens: int,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "prompt": prompt,
                "image_data_url": image_data_url,
                "max_tokens": max_tokens,
            }
        )
        return self.text


@dataclass
class FailingModelClient(ModelClient):
    """Model client that always fails upstream."""

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str,
        max_tokens: int,
    ) -> str:
        raise UpstreamFailure("connection reset")


def make_record(food_name: str = "apple") -> AnalysisRecord:
    return AnalysisRecord(
        food_name=food_name,
        carb_content="low",
        suitability_index="eat in moderation",
        recommended_amount="1 medium fruit",
        nutrients="fiber, vitamin C",
        health_tips="eat with the skin on",
    )


def make_entry(
    food_name: str = "apple",
    image: bytes | None = PNG_BYTES,
    created_at: datetime | None = None,
) -> HistoryEntry:
    return HistoryEntry(
        id=uuid4(),
        created_at=created_at or datetime.now(tz=UTC),
        record=make_record(food_name),
        source_image=image,
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        history_dir=str(tmp_path / "history"),
        max_upload_bytes=1024,
    )


@pytest.fixture
def history_backend() -> InMemoryHistoryBackend:
    return InMemoryHistoryBackend()


@pytest.fixture
def history_store(history_backend: InMemoryHistoryBackend) -> HistoryStore:
    return HistoryStore(backend=history_backend)


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def container(
    settings: Settings,
    history_store: HistoryStore,
    model_client: FakeModelClient,
) -> AppContainer:
    analysis_service = AnalysisService(
        client=model_client,
        history=history_store,
        model=settings.openai_model,
        max_tokens=settings.openai_max_tokens,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        history_store=history_store,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
