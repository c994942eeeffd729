"""Tests for container wiring."""

import asyncio

from food_analyzer.adapters.file_history_backend import FileHistoryBackend
from food_analyzer.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.analysis_service.history is container.history_store
    assert isinstance(container.history_store.backend, FileHistoryBackend)
    assert container.analysis_service.model == settings.openai_model
    asyncio.run(container.close_resources())
