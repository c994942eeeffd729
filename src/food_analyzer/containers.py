"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from food_analyzer.adapters.file_history_backend import FileHistoryBackend
from food_analyzer.adapters.openai_chat_client import OpenAIChatClient
from food_analyzer.config import Settings
from food_analyzer.services.analysis import AnalysisService
from food_analyzer.services.history import HistoryStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    history_store: HistoryStore
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    history_store = HistoryStore(
        backend=FileHistoryBackend(Path(resolved_settings.history_dir))
    )
    model_client = OpenAIChatClient.create(
        api_key=resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.openai_timeout_seconds,
    )
    analysis_service = AnalysisService(
        client=model_client,
        history=history_store,
        model=resolved_settings.openai_model,
        max_tokens=resolved_settings.openai_max_tokens,
    )

    async def close_resources() -> None:
        await model_client.close()

    return AppContainer(
        settings=resolved_settings,
        history_store=history_store,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
