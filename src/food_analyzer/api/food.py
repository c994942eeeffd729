"""Food analysis and history endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from food_analyzer.domain.errors import InvalidUploadError
from food_analyzer.services.analysis import detect_mime_type
from food_analyzer.services.speech import build_speech_text

if TYPE_CHECKING:
    from food_analyzer.containers import AppContainer
    from food_analyzer.domain.history import HistoryEntry

router = APIRouter(prefix="/api", tags=["food"])


@router.get("/test")
async def api_test() -> dict[str, str]:
    """Connectivity check for clients."""
    return {"message": "Food analysis API is available"}


@router.post("/analyze-food")
async def analyze_food(
    request: Request, food_image: UploadFile = File(alias="foodImage")
) -> dict[str, object]:
    """Analyze an uploaded food photo and store the result."""
    container: AppContainer = request.app.state.container
    image_bytes = await _read_upload(food_image, container.settings.max_upload_bytes)
    outcome = await container.analysis_service.analyze(image_bytes)
    result = outcome.insert_result
    return {
        "success": True,
        "data": outcome.entry.record.to_wire(),
        "entryId": str(outcome.entry.id),
        "createdAt": outcome.entry.created_at.isoformat(),
        "persisted": result.persisted,
        "warning": (
            None
            if result.persisted
            else "This result may not be kept after a restart."
        ),
    }


@router.get("/history")
async def list_history(
    request: Request, limit: int | None = None
) -> dict[str, object]:
    """Return recent analyses, newest first."""
    container: AppContainer = request.app.state.container
    page_size = limit if limit is not None else container.settings.history_page_size
    entries = container.history_store.entries[: max(page_size, 0)]
    return {"success": True, "data": [_entry_summary(entry) for entry in entries]}


@router.delete("/history")
async def clear_history(request: Request) -> dict[str, object]:
    """Remove every stored analysis."""
    container: AppContainer = request.app.state.container
    container.history_store.clear_all()
    return {"success": True}


@router.get("/history/{entry_id}")
async def history_detail(entry_id: UUID, request: Request) -> dict[str, object]:
    """Return a stored analysis with its spoken summary."""
    entry = _require_entry(request, entry_id)
    return {
        "success": True,
        "data": {
            **_entry_summary(entry),
            "record": entry.record.to_wire(),
            "speechText": build_speech_text(entry.record),
        },
    }


@router.get("/history/{entry_id}/image")
async def history_image(entry_id: UUID, request: Request) -> Response:
    """Return the photo an analysis was produced from."""
    entry = _require_entry(request, entry_id)
    if entry.source_image is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Response(
        content=entry.source_image,
        media_type=detect_mime_type(entry.source_image),
    )


async def _read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise InvalidUploadError("Only image uploads are supported")
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise InvalidUploadError("Image exceeds the upload limit", too_large=True)
    if not data:
        raise InvalidUploadError("Image is empty")
    return data


def _require_entry(request: Request, entry_id: UUID) -> HistoryEntry:
    container: AppContainer = request.app.state.container
    entry = container.history_store.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return entry


def _entry_summary(entry: HistoryEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "createdAt": entry.created_at.isoformat(),
        "foodName": entry.record.food_name,
        "hasImage": entry.source_image is not None,
    }
