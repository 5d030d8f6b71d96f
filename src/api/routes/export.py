"""Presentation export API endpoints."""
import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from sse_starlette.sse import EventSourceResponse

from src.core import ExportFailed
from src.models import GenerationProgress
from src.services import get_chat_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/export", tags=["export"])


@router.post("/stream")
async def export_stream() -> EventSourceResponse:
    """
    SSE endpoint that renders the current deck and streams progress.

    Streams events as:
    - progress: {"current", "total", "status"} once per slide, then finalizing
    - done: Artifact ready at /api/export/download
    - error: Export failed, no artifact was produced
    """
    service = get_chat_service()

    async def event_generator():
        queue: asyncio.Queue[GenerationProgress] = asyncio.Queue()
        task = asyncio.create_task(service.export(on_progress=queue.put_nowait))

        while not task.done():
            getter = asyncio.ensure_future(queue.get())
            finished, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
            if getter in finished:
                progress = getter.result()
                yield {
                    "event": "progress",
                    "data": progress.model_dump_json(),
                }
            else:
                getter.cancel()

        while not queue.empty():
            yield {
                "event": "progress",
                "data": queue.get_nowait().model_dump_json(),
            }

        try:
            artifact = task.result()
        except ExportFailed as e:
            yield {
                "event": "error",
                "data": json.dumps({"type": "error", "message": e.user_message, "detail": e.detail}),
            }
            return

        yield {
            "event": "done",
            "data": json.dumps({
                "type": "done",
                "filename": artifact.filename,
                "slide_count": artifact.slide_count,
                "size": len(artifact.data),
                "download_url": "/api/export/download",
            }),
        }

    return EventSourceResponse(event_generator())


@router.post("")
async def export_deck() -> dict[str, Any]:
    """Non-streaming export; renders only when the deck changed."""
    service = get_chat_service()
    try:
        artifact = await service.export()
    except ExportFailed as e:
        logger.error(f"Export error: {e}")
        raise HTTPException(status_code=500, detail=e.user_message)

    return {
        "filename": artifact.filename,
        "slide_count": artifact.slide_count,
        "size": len(artifact.data),
        "download_url": "/api/export/download",
    }


@router.get("/download")
async def download_deck() -> Response:
    """Download the last exported presentation."""
    artifact = get_chat_service().download()
    if artifact is None:
        raise HTTPException(status_code=404, detail="No presentation exported yet")

    return Response(
        content=artifact.data,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )
