import json
from dataclasses import asdict
from typing import Any, Dict, List

from fastapi import HTTPException, Request
from fastapi.responses import Response

from dal.history_dal import HistoryStore
from models.analysis_record import IMAGE_ANALYSIS, AnalysisRecord
from services.openai.health_report import HealthReportGenerator
from services.thumbnail_generator import ThumbnailGenerator


def _history(request: Request) -> HistoryStore:
    return request.app.state.history_store


def _summary(record: AnalysisRecord) -> Dict[str, Any]:
    """Listing view of a record: everything but the embedded media."""
    return {
        "id": record.id,
        "type": record.type,
        "output": asdict(record.output),
        "date": record.date.isoformat(),
        "thumbnail_url": f"/history/{record.id}/thumbnail" if record.type == IMAGE_ANALYSIS else None,
    }


async def _record_or_404(request: Request, record_id: str) -> AnalysisRecord:
    record = await _history(request).get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return record


async def list_history(request: Request) -> List[Dict[str, Any]]:
    """Return all analyses, newest first."""
    return [_summary(record) for record in await _history(request).list()]


async def get_history_item(request: Request, record_id: str) -> Dict[str, Any]:
    """Return one analysis including its original media."""
    return (await _record_or_404(request, record_id)).to_dict()


async def get_thumbnail(request: Request, record_id: str) -> Response:
    """Render the photo of an image analysis as a PNG thumbnail.

    Raises:
        HTTPException(404) if the record is missing or is not an image analysis.
    """
    record = await _record_or_404(request, record_id)
    if record.type != IMAGE_ANALYSIS:
        raise HTTPException(status_code=404, detail="Thumbnail not available for this analysis")
    try:
        png_bytes = ThumbnailGenerator().create_thumbnail(record.input)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return Response(content=png_bytes, media_type="image/png")


async def generate_report(request: Request, record_id: str) -> Dict[str, Any]:
    """Generate a health report from a stored analysis."""
    record = await _record_or_404(request, record_id)
    generator = HealthReportGenerator(request.app.state.openai_client)
    try:
        report = await generator.generate(
            plant_name="User's Plant",
            plant_description="A plant from the user's history.",
            historical_data=json.dumps(asdict(record.output)),
        )
    except Exception as exc:
        raise HTTPException(status_code=502, detail="Failed to generate health report. Please try again.") from exc
    return {"id": record.id, **report}


async def clear_history(request: Request) -> Dict[str, Any]:
    await _history(request).clear()
    return {"cleared": True}
