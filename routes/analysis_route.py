"""FastAPI routes for photo and voice analyses."""

from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers.analysis_controller import analyze_image, analyze_voice, improve_recommendation

router = APIRouter(prefix="/analyses", tags=["analyses"])


class FeedbackPayload(BaseModel):
    plant_name: str = "the user's plant"
    recommendation: str
    feedback: str
    historical_data: Optional[str] = None


@router.post("/image", summary="Diagnose a plant photo")
async def post_image_analysis(
    request: Request,
    image: UploadFile = File(...),
    description: Optional[str] = Form(None),
    history: Optional[str] = Form(None),
    language: Optional[str] = Form(None),
):
    """Return the diagnosis and treatment recommendations for an uploaded photo."""
    try:
        return await analyze_image(request, image, description, history, language)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/voice", summary="Recommendations from a voice recording")
async def post_voice_analysis(
    request: Request,
    audio: UploadFile = File(...),
    language: Optional[str] = Form(None),
):
    try:
        return await analyze_voice(request, audio, language)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/feedback", summary="Improve a recommendation with feedback")
async def post_feedback(request: Request, payload: FeedbackPayload):
    return await improve_recommendation(
        request, payload.plant_name, payload.recommendation, payload.feedback, payload.historical_data
    )
