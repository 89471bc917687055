from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, UploadFile

from dal.history_dal import HistoryStore
from models.analysis_record import IMAGE_ANALYSIS, VOICE_ANALYSIS
from services.openai.plant_diagnosis import PlantDiagnosisService
from services.openai.recommendation_improver import RecommendationImprover
from services.openai.voice_advisor import VoiceAdvisor
from utils.languages import resolve_language
from utils.media_validation import read_audio_bytes, read_image_bytes, to_data_uri


async def analyze_image(
    request: Request,
    file: UploadFile,
    description: Optional[str] = None,
    history: Optional[str] = None,
    language: Optional[str] = None,
) -> Dict[str, Any]:
    """Diagnose an uploaded plant photo and record it in the history.

    Args:
        request: FastAPI Request object (used to access app.state for shared clients).
        file: Uploaded plant photo (JPEG, PNG, WebP or GIF).
        description: Optional symptoms or context typed by the user.
        history: Optional earlier diagnoses and treatments of the plant.
        language: Locale for the diagnosis text.

    Returns:
        A dict containing: id, diagnosis, treatment_recommendations, language,
        input_tokens, output_tokens, latency.

    Raises:
        HTTPException(502) if the diagnosis could not be produced; nothing is stored then.
    """
    image_bytes, mime_type = await read_image_bytes(file)
    image_reference = to_data_uri(image_bytes, mime_type)
    language = resolve_language(language)

    service = PlantDiagnosisService(request.app.state.openai_client)
    history_store: HistoryStore = request.app.state.history_store

    try:
        result = await service.diagnose(image_reference, description, history=history, language=language)
    except Exception as exc:
        raise HTTPException(status_code=502, detail="Failed to analyze image. Please try again.") from exc

    diagnosis = result["diagnosis"]
    record = await history_store.add(IMAGE_ANALYSIS, image_reference, diagnosis)

    return {
        "id": record.id,
        "diagnosis": diagnosis.diagnosis,
        "treatment_recommendations": diagnosis.treatment_recommendations,
        "language": language,
        "input_tokens": int(result.get("input_tokens") or 0),
        "output_tokens": int(result.get("output_tokens") or 0),
        "latency": float(result.get("latency") or 0.0),
    }


async def analyze_voice(request: Request, audio_file: UploadFile, language: Optional[str] = None) -> Dict[str, Any]:
    """Turn a spoken plant description into recommendations and record it.

    Raises:
        HTTPException(422) if nothing intelligible was said,
        HTTPException(502) if the provider failed.
    """
    audio_bytes, mime_type = await read_audio_bytes(audio_file)
    audio_reference = to_data_uri(audio_bytes, mime_type)
    language = resolve_language(language)

    advisor = VoiceAdvisor(request.app.state.openai_client)
    history_store: HistoryStore = request.app.state.history_store

    try:
        result = await advisor.advise(audio_reference, language)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=502, detail="Failed to process voice input. Please try again.") from exc

    recommendation = result["recommendation"]
    record = await history_store.add(VOICE_ANALYSIS, audio_reference, recommendation)

    return {
        "id": record.id,
        "transcript": result["transcript"],
        "text": recommendation.text,
        "language": language,
    }


async def improve_recommendation(
    request: Request,
    plant_name: str,
    recommendation: str,
    feedback: str,
    historical_data: Optional[str] = None,
) -> Dict[str, Any]:
    """Return a recommendation rewritten to address the user's feedback."""
    if not feedback.strip():
        raise HTTPException(status_code=400, detail="Feedback text is required.")

    improver = RecommendationImprover(request.app.state.openai_client)
    try:
        improved = await improver.improve(plant_name, recommendation, feedback, historical_data)
    except Exception as exc:
        raise HTTPException(status_code=502, detail="Could not process feedback. Please try again.") from exc
    return {"improved_recommendation": improved}
